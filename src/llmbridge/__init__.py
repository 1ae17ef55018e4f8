"""llmbridge - Provider transformers for a canonical chat-completion protocol.

A client speaking the Anthropic Messages format can talk to unrelated
upstream providers through bidirectional adapters:

    gateway/transforms/   Canonical <-> provider request/response/stream/error adapters
    gateway/config.py     Provider and managed-mode configuration
    gateway/errors.py     Canonical error taxonomy
    frontends/cli/        Developer CLI

Quick Start:
    >>> from llmbridge.gateway import ProviderConfig, create_registry
    >>>
    >>> registry = create_registry()
    >>> provider = ProviderConfig(id="ds", transformer="deepseek", api_key="sk-...")
    >>> transformer = registry.resolve_for(provider)
    >>> upstream = transformer.transform_request(
    ...     {"model": "claude-3-5-sonnet-20241022", "messages": [], "max_tokens": 8192},
    ...     provider,
    ... )
    >>> upstream["model"], upstream["max_tokens"]
    ('deepseek-chat', 4096)
"""

__version__ = "0.1.0"
