"""llmbridge gateway - canonical protocol adapters for upstream LLM providers.

Network I/O, retries and credentials belong to the HTTP layer that calls
into this package. The gateway only transforms payloads:

1. `transform_request` before sending upstream
2. `transform_response` or repeated `transform_stream_chunk` while reading the reply
3. `transform_error` whenever the upstream call fails or returns non-2xx
"""

from llmbridge.gateway.config import ManagedModeConfig, ProviderConfig, load_config
from llmbridge.gateway.errors import ERROR_KINDS, UpstreamError
from llmbridge.gateway.transforms.registry import TransformerRegistry, create_registry

__all__ = [
    "ERROR_KINDS",
    "ManagedModeConfig",
    "ProviderConfig",
    "TransformerRegistry",
    "UpstreamError",
    "create_registry",
    "load_config",
]
