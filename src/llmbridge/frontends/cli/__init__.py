"""CLI frontend for llmbridge.

Commands:
    llmbridge transformers    List registered transformers
    llmbridge defaults        Show a transformer's default provider config
    llmbridge validate        Check configured providers
    llmbridge transform       Run a transform on a payload file

Example:
    $ llmbridge transform -t deepseek request request.json
    $ llmbridge validate --config ~/.ccb/managed-mode-config.json
"""

from llmbridge.frontends.cli.main import main

__all__ = ["main"]
