"""Provider transformers for format conversion.

Each transformer converts between the canonical (Anthropic Messages)
format and one upstream provider family.
"""

from .base import Transformer, clone
from .deepseek import DeepSeekTransformer
from .gemini import GeminiTransformer
from .openrouter import OpenRouterTransformer
from .passthrough import PASSTHROUGH_NAME, PassthroughTransformer
from .registry import TransformerRegistry, builtin_transformers, create_registry
from .types import (
    CanonicalErrorEnvelope,
    CanonicalMessage,
    CanonicalRequest,
    CanonicalResponse,
    ContentPart,
    StopReason,
    ValidationResult,
)

__all__ = [
    # Contract
    "Transformer",
    "clone",
    # Transformers
    "DeepSeekTransformer",
    "GeminiTransformer",
    "OpenRouterTransformer",
    "PassthroughTransformer",
    "PASSTHROUGH_NAME",
    # Registry
    "TransformerRegistry",
    "builtin_transformers",
    "create_registry",
    # Types
    "CanonicalErrorEnvelope",
    "CanonicalMessage",
    "CanonicalRequest",
    "CanonicalResponse",
    "ContentPart",
    "StopReason",
    "ValidationResult",
]
