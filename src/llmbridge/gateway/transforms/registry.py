"""Name -> transformer lookup.

The registry starts uninitialized and fills itself with the built-in
transformers on first access. Resolution never fails: an empty name or
an unknown name resolves to the passthrough transformer, trading strict
correctness for availability.

Create one registry at process start with `create_registry()` and hand
it to whatever needs to resolve providers:

    registry = create_registry()
    transformer = registry.resolve_for(provider)
    upstream_request = transformer.transform_request(body, provider)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable

from llmbridge.gateway.config import ProviderConfig
from llmbridge.gateway.transforms.base import Transformer
from llmbridge.gateway.transforms.deepseek import DeepSeekTransformer
from llmbridge.gateway.transforms.gemini import GeminiTransformer
from llmbridge.gateway.transforms.openrouter import OpenRouterTransformer
from llmbridge.gateway.transforms.passthrough import PASSTHROUGH_NAME, PassthroughTransformer

logger = logging.getLogger(__name__)


def builtin_transformers() -> list[Transformer]:
    """Fresh instances of every built-in transformer."""
    return [
        PassthroughTransformer(),
        OpenRouterTransformer(),
        DeepSeekTransformer(),
        GeminiTransformer(),
    ]


class TransformerRegistry:
    """Registry of transformers keyed by name.

    Lookups after initialization only read the mapping; registration
    appends or replaces entries and never removes them.
    """

    def __init__(
        self,
        builtins: Callable[[], Iterable[Transformer]] = builtin_transformers,
    ) -> None:
        self._builtins = builtins
        self._transformers: dict[str, Transformer] = {}
        self._ready = False
        self._init_lock = threading.Lock()

    @property
    def ready(self) -> bool:
        return self._ready

    def _ensure_ready(self) -> None:
        if self._ready:
            return
        with self._init_lock:
            if self._ready:
                return
            for transformer in self._builtins():
                self._transformers[transformer.name] = transformer
            self._ready = True
            logger.debug("Registered built-in transformers: %s", ", ".join(self._transformers))

    def resolve(self, name: str | None = None) -> Transformer:
        """Return the transformer for `name`, falling back to passthrough."""
        self._ensure_ready()
        if not name:
            return self._passthrough()

        transformer = self._transformers.get(name)
        if transformer is None:
            logger.warning(
                "Transformer %r not found, using default transformer (%s)",
                name,
                PASSTHROUGH_NAME,
            )
            return self._passthrough()
        return transformer

    def resolve_for(self, provider: ProviderConfig) -> Transformer:
        """Resolve the transformer configured for a provider."""
        return self.resolve(provider.transformer)

    def register(self, name: str, transformer: Transformer) -> None:
        """Register a transformer. An existing name is overwritten (last writer wins)."""
        self._ensure_ready()
        if name in self._transformers:
            logger.warning("Transformer %r already registered, overwriting", name)
        self._transformers[name] = transformer

    def list_names(self) -> list[str]:
        """All registered transformer names."""
        self._ensure_ready()
        return list(self._transformers)

    def __contains__(self, name: object) -> bool:
        self._ensure_ready()
        return name in self._transformers

    def _passthrough(self) -> Transformer:
        transformer = self._transformers.get(PASSTHROUGH_NAME)
        if transformer is None:
            # Custom built-in sets may omit passthrough
            transformer = PassthroughTransformer()
            self._transformers[PASSTHROUGH_NAME] = transformer
        return transformer


def create_registry() -> TransformerRegistry:
    """Build an initialized registry with the built-in transformers."""
    registry = TransformerRegistry()
    registry.list_names()
    return registry
