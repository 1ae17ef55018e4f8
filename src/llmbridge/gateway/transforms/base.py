"""Transformer contract and the helpers every adapter composes.

An adapter converts a canonical request into a provider request, converts
the provider reply (whole or streamed) back into the canonical shape, and
normalizes provider failures into the canonical error envelope.

All operations are synchronous and pure. They never keep state between
calls and never mutate their inputs, so one adapter instance can serve
any number of concurrent requests.
"""

from __future__ import annotations

import copy
import logging
import time
import uuid
from collections.abc import Mapping
from typing import Any, Protocol, TypeVar, runtime_checkable

from llmbridge.gateway.config import ProviderConfig
from llmbridge.gateway.transforms.types import ValidationResult

T = TypeVar("T")


@runtime_checkable
class Transformer(Protocol):
    """Contract implemented by every provider adapter."""

    name: str

    def transform_request(
        self, request: Mapping[str, Any], provider: ProviderConfig
    ) -> dict[str, Any]:
        """Canonical request -> provider request. Unsupported fields are dropped."""
        ...

    def transform_response(
        self, response: Any, provider: ProviderConfig
    ) -> dict[str, Any]:
        """Provider response -> canonical response. Always structurally valid."""
        ...

    def transform_stream_chunk(self, chunk: str, provider: ProviderConfig) -> str | None:
        """One streaming unit -> canonical unit, the input unchanged, or None to skip.

        Never raises; parse failures return the input unmodified.
        """
        ...

    def transform_error(self, error: Any, provider: ProviderConfig) -> dict[str, Any]:
        """Any failure input -> canonical error envelope. Total."""
        ...

    def validate_config(self, provider: ProviderConfig) -> ValidationResult:
        """Advisory sanity checks for the configuration UI."""
        ...

    def get_default_config(self) -> dict[str, Any]:
        """Seed values for a new provider of this type."""
        ...


def clone(obj: T) -> T:
    """Structural deep copy of a request or response."""
    return copy.deepcopy(obj)


def adapter_logger(name: str) -> logging.LoggerAdapter:
    """Logger that prefixes every message with `[name]`."""
    return _PrefixAdapter(logging.getLogger(f"llmbridge.gateway.transforms.{name}"), name)


class _PrefixAdapter(logging.LoggerAdapter):
    def __init__(self, logger: logging.Logger, prefix: str):
        super().__init__(logger, {"transformer": prefix})
        self._prefix = prefix

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        kwargs.setdefault("extra", {}).update(self.extra)
        return f"[{self._prefix}] {msg}", kwargs


def generate_message_id() -> str:
    """Generate a message ID in canonical format: msg_<epoch ms>_<random hex>."""
    return f"msg_{int(time.time() * 1000)}_{uuid.uuid4().hex[:12]}"


def as_provider(provider: ProviderConfig | Mapping[str, Any] | None) -> ProviderConfig:
    """Accept a ProviderConfig or its raw JSON form."""
    if isinstance(provider, ProviderConfig):
        return provider
    if provider is None:
        return ProviderConfig()
    return ProviderConfig.model_validate(dict(provider))


def check_provider(
    provider: ProviderConfig,
    label: str,
    url_marker: str | None = None,
    key_prefix: str | None = None,
) -> ValidationResult:
    """Common config checks: base URL and key present, optional URL/key conventions."""
    errors: list[str] = []

    if not provider.api_base_url:
        errors.append(f"{label} API base URL must not be empty")
    if not provider.api_key:
        errors.append(f"{label} API key must not be empty")

    if key_prefix and provider.api_key and not provider.api_key.startswith(key_prefix):
        errors.append(f"{label} API key looks malformed, it should start with {key_prefix}")
    if url_marker and provider.api_base_url and url_marker not in provider.api_base_url:
        errors.append(f"{label} API base URL should contain {url_marker}")

    return ValidationResult(errors=tuple(errors))


def token_count(value: Any) -> int:
    """Usage counters default to 0 and are never negative."""
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return max(value, 0)
