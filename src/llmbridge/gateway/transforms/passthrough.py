"""Passthrough transformer for Anthropic-compatible upstreams.

The client and upstream already share the canonical protocol, so requests,
responses and stream units pass through unchanged (as deep copies). This
is also the registry's fallback for unknown transformer names.
"""

from __future__ import annotations

from typing import Any

from llmbridge.gateway.config import ProviderConfig
from llmbridge.gateway.errors import (
    ANTHROPIC_ERROR_ALIASES,
    ERROR_KINDS,
    describe_failure,
    error_envelope,
    error_kind_for_status,
)
from llmbridge.gateway.transforms.base import adapter_logger, as_provider, check_provider, clone
from llmbridge.gateway.transforms.types import ValidationResult
from llmbridge.gateway.transforms.wire import AnthropicErrorDetail, parse_wire

PASSTHROUGH_NAME = "anthropic"


class PassthroughTransformer:
    """Identity transformer."""

    name = PASSTHROUGH_NAME

    def __init__(self) -> None:
        self._log = adapter_logger(self.name)

    def transform_request(self, request: Any, provider: ProviderConfig) -> Any:
        self._log.debug("Request passthrough, model=%s", _get(request, "model"))
        return clone(request)

    def transform_response(self, response: Any, provider: ProviderConfig) -> Any:
        self._log.debug(
            "Response passthrough, id=%s model=%s", _get(response, "id"), _get(response, "model")
        )
        return clone(response)

    def transform_stream_chunk(self, chunk: str, provider: ProviderConfig) -> str | None:
        return chunk

    def transform_error(self, error: Any, provider: ProviderConfig) -> dict[str, Any]:
        failure = describe_failure(error)

        if failure.error is not None:
            detail = parse_wire(AnthropicErrorDetail, failure.error, self._log)
            if detail.type in ERROR_KINDS:
                kind = detail.type
            elif detail.type in ANTHROPIC_ERROR_ALIASES:
                kind = ANTHROPIC_ERROR_ALIASES[detail.type]
            elif failure.status is not None:
                kind = error_kind_for_status(failure.status)
            else:
                kind = "api_error"
            return error_envelope(
                kind,
                detail.message or failure.message or "Upstream API error",
                detail.code,
            )

        if failure.status is not None:
            return error_envelope(
                error_kind_for_status(failure.status),
                failure.status_text or failure.message or "Upstream API error",
            )

        return error_envelope("api_error", failure.message or "Unknown upstream error")

    def validate_config(self, provider: ProviderConfig) -> ValidationResult:
        return check_provider(as_provider(provider), "Anthropic")

    def get_default_config(self) -> dict[str, Any]:
        return {
            "name": "Anthropic",
            "type": "anthropic",
            "api_base_url": "https://api.anthropic.com",
            "transformer": PASSTHROUGH_NAME,
            "timeout": 60000,
            "max_retries": 3,
            "retry_delay": 1000,
        }


def _get(payload: Any, key: str) -> Any:
    return payload.get(key) if isinstance(payload, dict) else None
