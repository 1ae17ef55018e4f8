"""OpenRouter transformer.

OpenRouter aggregates many model vendors behind an OpenAI-compatible API
and accepts multimodal input. Requests keep every canonical field; only
the model name and `max_tokens` floor are patched, and OpenAI-style
`image_url` data-URI parts are folded into canonical image parts.

API docs: https://openrouter.ai/docs
"""

from __future__ import annotations

from typing import Any

from llmbridge.gateway.config import ProviderConfig
from llmbridge.gateway.errors import ErrorKind
from llmbridge.gateway.transforms import openai_style
from llmbridge.gateway.transforms.base import adapter_logger, as_provider, check_provider, clone
from llmbridge.gateway.transforms.types import ValidationResult

OPENROUTER_DEFAULT_MODEL = "anthropic/claude-3.5-sonnet"
OPENROUTER_RESPONSE_MODEL = "openrouter-default"

MODEL_MAPPING: dict[str, str] = {
    "claude-3-5-sonnet-20241022": "anthropic/claude-3.5-sonnet",
    "claude-3-5-haiku-20241022": "anthropic/claude-3.5-haiku",
    "claude-3-opus-20240229": "anthropic/claude-3-opus",
    "claude-3-sonnet-20240229": "anthropic/claude-3-sonnet",
    "claude-3-haiku-20240307": "anthropic/claude-3-haiku",
}

ERROR_CODES: dict[str, ErrorKind] = {
    "invalid_api_key": "authentication_error",
    "insufficient_credits": "rate_limit_error",
    "model_not_found": "invalid_request_error",
    "rate_limit_exceeded": "rate_limit_error",
    "content_policy_violation": "content_policy_error",
    "content_filter": "content_policy_error",
}


def _normalize_images(content: Any) -> Any:
    """Fold `image_url` parts into canonical images and drop images without a source object."""
    if not isinstance(content, list):
        return content
    parts = []
    for part in content:
        if isinstance(part, dict) and part.get("type") == "image_url":
            part = openai_style.image_url_to_part(part)
        elif (
            isinstance(part, dict)
            and part.get("type") == "image"
            and not isinstance(part.get("source"), dict)
        ):
            continue
        parts.append(part)
    return parts


class OpenRouterTransformer:
    """Canonical <-> OpenRouter chat completions."""

    name = "openrouter"

    def __init__(self) -> None:
        self._log = adapter_logger(self.name)

    def transform_request(self, request: Any, provider: ProviderConfig) -> dict[str, Any]:
        transformed = clone(dict(request))

        transformed["model"] = openai_style.map_model(
            request.get("model"), MODEL_MAPPING, OPENROUTER_DEFAULT_MODEL
        )

        max_tokens = transformed.get("max_tokens")
        if isinstance(max_tokens, (int, float)) and not isinstance(max_tokens, bool):
            transformed["max_tokens"] = max(1, max_tokens)

        messages = transformed.get("messages")
        if isinstance(messages, list):
            for msg in messages:
                if isinstance(msg, dict) and "content" in msg:
                    msg["content"] = _normalize_images(msg["content"])

        self._log.debug(
            "Request transformed: model=%s -> %s", request.get("model"), transformed["model"]
        )
        return transformed

    def transform_response(self, response: Any, provider: ProviderConfig) -> dict[str, Any]:
        return openai_style.to_canonical_response(
            response,
            default_model=OPENROUTER_RESPONSE_MODEL,
            log=self._log,
            allow_images=True,
        )

    def transform_stream_chunk(self, chunk: str, provider: ProviderConfig) -> str | None:
        return openai_style.transform_sse_line(chunk, self._log)

    def transform_error(self, error: Any, provider: ProviderConfig) -> dict[str, Any]:
        return openai_style.to_canonical_error(
            error,
            label="OpenRouter",
            error_codes=ERROR_CODES,
            log=self._log,
            passthrough_fields=("ratelimit",),
        )

    def validate_config(self, provider: ProviderConfig) -> ValidationResult:
        return check_provider(
            as_provider(provider),
            "OpenRouter",
            url_marker="openrouter.ai",
            key_prefix="sk-or",
        )

    def get_default_config(self) -> dict[str, Any]:
        return {
            "name": "OpenRouter",
            "type": "openrouter",
            "api_base_url": "https://openrouter.ai/api/v1",
            "transformer": self.name,
            "timeout": 60000,
            "max_retries": 3,
            "retry_delay": 1000,
        }
