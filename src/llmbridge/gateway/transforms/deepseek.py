"""DeepSeek transformer.

DeepSeek exposes an OpenAI-compatible chat API with text-only input.
Requests are cloned and patched: model names are mapped, `temperature`
is removed, `max_tokens` is capped and multimodal content is flattened
to text.

API docs: https://platform.deepseek.com/api-docs/
"""

from __future__ import annotations

from typing import Any

from llmbridge.gateway.config import ProviderConfig
from llmbridge.gateway.errors import ErrorKind
from llmbridge.gateway.transforms import openai_style
from llmbridge.gateway.transforms.base import adapter_logger, as_provider, check_provider, clone
from llmbridge.gateway.transforms.types import ValidationResult

DEEPSEEK_DEFAULT_MODEL = "deepseek-chat"
DEEPSEEK_MAX_TOKENS = 4096

# Canonical model id -> DeepSeek model id
MODEL_MAPPING: dict[str, str] = {
    "claude-3-5-sonnet-20241022": "deepseek-chat",
    "claude-3-5-haiku-20241022": "deepseek-chat",
    "claude-3-opus-20240229": "deepseek-chat",
    "claude-3-sonnet-20240229": "deepseek-chat",
    "claude-3-haiku-20240307": "deepseek-chat",
    "gpt-4": "deepseek-chat",
    "gpt-4-turbo": "deepseek-chat",
    "gpt-3.5-turbo": "deepseek-chat",
    "deepseek-chat": "deepseek-chat",
    "deepseek-coder": "deepseek-coder",
    "deepseek-reasoner": "deepseek-reasoner",
}

ERROR_CODES: dict[str, ErrorKind] = {
    "invalid_api_key": "authentication_error",
    "insufficient_quota": "rate_limit_error",
    "model_not_found": "invalid_request_error",
    "rate_limit_exceeded": "rate_limit_error",
    "content_filter": "content_policy_error",
    "invalid_request": "invalid_request_error",
}


class DeepSeekTransformer:
    """Canonical <-> DeepSeek chat completions."""

    name = "deepseek"

    def __init__(self) -> None:
        self._log = adapter_logger(self.name)

    def transform_request(self, request: Any, provider: ProviderConfig) -> dict[str, Any]:
        transformed = clone(dict(request))

        transformed["model"] = openai_style.map_model(
            request.get("model"), MODEL_MAPPING, DEEPSEEK_DEFAULT_MODEL
        )

        # DeepSeek takes stream only when enabled and rejects the rest
        transformed.pop("stream", None)
        transformed.pop("temperature", None)
        if request.get("stream"):
            transformed["stream"] = True

        max_tokens = transformed.get("max_tokens")
        if isinstance(max_tokens, (int, float)) and not isinstance(max_tokens, bool):
            transformed["max_tokens"] = min(max_tokens, DEEPSEEK_MAX_TOKENS)

        messages = transformed.get("messages")
        if isinstance(messages, list):
            transformed["messages"] = [
                {
                    "role": "assistant" if msg.get("role") == "assistant" else "user",
                    "content": openai_style.flatten_text(msg.get("content")),
                }
                for msg in messages
                if isinstance(msg, dict)
            ]

        self._log.debug(
            "Request transformed: model=%s -> %s, max_tokens=%s",
            request.get("model"),
            transformed["model"],
            transformed.get("max_tokens"),
        )
        return transformed

    def transform_response(self, response: Any, provider: ProviderConfig) -> dict[str, Any]:
        return openai_style.to_canonical_response(
            response,
            default_model=DEEPSEEK_DEFAULT_MODEL,
            log=self._log,
        )

    def transform_stream_chunk(self, chunk: str, provider: ProviderConfig) -> str | None:
        return openai_style.transform_sse_line(chunk, self._log)

    def transform_error(self, error: Any, provider: ProviderConfig) -> dict[str, Any]:
        return openai_style.to_canonical_error(
            error,
            label="DeepSeek",
            error_codes=ERROR_CODES,
            log=self._log,
        )

    def validate_config(self, provider: ProviderConfig) -> ValidationResult:
        return check_provider(
            as_provider(provider),
            "DeepSeek",
            url_marker="deepseek.com",
            key_prefix="sk-",
        )

    def get_default_config(self) -> dict[str, Any]:
        return {
            "name": "DeepSeek",
            "type": "deepseek",
            "api_base_url": "https://api.deepseek.com/v1",
            "transformer": self.name,
            "timeout": 60000,
            "max_retries": 3,
            "retry_delay": 1000,
        }
