"""Google Gemini transformer.

Gemini's generateContent API differs structurally from the canonical
protocol:
- Request: {contents: [{role, parts}], generationConfig, safetySettings, systemInstruction}
- Roles: "user" and "model" (assistant)
- Response: {candidates: [{content: {parts}, finishReason}], usageMetadata, modelVersion}
- Streaming: whole JSON objects, recognized by the "candidates" key rather than an SSE prefix
- Errors: {"error": {code, message, status, details}} with gRPC status names

API docs: https://ai.google.dev/docs
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from llmbridge.gateway.config import ProviderConfig
from llmbridge.gateway.errors import (
    ErrorKind,
    describe_failure,
    error_envelope,
    error_kind_for_status,
)
from llmbridge.gateway.sse import (
    SSE_DONE,
    SSE_DONE_PAYLOAD,
    dumps_compact,
    format_sse_data,
    sse_payload,
)
from llmbridge.gateway.transforms import openai_style
from llmbridge.gateway.transforms.base import (
    adapter_logger,
    as_provider,
    check_provider,
    clone,
    generate_message_id,
    token_count,
)
from llmbridge.gateway.transforms.types import StopReason, ValidationResult
from llmbridge.gateway.transforms.wire import (
    GeminiErrorDetail,
    GeminiPart,
    GeminiResponse,
    parse_wire,
)

GEMINI_DEFAULT_MODEL = "gemini-1.5-pro"

# Substring that marks a streamed response object
CANDIDATES_MARKER = '"candidates"'

MODEL_MAPPING: dict[str, str] = {
    "claude-3-5-sonnet-20241022": "gemini-1.5-pro",
    "claude-3-5-haiku-20241022": "gemini-1.5-flash",
    "claude-3-opus-20240229": "gemini-1.5-pro",
    "claude-3-sonnet-20240229": "gemini-1.5-pro",
    "claude-3-haiku-20240307": "gemini-1.5-flash",
    "gpt-4": "gemini-1.5-pro",
    "gpt-4-turbo": "gemini-1.5-pro",
    "gpt-3.5-turbo": "gemini-1.5-flash",
    "gemini-1.5-pro": "gemini-1.5-pro",
    "gemini-1.5-flash": "gemini-1.5-flash",
}

# Unrecognized (but present) reasons map to end_turn, not None
FINISH_REASON_MAP: dict[str, StopReason] = {
    "FINISH_REASON_STOP": "end_turn",
    "FINISH_REASON_MAX_TOKENS": "max_tokens",
    "FINISH_REASON_SAFETY": "stop_sequence",
    "FINISH_REASON_RECITATION": "stop_sequence",
    "FINISH_REASON_OTHER": "end_turn",
    "STOP": "end_turn",
    "MAX_TOKENS": "max_tokens",
    "SAFETY": "stop_sequence",
    "RECITATION": "stop_sequence",
    "OTHER": "end_turn",
    "BLOCKLIST": "stop_sequence",
    "PROHIBITED_CONTENT": "stop_sequence",
    "SPII": "stop_sequence",
}
DEFAULT_STOP_REASON: StopReason = "end_turn"

ERROR_STATUS_MAP: dict[str, ErrorKind] = {
    "INVALID_ARGUMENT": "invalid_request_error",
    "FAILED_PRECONDITION": "invalid_request_error",
    "PERMISSION_DENIED": "permission_error",
    "UNAUTHENTICATED": "authentication_error",
    "RESOURCE_EXHAUSTED": "rate_limit_error",
    "NOT_FOUND": "invalid_request_error",
    "ALREADY_EXISTS": "invalid_request_error",
    "ABORTED": "api_error",
    "OUT_OF_RANGE": "invalid_request_error",
    "UNIMPLEMENTED": "api_error",
    "INTERNAL": "api_error",
    "UNAVAILABLE": "api_error",
    "DATA_LOSS": "api_error",
    "DEADLINE_EXCEEDED": "api_error",
}

HTTP_STATUS_OVERRIDES: dict[int, ErrorKind] = {400: "invalid_request_error"}

# Most permissive threshold for every category so ordinary technical
# content is not blocked by default moderation
SAFETY_SETTINGS: tuple[dict[str, str], ...] = (
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_NONE"},
)


def map_finish_reason(reason: str | None) -> StopReason | None:
    """Map a Gemini finishReason. Missing -> None, unrecognized -> end_turn."""
    if not reason:
        return None
    return FINISH_REASON_MAP.get(reason, DEFAULT_STOP_REASON)


def map_role(role: Any) -> str:
    return "model" if role == "assistant" else "user"


def _to_gemini_parts(content: Any) -> list[dict[str, Any]]:
    if isinstance(content, str):
        return [{"text": content}]

    parts: list[dict[str, Any]] = []
    for part in content if isinstance(content, list) else []:
        if not isinstance(part, dict):
            continue
        if part.get("type") == "text":
            parts.append({"text": openai_style.part_text(part)})
        elif part.get("type") == "image":
            source = part.get("source")
            # Only inline base64 images have a Gemini equivalent
            if not isinstance(source, dict):
                continue
            if source.get("type", "base64") == "base64" and source.get("data"):
                parts.append(
                    {
                        "inline_data": {
                            "mime_type": source.get("media_type"),
                            "data": source.get("data"),
                        }
                    }
                )
    return parts


def _to_canonical_part(part: GeminiPart) -> dict[str, Any] | None:
    if part.text:
        return {"type": "text", "text": part.text}
    if part.inline_data is not None:
        return {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": part.inline_data.mime_type,
                "data": part.inline_data.data,
            },
        }
    return None


def _strip_array_framing(text: str) -> str:
    # Non-SSE streams deliver a JSON array one element at a time
    return text.strip().lstrip("[,").rstrip("],").strip()


class GeminiTransformer:
    """Canonical <-> Gemini generateContent."""

    name = "gemini"

    def __init__(self) -> None:
        self._log = adapter_logger(self.name)

    def transform_request(self, request: Any, provider: ProviderConfig) -> dict[str, Any]:
        contents = [
            {"role": map_role(msg.get("role")), "parts": _to_gemini_parts(msg.get("content"))}
            for msg in request.get("messages") or []
            if isinstance(msg, dict)
        ]

        generation_config: dict[str, Any] = {}
        if request.get("max_tokens"):
            generation_config["maxOutputTokens"] = request["max_tokens"]
        if request.get("temperature") is not None:
            generation_config["temperature"] = request["temperature"]
        if request.get("top_p") is not None:
            generation_config["topP"] = request["top_p"]
        if request.get("stream"):
            generation_config["candidateCount"] = 1

        transformed: dict[str, Any] = {
            "model": openai_style.map_model(
                request.get("model"), MODEL_MAPPING, GEMINI_DEFAULT_MODEL
            ),
            "contents": contents,
            "generationConfig": generation_config,
            "safetySettings": clone(list(SAFETY_SETTINGS)),
        }

        system = request.get("system")
        if system:
            transformed["systemInstruction"] = {
                "parts": [{"text": openai_style.flatten_text(system)}]
            }

        self._log.debug(
            "Request transformed: model=%s -> %s, contents=%d",
            request.get("model"),
            transformed["model"],
            len(contents),
        )
        return transformed

    def transform_response(self, response: Any, provider: ProviderConfig) -> dict[str, Any]:
        payload = parse_wire(GeminiResponse, response, self._log)

        content: list[dict[str, Any]] = []
        stop_reason: StopReason | None = None
        stop_sequence: str | None = None

        if payload.candidates:
            candidate = payload.candidates[0]
            if candidate.content is not None:
                for part in candidate.content.parts:
                    converted = _to_canonical_part(part)
                    if converted is not None:
                        content.append(converted)
            stop_reason = map_finish_reason(candidate.finish_reason)
            stop_sequence = candidate.finish_message

        usage = payload.usage_metadata
        return {
            "id": generate_message_id(),
            "type": "message",
            "role": "assistant",
            "content": content,
            "model": payload.model_version or GEMINI_DEFAULT_MODEL,
            "stop_reason": stop_reason,
            "stop_sequence": stop_sequence,
            "usage": {
                "input_tokens": token_count(usage.prompt_token_count if usage else None),
                "output_tokens": token_count(usage.candidates_token_count if usage else None),
            },
        }

    def transform_stream_chunk(self, chunk: str, provider: ProviderConfig) -> str | None:
        payload = sse_payload(chunk)
        if payload == SSE_DONE_PAYLOAD:
            return SSE_DONE
        if CANDIDATES_MARKER not in chunk:
            return chunk

        body = payload if payload is not None else _strip_array_framing(chunk)

        try:
            raw = json.loads(body)
            parsed = GeminiResponse.model_validate(raw)
        except (ValueError, ValidationError) as e:
            self._log.warning("Stream chunk transform failed, passing through: %s", e)
            return chunk

        transformed: dict[str, Any] = {"candidates": []}
        if parsed.candidates:
            raw_candidate = raw["candidates"][0]
            raw_content = raw_candidate.get("content") or {}
            candidate: dict[str, Any] = {"content": {"parts": list(raw_content.get("parts") or [])}}
            finish_reason = map_finish_reason(parsed.candidates[0].finish_reason)
            if finish_reason is not None:
                candidate["finishReason"] = finish_reason
            transformed["candidates"].append(candidate)

        usage = raw.get("usageMetadata", raw.get("usage_metadata"))
        if usage is not None:
            transformed["usageMetadata"] = usage

        if payload is not None:
            return format_sse_data(transformed)
        return dumps_compact(transformed)

    def transform_error(self, error: Any, provider: ProviderConfig) -> dict[str, Any]:
        failure = describe_failure(error)

        if failure.error is not None:
            detail = parse_wire(GeminiErrorDetail, failure.error, self._log)
            return error_envelope(
                ERROR_STATUS_MAP.get(detail.status or "", "api_error"),
                detail.message or failure.message or "Gemini API error",
                detail.status,
                details=detail.details or None,
            )

        if failure.status is not None:
            return error_envelope(
                error_kind_for_status(failure.status, HTTP_STATUS_OVERRIDES),
                failure.status_text or failure.message or "Gemini API error",
            )

        return error_envelope("api_error", failure.message or "Unknown Gemini error")

    def validate_config(self, provider: ProviderConfig) -> ValidationResult:
        return check_provider(
            as_provider(provider),
            "Gemini",
            url_marker="generativelanguage.googleapis.com",
        )

    def get_default_config(self) -> dict[str, Any]:
        return {
            "name": "Google Gemini",
            "type": "gemini",
            "api_base_url": "https://generativelanguage.googleapis.com/v1beta",
            "transformer": self.name,
            # Gemini can take noticeably longer to respond
            "timeout": 90000,
            "max_retries": 2,
            "retry_delay": 2000,
        }
