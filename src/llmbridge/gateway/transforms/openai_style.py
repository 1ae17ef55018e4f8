"""Shared conversion helpers for OpenAI Chat Completions style providers.

DeepSeek and OpenRouter speak nearly the same wire format and differ
only in model names, token limits, multimodal support and error codes.
Each adapter composes the free functions below with its own tables.

OpenAI API Reference:
- Response: {id, model, choices: [{message, finish_reason}], usage: {prompt_tokens, completion_tokens}}
- Streaming: SSE with data: {"choices": [{"delta": {...}}]} and a final data: [DONE]
- Errors: {"error": {"type", "code", "message"}}
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Collection, Mapping
from typing import Any

from pydantic import ValidationError

from llmbridge.gateway.errors import (
    ErrorKind,
    describe_failure,
    error_envelope,
    error_kind_for_status,
)
from llmbridge.gateway.sse import SSE_DONE, SSE_DONE_PAYLOAD, format_sse_data, sse_payload
from llmbridge.gateway.transforms.base import generate_message_id, token_count
from llmbridge.gateway.transforms.types import StopReason
from llmbridge.gateway.transforms.wire import (
    OpenAIChatPayload,
    OpenAIChoice,
    OpenAIErrorDetail,
    parse_wire,
)

Log = logging.Logger | logging.LoggerAdapter

FINISH_REASON_MAP: dict[str, StopReason] = {
    "stop": "end_turn",
    "length": "max_tokens",
    "content_filter": "stop_sequence",
    "tool_calls": "tool_use",
    "function_call": "tool_use",
}

_DATA_URI = re.compile(r"^data:(?P<mime>[^;,]+)?(?:;[^,]*)?,(?P<data>.*)$", re.DOTALL)
DEFAULT_IMAGE_MIME = "image/jpeg"


def map_finish_reason(reason: str | None) -> StopReason | None:
    """Map an OpenAI finish_reason; anything unknown becomes None."""
    if not reason:
        return None
    return FINISH_REASON_MAP.get(reason)


def map_model(model: Any, mapping: Mapping[str, str], default: str) -> str:
    """Rewrite a canonical model id, falling back to the adapter default."""
    if isinstance(model, str) and model in mapping:
        return mapping[model]
    return default


def part_text(part: Mapping[str, Any]) -> str:
    """Text of a content part; null or non-string text reads as empty."""
    text = part.get("text")
    return text if isinstance(text, str) else ""


def flatten_text(content: Any) -> str:
    """Reduce canonical content to text, joining text parts with newlines."""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""
    return "\n".join(
        part_text(part)
        for part in content
        if isinstance(part, dict) and part.get("type") == "text"
    )


def image_url_to_part(part: Mapping[str, Any]) -> dict[str, Any]:
    """Convert an OpenAI `image_url` part into a canonical image part.

    Data URIs become base64 sources; any other URL becomes a url source.
    """
    image_url = part.get("image_url")
    url = image_url.get("url") if isinstance(image_url, dict) else image_url
    url = url if isinstance(url, str) else ""

    match = _DATA_URI.match(url)
    if match:
        return {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": match.group("mime") or DEFAULT_IMAGE_MIME,
                "data": match.group("data"),
            },
        }
    return {"type": "image", "source": {"type": "url", "url": url}}


def _tool_use_parts(tool_calls: list[dict[str, Any]] | None, log: Log) -> list[dict[str, Any]]:
    parts: list[dict[str, Any]] = []
    for tc in tool_calls or []:
        if not isinstance(tc, dict):
            continue
        function = tc.get("function") if isinstance(tc.get("function"), dict) else {}
        raw_args = function.get("arguments", "{}")
        if isinstance(raw_args, dict):
            arguments = raw_args
        else:
            try:
                arguments = json.loads(raw_args or "{}")
            except (TypeError, ValueError):
                log.warning("Malformed tool call arguments for %s", function.get("name"))
                arguments = {}
        parts.append(
            {
                "type": "tool_use",
                "id": tc.get("id") or "",
                "name": function.get("name", ""),
                "input": arguments if isinstance(arguments, dict) else {},
            }
        )
    return parts


def _content_parts(content: Any, allow_images: bool) -> list[dict[str, Any]]:
    if isinstance(content, str):
        return [{"type": "text", "text": content}] if content else []

    parts: list[dict[str, Any]] = []
    for item in content or []:
        item_type = item.get("type")
        if item_type == "text":
            parts.append({"type": "text", "text": part_text(item)})
        elif item_type == "image_url" and allow_images:
            parts.append(image_url_to_part(item))
        # Unknown part types are dropped
    return parts


def to_canonical_response(
    raw: Any,
    *,
    default_model: str,
    log: Log,
    allow_images: bool = False,
) -> dict[str, Any]:
    """Convert an OpenAI-style chat completion into a canonical response.

    Only the first choice is read. A reply without choices yields empty
    content and a null stop_reason.
    """
    payload = parse_wire(OpenAIChatPayload, raw, log)

    content: list[dict[str, Any]] = []
    stop_reason: StopReason | None = None
    stop_sequence: str | None = None

    if payload.choices:
        choice = payload.choices[0]
        message = choice.message
        if message is not None:
            content = _content_parts(message.content, allow_images)
            content.extend(_tool_use_parts(message.tool_calls, log))
        stop_reason = map_finish_reason(choice.finish_reason)
        stop_sequence = choice.stop_sequence

    usage = payload.usage
    return {
        "id": payload.id or generate_message_id(),
        "type": "message",
        "role": "assistant",
        "content": content,
        "model": payload.model or default_model,
        "stop_reason": stop_reason,
        "stop_sequence": stop_sequence,
        "usage": {
            "input_tokens": token_count(usage.prompt_tokens if usage else None),
            "output_tokens": token_count(usage.completion_tokens if usage else None),
        },
    }


def _stream_choice(choice: OpenAIChoice) -> dict[str, Any]:
    return {
        "index": choice.index if choice.index is not None else 0,
        "delta": choice.delta or {},
        "finish_reason": map_finish_reason(choice.finish_reason),
    }


def transform_sse_line(line: str, log: Log) -> str:
    """Re-frame one OpenAI-style SSE line.

    Non-data lines pass through, `[DONE]` is re-emitted verbatim, and data
    lines are rebuilt from the first choice plus usage/model/id/created.
    A payload that cannot be parsed is returned unmodified.
    """
    payload = sse_payload(line)
    if payload is None:
        return line
    if payload == SSE_DONE_PAYLOAD:
        return SSE_DONE

    try:
        chunk = OpenAIChatPayload.model_validate(json.loads(payload))
    except (ValueError, ValidationError) as e:
        log.warning("Stream chunk transform failed, passing through: %s", e)
        return line

    transformed: dict[str, Any] = {}
    if chunk.choices:
        transformed["choices"] = [_stream_choice(chunk.choices[0])]
    if chunk.usage is not None:
        transformed["usage"] = chunk.usage.model_dump(
            include={"prompt_tokens", "completion_tokens", "total_tokens"},
            exclude_none=True,
        )
    if chunk.model:
        transformed["model"] = chunk.model
    if chunk.id:
        transformed["id"] = chunk.id
    if chunk.created:
        transformed["created"] = chunk.created

    return format_sse_data(transformed)


def to_canonical_error(
    error: Any,
    *,
    label: str,
    error_codes: Mapping[str, ErrorKind],
    log: Log,
    passthrough_fields: Collection[str] = (),
) -> dict[str, Any]:
    """Normalize an OpenAI-style failure into the canonical error envelope.

    Structured error bodies map through `error_codes` by type, then code.
    Without a body the HTTP status decides; without either the result is
    a generic api_error carrying whatever message could be salvaged.
    """
    failure = describe_failure(error)

    if failure.error is not None:
        detail = parse_wire(OpenAIErrorDetail, failure.error, log)
        kind = error_codes.get(detail.type or "") or error_codes.get(str(detail.code or ""))
        extra = {name: failure.error.get(name) for name in passthrough_fields}
        return error_envelope(
            kind or "api_error",
            detail.message or failure.message or f"{label} API error",
            detail.code,
            **extra,
        )

    if failure.status is not None:
        return error_envelope(
            error_kind_for_status(failure.status),
            failure.status_text or failure.message or f"{label} API error",
        )

    return error_envelope("api_error", failure.message or f"Unknown {label} error")
