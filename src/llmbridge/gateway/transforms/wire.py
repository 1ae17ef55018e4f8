"""Pydantic models for upstream provider payloads.

Adapters validate raw upstream JSON here, at the point where it first
enters the transformer. The models are permissive: every field is
optional and unknown keys are kept, because a partially empty reply
must still produce a canonical response.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

WireModelT = TypeVar("WireModelT", bound="WireModel")

Loc = tuple[str | int, ...]

# Upper bound on validate-then-prune rounds
MAX_PRUNE_PASSES = 5


class WireModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, protected_namespaces=())


def _existing_path(data: Any, loc: Loc) -> Loc:
    """Longest prefix of an error location that exists in `data`.

    Union validators append member tags (e.g. "str") to the location;
    those never match a real key, so the walk stops at the bad value.
    """
    path: list[str | int] = []
    node = data
    for key in loc:
        if isinstance(node, dict) and key in node:
            node = node[key]
        elif isinstance(node, list) and isinstance(key, int) and 0 <= key < len(node):
            node = node[key]
        else:
            break
        path.append(key)
    return tuple(path)


def _prune(data: dict[str, Any], errors: list[dict[str, Any]]) -> list[Loc]:
    """Delete every value that failed validation, in place."""
    paths = {_existing_path(data, tuple(err["loc"])) for err in errors}
    paths.discard(())
    # Deepest and highest list index first so earlier paths stay valid
    for path in sorted(paths, reverse=True):
        parent: Any = data
        for key in path[:-1]:
            parent = parent[key]
        del parent[path[-1]]
    return sorted(paths)


def parse_wire(
    model: type[WireModelT],
    raw: Any,
    log: logging.Logger | logging.LoggerAdapter,
) -> WireModelT:
    """Validate an upstream payload, dropping only the values that fail.

    A badly typed field loses that field (it takes its default) while the
    rest of the payload still converts. Non-dict input, or a payload that
    cannot be repaired, yields `model()`. The input is never modified.
    """
    if not isinstance(raw, dict):
        log.warning("Expected a JSON object for %s, got %s", model.__name__, type(raw).__name__)
        return model()
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        errors = e.errors(include_url=False)

    data = copy.deepcopy(raw)
    dropped: list[Loc] = []
    for _ in range(MAX_PRUNE_PASSES):
        pruned = _prune(data, errors)
        if not pruned:
            break
        dropped.extend(pruned)
        try:
            result = model.model_validate(data)
        except ValidationError as e:
            errors = e.errors(include_url=False)
            continue
        log.warning(
            "Malformed %s payload, dropped: %s",
            model.__name__,
            ", ".join(".".join(str(key) for key in path) for path in dropped),
        )
        return result

    log.warning("Malformed %s payload: %s", model.__name__, errors)
    return model()


# =============================================================================
# OpenAI Chat Completions shape (DeepSeek, OpenRouter)
# =============================================================================


class OpenAIMessage(WireModel):
    role: str | None = None
    content: str | list[dict[str, Any]] | None = None
    tool_calls: list[dict[str, Any]] | None = None


class OpenAIChoice(WireModel):
    index: int | None = None
    message: OpenAIMessage | None = None
    delta: dict[str, Any] | None = None
    finish_reason: str | None = None
    stop_sequence: str | None = None


class OpenAIUsage(WireModel):
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


class OpenAIChatPayload(WireModel):
    """Non-streaming response body or one streamed chunk."""

    id: str | None = None
    model: str | None = None
    created: int | None = None
    choices: list[OpenAIChoice] = Field(default_factory=list)
    usage: OpenAIUsage | None = None


class OpenAIErrorDetail(WireModel):
    type: str | None = None
    code: str | int | None = None
    message: str | None = None
    param: str | None = None
    ratelimit: Any = None


# =============================================================================
# Gemini generateContent shape
# =============================================================================


class GeminiBlob(WireModel):
    mime_type: str | None = Field(
        default=None, validation_alias=AliasChoices("mime_type", "mimeType")
    )
    data: str | None = None


class GeminiPart(WireModel):
    text: str | None = None
    inline_data: GeminiBlob | None = Field(
        default=None, validation_alias=AliasChoices("inline_data", "inlineData")
    )


class GeminiContent(WireModel):
    role: str | None = None
    parts: list[GeminiPart] = Field(default_factory=list)


class GeminiCandidate(WireModel):
    content: GeminiContent | None = None
    finish_reason: str | None = Field(
        default=None, validation_alias=AliasChoices("finishReason", "finish_reason")
    )
    finish_message: str | None = Field(
        default=None, validation_alias=AliasChoices("finishMessage", "finish_message")
    )


class GeminiUsageMetadata(WireModel):
    prompt_token_count: int | None = Field(
        default=None, validation_alias=AliasChoices("promptTokenCount", "prompt_token_count")
    )
    candidates_token_count: int | None = Field(
        default=None,
        validation_alias=AliasChoices("candidatesTokenCount", "candidates_token_count"),
    )


class GeminiResponse(WireModel):
    candidates: list[GeminiCandidate] = Field(default_factory=list)
    usage_metadata: GeminiUsageMetadata | None = Field(
        default=None, validation_alias=AliasChoices("usageMetadata", "usage_metadata")
    )
    model_version: str | None = Field(
        default=None, validation_alias=AliasChoices("modelVersion", "model_version")
    )


class GeminiErrorDetail(WireModel):
    code: int | None = None
    message: str | None = None
    status: str | None = None
    details: list[Any] | None = None


# =============================================================================
# Anthropic Messages error shape (passthrough upstreams)
# =============================================================================


class AnthropicErrorDetail(WireModel):
    type: str | None = None
    message: str | None = None
    code: str | int | None = None
