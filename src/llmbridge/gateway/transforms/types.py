"""Canonical (Anthropic Messages) shapes used at the client boundary.

Canonical requests and responses travel as plain dicts so that unknown
extension fields survive cloning untouched. The TypedDicts below
document the known keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, TypedDict

from llmbridge.gateway.errors import ErrorKind

StopReason = Literal["end_turn", "max_tokens", "stop_sequence", "tool_use"]

STOP_REASONS: frozenset[str] = frozenset({"end_turn", "max_tokens", "stop_sequence", "tool_use"})


class ImageSource(TypedDict, total=False):
    type: Literal["base64", "url"]
    media_type: str
    data: str
    url: str


class ContentPart(TypedDict, total=False):
    """Tagged content part. `type` is text, image, tool_use or anything else."""

    type: str
    text: str
    source: ImageSource
    id: str
    name: str
    input: dict[str, Any]


class CanonicalMessage(TypedDict):
    role: Literal["user", "assistant"]
    content: str | list[ContentPart]


class CanonicalRequest(TypedDict, total=False):
    model: str
    messages: list[CanonicalMessage]
    max_tokens: int
    temperature: float
    top_p: float
    top_k: int
    stream: bool
    system: str
    stop_sequences: list[str]


class Usage(TypedDict):
    input_tokens: int
    output_tokens: int


class CanonicalResponse(TypedDict):
    id: str
    type: Literal["message"]
    role: Literal["assistant"]
    content: list[ContentPart]
    model: str
    stop_reason: StopReason | None
    stop_sequence: str | None
    usage: Usage


class CanonicalError(TypedDict, total=False):
    type: ErrorKind
    message: str
    code: Any


class CanonicalErrorEnvelope(TypedDict):
    type: Literal["error"]
    error: CanonicalError


@dataclass(frozen=True)
class ValidationResult:
    """Advisory diagnostics from `validate_config`."""

    errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors)}
