"""Canonical error vocabulary shared by all transformers.

Upstream failures arrive in many shapes: a parsed provider error body,
an HTTP status with no body, a raised exception from the HTTP client.
`describe_failure` folds all of them into one `UpstreamFailure` so each
adapter only has to decide how to name the error.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal, get_args

ErrorKind = Literal[
    "authentication_error",
    "permission_error",
    "invalid_request_error",
    "rate_limit_error",
    "content_policy_error",
    "api_error",
]

ERROR_KINDS: frozenset[str] = frozenset(get_args(ErrorKind))

# Error type mapping from upstream status to canonical error type
HTTP_STATUS_ERROR_KINDS: dict[int, ErrorKind] = {
    401: "authentication_error",
    403: "permission_error",
    404: "invalid_request_error",
    429: "rate_limit_error",
}

# Anthropic-format error types outside the canonical set
ANTHROPIC_ERROR_ALIASES: dict[str, ErrorKind] = {
    "not_found_error": "invalid_request_error",
    "request_too_large": "invalid_request_error",
    "overloaded_error": "api_error",
}


class UpstreamError(Exception):
    """Raised by the HTTP layer when the upstream API returns an error."""

    def __init__(
        self,
        message: str,
        status_code: int,
        response_body: str | Mapping[str, Any] | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


@dataclass(frozen=True)
class UpstreamFailure:
    """Normalized view of an upstream failure.

    Attributes:
        body: Provider error body when one could be recovered.
        status: HTTP status code if known.
        status_text: HTTP reason phrase if known.
        message: Best human-readable message salvaged from the input.
    """

    body: dict[str, Any] | None = None
    status: int | None = None
    status_text: str | None = None
    message: str | None = None

    @property
    def error(self) -> dict[str, Any] | None:
        """The structured `error` object of the body, if any."""
        if self.body is None:
            return None
        error = self.body.get("error")
        return error if isinstance(error, dict) else None


def error_kind_for_status(
    status: int,
    overrides: Mapping[int, ErrorKind] | None = None,
) -> ErrorKind:
    """Map an HTTP status to a canonical error kind.

    Anything not in the table (all 5xx, unlisted 4xx) is an `api_error`.
    """
    if overrides and status in overrides:
        return overrides[status]
    return HTTP_STATUS_ERROR_KINDS.get(status, "api_error")


def error_envelope(
    kind: ErrorKind,
    message: str,
    code: Any = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build a canonical `{type: "error", error: {...}}` envelope."""
    error: dict[str, Any] = {"type": kind, "message": message}
    if code is not None:
        error["code"] = code
    error.update({k: v for k, v in extra.items() if v is not None})
    return {"type": "error", "error": error}


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def _parse_body(raw: Any) -> dict[str, Any] | None:
    """Coerce a raw upstream body (dict, list, JSON text) into a dict."""
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return None
    # Some providers wrap the error object in a one-element array
    if isinstance(raw, list) and raw and isinstance(raw[0], Mapping):
        raw = raw[0]
    if isinstance(raw, Mapping):
        return dict(raw)
    return None


def _describe_mapping(err: Mapping[str, Any]) -> UpstreamFailure:
    body = dict(err)
    status = _as_int(err.get("status")) or _as_int(err.get("status_code"))
    status_text = err.get("statusText") or err.get("status_text")
    message = err.get("message")

    error = body.get("error")
    if isinstance(error, str):
        message = message or error
        body = None
    elif not isinstance(error, dict):
        body = None

    return UpstreamFailure(
        body=body,
        status=status,
        status_text=status_text if isinstance(status_text, str) else None,
        message=message if isinstance(message, str) else None,
    )


def _describe_exception(err: BaseException) -> UpstreamFailure:
    body: dict[str, Any] | None = None
    status: int | None = None

    if isinstance(err, UpstreamError):
        status = err.status_code
        body = _parse_body(err.response_body)
    else:
        status = _as_int(getattr(err, "status", None)) or _as_int(
            getattr(err, "status_code", None)
        )
        response = getattr(err, "response", None)
        if status is None and response is not None:
            status = _as_int(getattr(response, "status_code", None)) or _as_int(
                getattr(response, "status", None)
            )

    if body is not None and not isinstance(body.get("error"), dict):
        body = None

    reason = getattr(err, "reason", None)
    # aiohttp's ClientResponseError keeps the reason phrase on .message
    message = str(err) or getattr(err, "message", None) or type(err).__name__

    return UpstreamFailure(
        body=body,
        status=status,
        status_text=reason if isinstance(reason, str) else None,
        message=message,
    )


def describe_failure(err: Any) -> UpstreamFailure:
    """Normalize any upstream failure input into an `UpstreamFailure`.

    Accepts provider error bodies, status-only descriptions, JSON text,
    raised exceptions and anything else (stringified). Never raises.
    """
    if isinstance(err, BaseException):
        return _describe_exception(err)

    if isinstance(err, Mapping):
        return _describe_mapping(err)

    parsed = _parse_body(err) if isinstance(err, (str, bytes, bytearray, list)) else None
    if parsed is not None:
        return _describe_mapping(parsed)

    if err is None:
        return UpstreamFailure()

    text = err.decode("utf-8", errors="replace") if isinstance(err, (bytes, bytearray)) else str(err)
    return UpstreamFailure(message=text or None)
