"""Server-Sent Events framing helpers.

Every unit emitted to the client is either `data: <json>\\n\\n` or the
literal `data: [DONE]\\n\\n`.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any

SSE_DATA_PREFIX = "data: "
SSE_DONE_PAYLOAD = "[DONE]"
SSE_DONE = f"{SSE_DATA_PREFIX}{SSE_DONE_PAYLOAD}\n\n"


def dumps_compact(payload: Any) -> str:
    """Serialize JSON without whitespace, keeping non-ASCII text as is."""
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def format_sse_data(payload: Any) -> str:
    """Format a JSON payload as one SSE data unit."""
    return f"{SSE_DATA_PREFIX}{dumps_compact(payload)}\n\n"


def sse_payload(line: str) -> str | None:
    """Return the payload of a `data: ` line, or None for any other line."""
    if not line.startswith(SSE_DATA_PREFIX):
        return None
    return line[len(SSE_DATA_PREFIX) :].strip()


def iter_stream_units(buffer: str | bytes) -> Iterator[str]:
    """Split a decoded upstream chunk into framing units.

    Blank separator lines are dropped; each remaining line is yielded
    without its trailing newline.

    Example:
        >>> list(iter_stream_units('data: {"a":1}\\n\\ndata: [DONE]\\n\\n'))
        ['data: {"a":1}', 'data: [DONE]']
    """
    if isinstance(buffer, (bytes, bytearray)):
        buffer = buffer.decode("utf-8", errors="replace")
    for line in buffer.splitlines():
        if line.strip():
            yield line
