"""Canonical SSE wire format.

Each canonical chunk is one ``data:`` line holding a
``chat.completion.chunk`` object; the sentinel is ``data: [DONE]``. A stream
that fails after it started ends with one ``{"error": true, "msg": ...}``
frame in place of the sentinel. Events are separated by a blank line.
"""
from __future__ import annotations

import json
import time
from typing import Any, AsyncIterable, AsyncIterator, Dict, Optional

from ..errors import ProviderError
from ..models import CanonicalChunk, FinishReason, StreamItem, new_completion_id

DONE_MARKER = "[DONE]"
DONE_LINE = f"data: {DONE_MARKER}\n\n"
SSE_MEDIA_TYPE = "text/event-stream"


class SSEEncoder:
    """Render canonical items for one response with a stable id/model."""

    def __init__(self, model: str, *, completion_id: Optional[str] = None, created: Optional[int] = None) -> None:
        self.model = model
        self.completion_id = completion_id or new_completion_id()
        self.created = created if created is not None else int(time.time())

    def chunk_object(self, chunk: CanonicalChunk) -> Dict[str, Any]:
        return {
            "id": self.completion_id,
            "object": "chat.completion.chunk",
            "created": self.created,
            "model": self.model,
            "choices": [
                {
                    "index": 0,
                    "delta": {"content": chunk.delta_text},
                    "finish_reason": chunk.finish_reason.value if chunk.finish_reason else None,
                }
            ],
        }

    def encode(self, item: StreamItem) -> str:
        if isinstance(item, CanonicalChunk):
            return f"data: {json.dumps(self.chunk_object(item), ensure_ascii=False)}\n\n"
        return DONE_LINE

    def encode_error(self, error: ProviderError) -> str:
        """Render the terminal error frame sent instead of the sentinel."""
        return f"data: {json.dumps(error.to_payload(), ensure_ascii=False)}\n\n"


async def iter_sse_data(lines: AsyncIterable[str]) -> AsyncIterator[str]:
    """Yield the payload of each ``data:`` line, skipping comments and blanks."""
    async for raw in lines:
        line = raw.strip()
        if not line or line.startswith(":"):
            continue
        if not line.startswith("data:"):
            continue
        yield line[len("data:"):].strip()


def decode_error_payload(data: str) -> Optional[str]:
    """Return the ``msg`` of an error frame, or ``None`` for any other payload."""
    try:
        obj = json.loads(data)
    except ValueError:
        return None
    if isinstance(obj, dict) and obj.get("error") is True:
        return str(obj.get("msg") or "stream failed")
    return None


def decode_chunk_payload(data: str) -> Optional[CanonicalChunk]:
    """Parse one ``chat.completion.chunk`` payload into a canonical chunk.

    Returns ``None`` for payloads without a choice.
    """
    obj = json.loads(data)
    choices = obj.get("choices") or []
    if not choices:
        return None
    choice = choices[0] or {}
    delta = choice.get("delta") or {}
    reason = choice.get("finish_reason")
    return CanonicalChunk(
        delta_text=delta.get("content") or "",
        finish_reason=FinishReason(reason) if reason in ("stop", "length") else None,
    )


__all__ = [
    "DONE_MARKER",
    "DONE_LINE",
    "SSE_MEDIA_TYPE",
    "SSEEncoder",
    "iter_sse_data",
    "decode_error_payload",
    "decode_chunk_payload",
]
