"""
Canonical streaming units.

A canonical stream is a finite, ordered sequence of :class:`CanonicalChunk`
values followed by exactly one :data:`STREAM_SENTINEL`. Consumers treat the
sentinel as the authoritative end of the stream.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class FinishReason(str, Enum):
    """Why a stream ended."""

    STOP = "stop"
    LENGTH = "length"


@dataclass(frozen=True)
class CanonicalChunk:
    """One incremental unit of a streamed response."""

    delta_text: str
    finish_reason: Optional[FinishReason] = None

    @property
    def is_final(self) -> bool:
        return self.finish_reason is not None


class StreamSentinel:
    """Type of the end-of-stream marker; use :data:`STREAM_SENTINEL`."""

    _instance: Optional["StreamSentinel"] = None

    def __new__(cls) -> "StreamSentinel":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return "STREAM_SENTINEL"


STREAM_SENTINEL = StreamSentinel()

StreamItem = Union[CanonicalChunk, StreamSentinel]


__all__ = [
    "FinishReason",
    "CanonicalChunk",
    "StreamSentinel",
    "STREAM_SENTINEL",
    "StreamItem",
]
