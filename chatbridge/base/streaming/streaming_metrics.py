"""Streaming metrics data structures.

Collected by the transcoder for one stream and logged once at finalize.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class StreamMetrics:
    """Counters and timings for a single streaming invocation.

    Attributes:
        emitted: Canonical chunks delivered to the consumer (sentinel excluded).
        skipped: Native frames discarded because they could not be decoded.
        time_to_first_token_ms: Delay until the first non-empty delta.
        total_duration_ms: Time from the first read to release of the transport.
    """

    emitted: int = 0
    skipped: int = 0
    time_to_first_token_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["StreamMetrics"]
