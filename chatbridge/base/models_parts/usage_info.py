"""
UsageInfo DTO for account usage queries.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict

# Largest integer exactly representable as a JSON number in every client.
UNLIMITED_TOTAL = 2**53 - 1


@dataclass
class UsageInfo:
    """Amount used against a total quota."""

    used: float
    total: float

    @classmethod
    def unlimited(cls) -> "UsageInfo":
        """Sentinel for backends without a usage API."""
        return cls(used=0, total=UNLIMITED_TOTAL)

    @property
    def is_unlimited(self) -> bool:
        return self.total >= UNLIMITED_TOTAL

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["UsageInfo", "UNLIMITED_TOTAL"]
