"""
Structured provider error exception type.

Wraps provider-specific failures with a normalized `ErrorCode` and the HTTP
status class the route dispatcher answers with.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional

from .error_code import ErrorCode


@dataclass(eq=False)
class ProviderError(Exception):
    """Represents a structured provider error with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message, surfaced to callers.
        provider: Backend key where the error originated (e.g., ``"bedrock"``).
        model: Optional model name associated with the failure.
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    provider: str = "-"
    model: Optional[str] = None
    raw: Optional[BaseException] = None

    http_status: ClassVar[int] = 500

    def __str__(self) -> str:  # pragma: no cover - trivial
        """Return a compact string combining provider, model, code, and message."""
        return f"{self.provider}:{self.model or '-'} {self.code.value}: {self.message}"

    def to_payload(self) -> Dict[str, Any]:
        """Return the client-facing error body ``{"error": true, "msg": ...}``."""
        return {"error": True, "msg": self.message}


__all__ = ["ProviderError"]
