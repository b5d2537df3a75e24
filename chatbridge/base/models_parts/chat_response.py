"""
CanonicalResponse DTO representing a non-streaming completion.

Unknown token counts are ``-1``. The ``raw`` field keeps the decoded backend
body for diagnostics only and is excluded from serialization.
"""
from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

UNKNOWN_TOKENS = -1


def _known(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    n = int(value)
    return n if n >= 0 else None


@dataclass
class TokenUsage:
    """Prompt/completion/total token counts; ``-1`` means unknown."""

    prompt_tokens: int = UNKNOWN_TOKENS
    completion_tokens: int = UNKNOWN_TOKENS
    total_tokens: int = UNKNOWN_TOKENS

    @classmethod
    def from_counts(cls, prompt: Any, completion: Any) -> "TokenUsage":
        """Build usage from raw counts, deriving the total.

        The total is the sum of whichever counts are known; when neither is
        known (or the sum is zero) it is ``-1``.
        """
        p, c = _known(prompt), _known(completion)
        total = (p or 0) + (c or 0)
        return cls(
            prompt_tokens=UNKNOWN_TOKENS if p is None else p,
            completion_tokens=UNKNOWN_TOKENS if c is None else c,
            total_tokens=total or UNKNOWN_TOKENS,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


def new_completion_id() -> str:
    """Return an opaque completion identifier."""
    return f"chatcmpl-{uuid.uuid4().hex}"


@dataclass
class CanonicalResponse:
    """Backend-agnostic result of a non-streaming chat call."""

    text: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    model: str = ""
    id: str = field(default_factory=new_completion_id)
    created: int = field(default_factory=lambda: int(time.time()))
    raw: Optional[Any] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        """Return the canonical ``chat.completion`` wire object."""
        return {
            "id": self.id,
            "object": "chat.completion",
            "created": self.created,
            "model": self.model,
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": self.text},
                    "finish_reason": "stop",
                }
            ],
            "usage": self.usage.to_dict(),
        }


__all__ = [
    "TokenUsage",
    "CanonicalResponse",
    "UNKNOWN_TOKENS",
    "new_completion_id",
]
