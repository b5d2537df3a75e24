"""Message helpers shared across adapters.

Helpers here are side-effect free and operate on canonical DTOs only.
"""
from __future__ import annotations

from typing import List, Optional, Tuple

from ..models import ChatMessage, ChatRequest


def join_system_text(messages: List[ChatMessage]) -> Optional[str]:
    """Join the text of all system messages with newlines.

    Non-text parts of structured system messages are ignored. Returns
    ``None`` when there is no system message.
    """
    texts = [m.text_only() for m in messages if m.role == "system"]
    if not texts:
        return None
    return "\n".join(texts)


def split_system_and_rest(request: ChatRequest) -> Tuple[Optional[str], List[ChatMessage]]:
    """Return ``(system_text, non_system_messages)`` preserving order."""
    system, rest = request.split_system()
    return join_system_text(system), rest


__all__ = ["join_system_text", "split_system_and_rest"]
