"""
Message DTO used across adapters.

Defines the `ChatMessage` dataclass and the `Role` literal. Content may be
either plain text or a list of content parts for multimodal messages.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Union

from .content_part import ContentPart, TextPart


Role = Literal["system", "user", "assistant"]
ROLES = ("system", "user", "assistant")


@dataclass
class ChatMessage:
    """A chat message in canonical form.

    Attributes:
        role: ``"system"``, ``"user"`` or ``"assistant"``.
        content: Either a plain text string or an ordered list of parts.
    """

    role: Role
    content: Union[str, List[ContentPart]]

    def is_structured(self) -> bool:
        """Return True if the message content is a list of parts."""
        return isinstance(self.content, list)

    def text_only(self) -> str:
        """Return the text of the message, ignoring non-text parts.

        Text parts are joined with newlines.
        """
        if isinstance(self.content, str):
            return self.content
        return "\n".join(p.text for p in self.content if isinstance(p, TextPart))

    def to_dict(self):
        content = self.content if isinstance(self.content, str) else [p.to_dict() for p in self.content]
        return {"role": self.role, "content": content}


__all__ = [
    "ChatMessage",
    "Role",
    "ROLES",
]
