"""
ChatRequest DTO and its validation predicates.

Adapters map this normalized request shape to backend-native payloads. The
request is rejected before any backend call when the message list is empty,
the model is blank, or only system messages are present.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..errors import ValidationError
from .message import ChatMessage
from .model_config import ModelConfig


@dataclass
class ChatRequest:
    """Normalized chat request sent to provider adapters.

    Attributes:
        messages: Ordered list of :class:`ChatMessage` instances.
        config: Model selection and sampling settings.
    """

    messages: List[ChatMessage]
    config: ModelConfig

    @property
    def model(self) -> str:
        return self.config.model

    def split_system(self) -> Tuple[List[ChatMessage], List[ChatMessage]]:
        """Return ``(system_messages, other_messages)`` preserving order."""
        system = [m for m in self.messages if m.role == "system"]
        rest = [m for m in self.messages if m.role != "system"]
        return system, rest

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary representation of the request."""
        return {"messages": [m.to_dict() for m in self.messages], **self.config.to_dict()}


def _invalid_reason(request: ChatRequest) -> Optional[str]:
    if not request.messages:
        return "messages must be a non-empty list"
    model = request.config.model
    if not isinstance(model, str) or not model.strip():
        return "model must be a non-empty string"
    if all(m.role == "system" for m in request.messages):
        return "at least one non-system message is required"
    return None


def is_valid_request(request: ChatRequest) -> bool:
    """Return True when ``request`` passes :func:`validate_request`."""
    return _invalid_reason(request) is None


def validate_request(request: ChatRequest, *, provider: str = "-") -> None:
    """Raise :class:`ValidationError` with a readable reason for invalid requests."""
    reason = _invalid_reason(request)
    if reason is not None:
        raise ValidationError(message=reason, provider=provider, model=request.config.model or None)


__all__ = [
    "ChatRequest",
    "is_valid_request",
    "validate_request",
]
