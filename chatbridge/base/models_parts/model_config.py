"""
Model configuration DTO.

Sampling parameters are coerced on construction: an out-of-range or missing
temperature falls back to ``DEFAULT_TEMPERATURE`` and a missing or
non-positive token limit falls back to ``DEFAULT_MAX_TOKENS``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4096


def coerce_temperature(value: Any) -> float:
    """Return ``value`` as a float in ``[0, 1]`` or the default temperature."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_TEMPERATURE
    if 0.0 <= float(value) <= 1.0:
        return float(value)
    return DEFAULT_TEMPERATURE


def coerce_max_tokens(value: Any) -> int:
    """Return ``value`` as a positive int or the default token limit."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_MAX_TOKENS
    n = int(value)
    return n if n > 0 else DEFAULT_MAX_TOKENS


@dataclass
class ModelConfig:
    """Model selection and sampling settings for one request.

    Attributes:
        model: Target model identifier.
        temperature: Sampling temperature in ``[0, 1]``.
        stream: Whether the caller wants incremental chunks.
        max_tokens: Positive completion token limit.
    """

    model: str
    temperature: Optional[float] = DEFAULT_TEMPERATURE
    stream: bool = False
    max_tokens: Optional[int] = None

    def __post_init__(self) -> None:
        self.temperature = coerce_temperature(self.temperature)
        self.max_tokens = coerce_max_tokens(self.max_tokens)
        self.stream = bool(self.stream)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "temperature": self.temperature,
            "stream": self.stream,
            "max_tokens": self.max_tokens,
        }


__all__ = [
    "ModelConfig",
    "DEFAULT_TEMPERATURE",
    "DEFAULT_MAX_TOKENS",
    "coerce_temperature",
    "coerce_max_tokens",
]
