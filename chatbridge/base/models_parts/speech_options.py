"""
SpeechOptions DTO for text-to-speech requests.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SpeechOptions:
    """Text-to-speech parameters."""

    model: str
    input: str
    voice: str = "alloy"
    response_format: str = "mp3"
    speed: float = 1.0


__all__ = ["SpeechOptions"]
