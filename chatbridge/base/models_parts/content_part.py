"""
Multimodal content parts.

A message's content is either a plain string or an ordered list of parts.
Each part is a tagged variant: :class:`TextPart` or :class:`ImagePart`. An
image's ``source`` is either a :class:`RemoteURL` (``http(s)://`` or a
``data:`` URL as received from the client) or :class:`InlineData` (decoded
bytes plus a media type) once the content normalizer has run.
"""
from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Union


@dataclass(frozen=True)
class RemoteURL:
    """Image referenced by URL; not yet fetched or decoded."""

    url: str


@dataclass(frozen=True)
class InlineData:
    """Image bytes carried inline, tagged with their media type."""

    mime_type: str
    data: bytes = field(repr=False)

    def b64(self) -> str:
        """Return the payload as a base64 string."""
        return base64.b64encode(self.data).decode("ascii")

    def data_url(self) -> str:
        """Return the payload as a ``data:<mime>;base64,<payload>`` URL."""
        return f"data:{self.mime_type};base64,{self.b64()}"


ImageSource = Union[RemoteURL, InlineData]


@dataclass(frozen=True)
class TextPart:
    """Plain text part."""

    text: str
    kind: Literal["text"] = "text"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "text", "text": self.text}


@dataclass(frozen=True)
class ImagePart:
    """Image part with a remote or inline source."""

    source: ImageSource
    kind: Literal["image"] = "image"

    def to_dict(self) -> Dict[str, Any]:
        url = self.source.url if isinstance(self.source, RemoteURL) else self.source.data_url()
        return {"type": "image_url", "image_url": {"url": url}}


ContentPart = Union[TextPart, ImagePart]


__all__ = [
    "RemoteURL",
    "InlineData",
    "ImageSource",
    "TextPart",
    "ImagePart",
    "ContentPart",
]
