"""Parsing helpers for ``data:`` URLs and image media types."""
from __future__ import annotations

import base64
import binascii
import mimetypes
from typing import Optional, Tuple
from urllib.parse import unquote_to_bytes, urlparse

DEFAULT_IMAGE_MIME = "image/jpeg"
_MIME_ALIASES = {"image/jpg": "image/jpeg", "image/pjpeg": "image/jpeg"}


def canonical_mime(mime_type: Optional[str]) -> str:
    """Lower-case a media type, strip parameters and fold known aliases."""
    value = (mime_type or "").split(";", 1)[0].strip().lower()
    if not value:
        return DEFAULT_IMAGE_MIME
    return _MIME_ALIASES.get(value, value)


def guess_image_mime(url: str, content_type: Optional[str] = None) -> str:
    """Pick a media type from ``Content-Type``, then the URL extension."""
    if content_type and content_type.split(";", 1)[0].strip():
        return canonical_mime(content_type)
    guessed, _ = mimetypes.guess_type(urlparse(url).path)
    return canonical_mime(guessed)


def parse_data_url(url: str) -> Optional[Tuple[str, bytes]]:
    """Return ``(mime_type, payload)`` for a ``data:`` URL, or ``None``.

    ``None`` means the URL is malformed, the payload is empty or the base64
    cannot be decoded.
    """
    if not url.startswith("data:") or "," not in url:
        return None
    header, payload = url[len("data:"):].split(",", 1)
    params = header.split(";")
    mime = params[0]
    is_b64 = any(p.strip().lower() == "base64" for p in params[1:])
    if not payload.strip():
        return None
    if is_b64:
        try:
            data = base64.b64decode(payload.strip(), validate=True)
        except (binascii.Error, ValueError):
            return None
    else:
        data = unquote_to_bytes(payload)
    if not data:
        return None
    return canonical_mime(mime), data


__all__ = ["DEFAULT_IMAGE_MIME", "canonical_mime", "guess_image_mime", "parse_data_url"]
