"""Multimodal content normalizer.

Converts every image part of a canonical request into :class:`InlineData`
so adapters only ever render inline base64 images:

* inline data passes through with its media type re-tagged;
* ``data:`` URLs are decoded in place;
* ``http(s)://`` URLs are fetched over one per-request ``httpx.AsyncClient``;
  all fetches of a request run concurrently and results keep input order;
* anything that cannot be turned into bytes is dropped and logged.

A message left with no parts receives a single empty text part.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import List, Optional, Sequence

import httpx

from ..errors import ValidationError
from ..http import AsyncClientFactory, new_async_client
from ..logging import LogContext, get_logger, log_event
from ..models import ChatMessage, ChatRequest, ContentPart, ImagePart, InlineData, RemoteURL, TextPart
from .data_url import canonical_mime, guess_image_mime, parse_data_url

_URL_LOG_LIMIT = 120


def _loggable_url(url: str) -> str:
    if url.startswith("data:"):
        return url.split(",", 1)[0] + ",..."
    return url if len(url) <= _URL_LOG_LIMIT else url[:_URL_LOG_LIMIT] + "..."


def _needs_fetch(part: ContentPart) -> bool:
    return (
        isinstance(part, ImagePart)
        and isinstance(part.source, RemoteURL)
        and part.source.url.lower().startswith(("http://", "https://"))
    )


class ContentNormalizer:
    """Request-direction content conversion shared by all adapters."""

    def __init__(
        self,
        *,
        client_factory: Optional[AsyncClientFactory] = None,
        provider: str = "-",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._client_factory = client_factory or new_async_client
        self.provider = provider
        self.logger = logger or get_logger("chatbridge.normalize")

    def _dropped(self, reason: str, url: str, model: Optional[str] = None, **fields) -> None:
        log_event(
            self.logger,
            "normalize.part.dropped",
            LogContext(provider=self.provider, model=model),
            level=logging.WARNING,
            reason=reason,
            url=_loggable_url(url),
            **fields,
        )

    async def _fetch(self, url: str, client: httpx.AsyncClient) -> Optional[InlineData]:
        try:
            response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            self._dropped("fetch_failed", url, error=f"{type(exc).__name__}: {exc}")
            return None
        if not response.is_success:
            self._dropped("http_status", url, status=response.status_code)
            return None
        data = response.content
        if not data:
            self._dropped("empty_body", url)
            return None
        mime = guess_image_mime(url, response.headers.get("content-type"))
        return InlineData(mime_type=mime, data=data)

    async def normalize_part(
        self, part: ContentPart, client: Optional[httpx.AsyncClient] = None
    ) -> Optional[ContentPart]:
        """Return the normalized part, or ``None`` when it must be dropped."""
        if not isinstance(part, ImagePart):
            return part
        source = part.source
        if isinstance(source, InlineData):
            if not source.data:
                self._dropped("empty_inline", "inline")
                return None
            return replace(part, source=InlineData(canonical_mime(source.mime_type), source.data))
        url = source.url.strip()
        if url.startswith("data:"):
            parsed = parse_data_url(url)
            if parsed is None:
                self._dropped("bad_data_url", url)
                return None
            mime, data = parsed
            return ImagePart(source=InlineData(mime_type=mime, data=data))
        if url.lower().startswith(("http://", "https://")):
            if client is None:
                async with self._client_factory() as own:
                    inline = await self._fetch(url, own)
            else:
                inline = await self._fetch(url, client)
            return None if inline is None else ImagePart(source=inline)
        self._dropped("unsupported_scheme", url)
        return None

    async def normalize_message(
        self, message: ChatMessage, client: Optional[httpx.AsyncClient] = None
    ) -> ChatMessage:
        if isinstance(message.content, str):
            return message
        results = await asyncio.gather(*(self.normalize_part(p, client) for p in message.content))
        parts: List[ContentPart] = [p for p in results if p is not None]
        if not parts:
            parts = [TextPart("")]
        return ChatMessage(role=message.role, content=parts)

    async def normalize_request(self, request: ChatRequest) -> ChatRequest:
        """Normalize all messages; remote images are fetched concurrently."""
        if any(
            not isinstance(m.content, str) and any(_needs_fetch(p) for p in m.content)
            for m in request.messages
        ):
            async with self._client_factory() as client:
                messages = await self._normalize_all(request.messages, client)
        else:
            messages = await self._normalize_all(request.messages, None)
        return ChatRequest(messages=messages, config=request.config)

    async def _normalize_all(
        self, messages: Sequence[ChatMessage], client: Optional[httpx.AsyncClient]
    ) -> List[ChatMessage]:
        return list(await asyncio.gather(*(self.normalize_message(m, client) for m in messages)))


def ensure_images_encoded(request: ChatRequest, *, provider: str = "-") -> None:
    """Raise :class:`ValidationError` unless every image part carries inline bytes."""
    for index, message in enumerate(request.messages):
        if isinstance(message.content, str):
            continue
        for part in message.content:
            if not isinstance(part, ImagePart):
                continue
            source = part.source
            if not isinstance(source, InlineData) or not source.data:
                raise ValidationError(
                    message=f"message {index}: image part has no inline data",
                    provider=provider,
                    model=request.model,
                )


__all__ = ["ContentNormalizer", "ensure_images_encoded"]
