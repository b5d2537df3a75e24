"""GatewayClient: adapter speaking to a running chatbridge service.

It exposes the same capability set as the in-process adapters (chat with
callbacks, models, usage, speech) but sends requests over HTTP to
``{base_url}/api/{provider}/...`` and parses the canonical wire format.

Streaming responses are read line by line. ``data: [DONE]`` is the only
successful end of stream; a stream that stops without it is reported as an
:class:`UpstreamProtocolError`. An error frame
(``{"error": true, "msg": ...}``) is raised as :class:`UpstreamError`.
Non-2xx answers raise :class:`UpstreamError` carrying the HTTP status (via
``classify_exception``) and the ``msg`` of the error body. A 2xx body that
is not JSON is an :class:`UpstreamProtocolError` keeping the raw body.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from ..base.adapter import deliver_chat
from ..base.cancellation import CancellationToken
from ..base.errors import ProviderError, UpstreamError, UpstreamProtocolError, wrap_upstream
from ..base.http import AsyncClientFactory, new_async_client
from ..base.interfaces import ChatCallbacks, invoke_callback
from ..base.logging import LogContext, get_logger, log_event
from ..base.models import (
    CanonicalResponse,
    ChatRequest,
    ModelDescriptor,
    SpeechOptions,
    TokenUsage,
    UsageInfo,
    validate_request,
)
from ..base.streaming import DONE_MARKER, decode_chunk_payload, decode_error_payload, iter_sse_data


class GatewayClient:
    """Remote adapter for one backend behind a chatbridge service."""

    def __init__(
        self,
        provider: str,
        *,
        base_url: str,
        token: Optional[str] = None,
        client_factory: Optional[AsyncClientFactory] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.provider = provider
        self.base_url = base_url.rstrip("/")
        self._token = token
        self._transport = transport
        self._client_factory = client_factory
        self._logger = logger or get_logger("chatbridge.gateway")

    @property
    def provider_name(self) -> str:
        return self.provider

    def path(self, sub_path: str) -> str:
        return f"/api/{self.provider}/{sub_path.lstrip('/')}"

    def _client(self) -> httpx.AsyncClient:
        if self._client_factory is not None:
            return self._client_factory()
        headers = {"Authorization": f"Bearer {self._token}"} if self._token else {}
        return new_async_client(base_url=self.base_url, headers=headers, transport=self._transport)

    def _status_error(self, response: httpx.Response, model: Optional[str] = None) -> ProviderError:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        msg = payload.get("msg") if isinstance(payload, Mapping) else None
        detail = msg or response.text or response.reason_phrase
        exc = httpx.HTTPStatusError(
            f"HTTP {response.status_code}: {detail}", request=response.request, response=response
        )
        return wrap_upstream(exc, provider=self.provider, model=model)

    async def _send(self, method: str, sub_path: str, *, model: Optional[str] = None, **kwargs: Any) -> httpx.Response:
        try:
            async with self._client() as client:
                response = await client.request(method, self.path(sub_path), **kwargs)
                await response.aread()
        except httpx.HTTPError as exc:
            raise wrap_upstream(exc, provider=self.provider, model=model) from exc
        if not response.is_success:
            raise self._status_error(response, model)
        return response

    def _decode(self, response: httpx.Response, model: Optional[str] = None) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamProtocolError(
                message="gateway response is not valid JSON",
                provider=self.provider,
                model=model,
                raw_body=response.content,
            ) from exc

    # ---- chat ----

    async def _complete(self, request: ChatRequest) -> CanonicalResponse:
        response = await self._send("POST", "v1/chat/completions", model=request.model, json=request.to_dict())
        data = self._decode(response, request.model)
        choices = data.get("choices") if isinstance(data, Mapping) else None
        if not choices:
            raise UpstreamProtocolError(
                message="gateway response has no choices",
                provider=self.provider,
                model=request.model,
                raw_body=response.content,
            )
        usage = data.get("usage") or {}
        return CanonicalResponse(
            text=(choices[0].get("message") or {}).get("content") or "",
            usage=TokenUsage(
                prompt_tokens=usage.get("prompt_tokens", -1),
                completion_tokens=usage.get("completion_tokens", -1),
                total_tokens=usage.get("total_tokens", -1),
            ),
            model=data.get("model") or request.model,
            id=data.get("id") or "",
            created=data.get("created") or 0,
            raw=data,
        )

    async def _stream(
        self, request: ChatRequest, callbacks: ChatCallbacks, token: CancellationToken
    ) -> CanonicalResponse:
        ctx = LogContext(provider=self.provider, model=request.model)
        parts: List[str] = []
        finish_reason = None
        done = False
        try:
            async with self._client() as client:
                async with client.stream("POST", self.path("v1/chat/completions"), json=request.to_dict()) as response:
                    if not response.is_success:
                        await response.aread()
                        raise self._status_error(response, request.model)
                    async for data in iter_sse_data(response.aiter_lines()):
                        token.raise_if_cancelled()
                        if data == DONE_MARKER:
                            done = True
                            break
                        failure = decode_error_payload(data)
                        if failure is not None:
                            raise UpstreamError(message=failure, provider=self.provider, model=request.model)
                        try:
                            chunk = decode_chunk_payload(data)
                        except (ValueError, AttributeError, TypeError) as exc:
                            log_event(self._logger, "stream.frame.skipped", ctx, level=logging.DEBUG, error=str(exc))
                            continue
                        if chunk is None:
                            continue
                        if chunk.delta_text:
                            parts.append(chunk.delta_text)
                            await invoke_callback(callbacks.on_update, "".join(parts), chunk.delta_text)
                        if chunk.finish_reason is not None:
                            finish_reason = chunk.finish_reason
        except httpx.HTTPError as exc:
            raise wrap_upstream(exc, provider=self.provider, model=request.model) from exc
        if not done:
            raise UpstreamProtocolError(
                message="stream ended without [DONE]", provider=self.provider, model=request.model
            )
        return CanonicalResponse(
            text="".join(parts),
            model=request.model,
            raw={"finish_reason": finish_reason.value if finish_reason else None},
        )

    async def _run_chat(
        self, request: ChatRequest, callbacks: ChatCallbacks, token: CancellationToken
    ) -> CanonicalResponse:
        validate_request(request, provider=self.provider)
        if request.config.stream:
            return await self._stream(request, callbacks, token)
        return await self._complete(request)

    async def chat(self, request: ChatRequest, callbacks: Optional[ChatCallbacks] = None) -> None:
        """Same contract as ``BaseProviderAdapter.chat``."""
        await deliver_chat(
            lambda token, cbs: self._run_chat(request, cbs, token),
            callbacks,
            logger=self._logger,
            ctx=LogContext(provider=self.provider, model=request.config.model or None),
        )

    # ---- other capabilities ----

    async def models(self) -> List[ModelDescriptor]:
        data = self._decode(await self._send("GET", "v1/models"))
        return [
            ModelDescriptor(
                id=item["id"],
                name=item.get("name") or item["id"],
                provider=self.provider,
                owned_by=item.get("owned_by"),
                created=item.get("created"),
            )
            for item in (data.get("data") or [])
        ]

    async def usage(self) -> UsageInfo:
        data: Dict[str, Any] = self._decode(await self._send("GET", "dashboard/billing/usage"))
        return UsageInfo(used=data.get("used", 0), total=data.get("total", 0))

    async def speech(self, options: SpeechOptions) -> bytes:
        body = {
            "model": options.model,
            "input": options.input,
            "voice": options.voice,
            "response_format": options.response_format,
            "speed": options.speed,
        }
        return (await self._send("POST", "v1/audio/speech", model=options.model, json=body)).content


__all__ = ["GatewayClient"]
