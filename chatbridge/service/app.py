"""FastAPI application exposing the route dispatcher.

Routes
------
- ``GET /api/health``
- ``GET|POST|OPTIONS /api/{provider}/{path}``: ``OPTIONS`` answers
  ``{"body": "OK"}``; everything else goes through :class:`RouteDispatcher`.

Responses
---------
- non-streaming chat: canonical ``chat.completion`` JSON;
- streaming chat: ``text/event-stream`` with one ``data:`` line per chunk and
  a final ``data: [DONE]``. A backend failure mid-stream sends one
  ``data: {"error": true, "msg": ...}`` frame and closes the stream without
  ``[DONE]``;
- models: ``{"object": "list", "data": [...]}``; usage: ``{"used", "total"}``;
  speech: raw audio bytes;
- errors: ``{"error": true, "msg": ...}`` with the error's HTTP status.
"""

from __future__ import annotations

import logging
import os
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response, StreamingResponse

from ..base.errors import ProviderError
from ..base.logging import LogContext, get_logger, log_event
from ..base.models import CanonicalResponse, UsageInfo
from ..base.streaming import SSE_MEDIA_TYPE, ChunkStream, SSEEncoder
from ..config.defaults import SERVICE_CORS_DEFAULT_ORIGINS
from .dispatcher import DispatchResult, InboundCall, RouteDispatcher
from .wire import AUDIO_MEDIA_TYPES, model_list_payload, usage_payload

_LOGGER = get_logger("chatbridge.service")

SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}


async def sse_body(stream: ChunkStream, logger: logging.Logger = _LOGGER) -> AsyncIterator[str]:
    """Encode a canonical stream as SSE, releasing it on every exit path.

    A backend error ends the stream with an error frame instead of ``[DONE]``.
    """
    encoder = SSEEncoder(stream.model)
    try:
        async for item in stream:
            yield encoder.encode(item)
    except ProviderError as exc:
        log_event(
            logger,
            "route.error",
            LogContext(provider=exc.provider, model=stream.model),
            level=logging.WARNING,
            phase="stream",
            error_code=exc.code.value,
            error=exc.message,
        )
        yield encoder.encode_error(exc)
    finally:
        await stream.aclose()


def render_result(result: DispatchResult) -> Response:
    value = result.value
    if isinstance(value, ChunkStream):
        return StreamingResponse(sse_body(value), media_type=SSE_MEDIA_TYPE, headers=SSE_HEADERS)
    if isinstance(value, CanonicalResponse):
        return JSONResponse(value.to_dict())
    if isinstance(value, UsageInfo):
        return JSONResponse(usage_payload(value))
    if isinstance(value, (bytes, bytearray)):
        media_type = AUDIO_MEDIA_TYPES.get(result.media_format or "mp3", "application/octet-stream")
        return Response(content=bytes(value), media_type=media_type)
    if result.operation == "models":
        return JSONResponse(model_list_payload(list(value)))
    return JSONResponse(value)


def _cors_origins() -> list[str]:
    raw = os.getenv("CHATBRIDGE_CORS_ORIGINS", SERVICE_CORS_DEFAULT_ORIGINS)
    return [o.strip() for o in raw.split(",") if o.strip()]


def create_app(dispatcher: Optional[RouteDispatcher] = None) -> FastAPI:
    """Build the FastAPI application around ``dispatcher``."""
    dispatcher = dispatcher or RouteDispatcher()
    app = FastAPI(title="chatbridge", version="0.1.0")
    app.state.dispatcher = dispatcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ProviderError)
    async def _provider_error(_request: Request, exc: ProviderError) -> JSONResponse:
        return JSONResponse(exc.to_payload(), status_code=exc.http_status)

    @app.get("/api/health")
    def health() -> Dict[str, Any]:
        """Liveness probe."""
        return {"ok": True}

    @app.api_route("/api/{provider}/{path:path}", methods=["GET", "POST", "OPTIONS"])
    async def handle(provider: str, path: str, request: Request) -> Response:
        """Dispatch one backend call."""
        if request.method == "OPTIONS":
            return JSONResponse({"body": "OK"})
        call = InboundCall(
            method=request.method,
            authorization=request.headers.get("authorization"),
            raw_body=await request.body() if request.method == "POST" else b"",
        )
        result = await dispatcher.dispatch(provider, path, call)
        return render_result(result)

    return app


app = create_app()


def get_app() -> FastAPI:
    """Return the module-level application instance."""
    return app


__all__ = ["app", "create_app", "get_app", "render_result", "sse_body"]
