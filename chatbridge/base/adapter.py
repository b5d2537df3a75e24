"""Shared adapter flow for every backend.

``BaseProviderAdapter`` owns the provider-agnostic part of a request:

1. configuration check (``ConfigurationError`` before any I/O);
2. request validation and model-family check;
3. content normalization and the inline-image guarantee;
4. the backend call, delegated to three hooks a backend implements:
   ``build_payload`` + ``_complete`` for single-shot calls, ``_open_transport``
   + ``decode_event`` for streams.

``chat`` wraps the above behind the callback contract: the abort controller
is handed out once, deltas are reported as they arrive, and exactly one of
``on_finish`` / ``on_error`` ends the call. SDK and network exceptions are
wrapped into :class:`UpstreamError` with backend context.
"""
from __future__ import annotations

import logging
import re
import time
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, ClassVar, Dict, List, Mapping, Optional, Sequence

from ..config import get_provider_config, require_backend_config
from .cancellation import AbortController, CancellationToken, CancelledError
from .errors import ProviderError, UnsupportedCapabilityError, UnsupportedModelError, wrap_upstream
from .http import AsyncClientFactory
from .interfaces import ChatCallbacks, invoke_callback
from .logging import LogContext, get_logger, log_event, normalized_log_event
from .models import (
    CanonicalChunk,
    CanonicalResponse,
    ChatRequest,
    ModelDescriptor,
    SpeechOptions,
    StreamItem,
    UsageInfo,
    validate_request,
)
from .normalize import ContentNormalizer, ensure_images_encoded
from .streaming import ChunkStream, NativeSignal, StreamTranscoder, TransportHandle


ChatRunner = Callable[[CancellationToken, ChatCallbacks], Awaitable[CanonicalResponse]]


async def deliver_chat(
    run: ChatRunner,
    callbacks: Optional[ChatCallbacks],
    *,
    logger: logging.Logger,
    ctx: LogContext,
) -> None:
    """Drive one chat operation behind the callback contract.

    ``on_controller`` receives the abort handle before ``run`` starts.
    Exactly one of ``on_finish`` / ``on_error`` is called afterwards.
    """
    callbacks = callbacks or ChatCallbacks()
    controller = AbortController()
    await invoke_callback(callbacks.on_controller, controller)
    try:
        response = await controller.run(run(controller.token, callbacks))
    except CancelledError as exc:
        log_event(logger, "chat.error", ctx, level=logging.INFO, error_code="cancelled", error=str(exc))
        await invoke_callback(callbacks.on_error, exc)
        return
    except Exception as exc:
        code = exc.code.value if isinstance(exc, ProviderError) else type(exc).__name__
        log_event(logger, "chat.error", ctx, level=logging.WARNING, error_code=code, error=str(exc))
        await invoke_callback(callbacks.on_error, exc)
        return
    await invoke_callback(callbacks.on_finish, response.text, response)


class BaseProviderAdapter(ABC):
    """Template for backend adapters.

    Subclasses set ``PROVIDER``, ``MODEL_PATTERN`` and ``ALLOWED_PATHS`` and
    implement the backend hooks. ``ALLOWED_PATHS`` maps an HTTP sub-path to
    the operation name the route dispatcher invokes.
    """

    PROVIDER: ClassVar[str] = "-"
    MODEL_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r".+")
    ALLOWED_PATHS: ClassVar[Mapping[str, str]] = {}

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        *,
        api_key: Optional[str] = None,
        normalizer: Optional[ContentNormalizer] = None,
        http_client_factory: Optional[AsyncClientFactory] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config: Dict[str, Any] = (
            dict(config) if config is not None else get_provider_config(self.PROVIDER)
        )
        if api_key:
            self.config["api_key"] = api_key
        self._logger = logger or get_logger(f"chatbridge.{self.PROVIDER}")
        self.normalizer = normalizer or ContentNormalizer(
            client_factory=http_client_factory, provider=self.PROVIDER, logger=self._logger
        )

    @property
    def provider_name(self) -> str:
        return self.PROVIDER

    # ---- Checks ----

    def _ensure_configured(self) -> None:
        require_backend_config(self.PROVIDER, self.config)

    def supports_model(self, model: str) -> bool:
        return bool(model) and self.MODEL_PATTERN.search(model) is not None

    def ensure_model_supported(self, model: str) -> None:
        if not self.supports_model(model):
            raise UnsupportedModelError(
                message=f"model {model!r} is not served by {self.PROVIDER}",
                provider=self.PROVIDER,
                model=model,
            )

    async def prepare(self, request: ChatRequest) -> ChatRequest:
        """Validate and normalize ``request``; every check runs before backend I/O."""
        validate_request(request, provider=self.PROVIDER)
        self.ensure_model_supported(request.model)
        normalized = await self.normalizer.normalize_request(request)
        ensure_images_encoded(normalized, provider=self.PROVIDER)
        return normalized

    def _wrap(self, exc: BaseException, model: Optional[str] = None) -> ProviderError:
        return wrap_upstream(exc, provider=self.PROVIDER, model=model)

    # ---- Backend hooks ----

    @abstractmethod
    def build_payload(self, request: ChatRequest) -> Dict[str, Any]:
        """Render a normalized request into the backend's native body."""

    @abstractmethod
    async def _complete(self, request: ChatRequest) -> CanonicalResponse:
        """Run a single-shot call for a normalized request."""

    @abstractmethod
    async def _open_transport(self, request: ChatRequest) -> TransportHandle:
        """Start a streaming call and return its event transport."""

    @abstractmethod
    def decode_event(self, event: Any) -> Sequence[NativeSignal]:
        """Decode one native stream event; raise for unparseable frames."""

    async def _models(self) -> List[ModelDescriptor]:
        return []

    async def _usage(self) -> UsageInfo:
        return UsageInfo.unlimited()

    async def _speech(self, options: SpeechOptions) -> bytes:
        raise UnsupportedCapabilityError(
            message=f"{self.PROVIDER} does not support speech synthesis",
            provider=self.PROVIDER,
            model=options.model,
        )

    # ---- Operations ----

    async def complete(self, request: ChatRequest) -> CanonicalResponse:
        """Non-streaming chat returning the canonical response."""
        self._ensure_configured()
        prepared = await self.prepare(request)
        ctx = LogContext(provider=self.PROVIDER, model=prepared.model)
        log_event(self._logger, "chat.start", ctx, stream=False)
        t0 = time.perf_counter()
        try:
            response = await self._complete(prepared)
        except ProviderError:
            raise
        except Exception as exc:
            raise self._wrap(exc, prepared.model) from exc
        normalized_log_event(
            self._logger,
            "chat.end",
            ctx,
            phase="finalize",
            emitted=bool(response.text),
            tokens=response.usage.to_dict(),
            latency_ms=(time.perf_counter() - t0) * 1000.0,
        )
        return response

    async def open_stream(
        self, request: ChatRequest, *, token: Optional[CancellationToken] = None
    ) -> ChunkStream:
        """Open a backend stream; fail-fast errors surface before the first chunk."""
        self._ensure_configured()
        prepared = await self.prepare(request)
        try:
            transport = await self._open_transport(prepared)
        except ProviderError:
            raise
        except Exception as exc:
            raise self._wrap(exc, prepared.model) from exc
        transcoder = StreamTranscoder(
            self.decode_event,
            provider=self.PROVIDER,
            model=prepared.model,
            token=token,
            wrap_error=lambda exc: self._wrap(exc, prepared.model),
            logger=self._logger,
        )
        return ChunkStream(transcoder, transport)

    async def _run_chat(
        self, request: ChatRequest, callbacks: ChatCallbacks, token: CancellationToken
    ) -> CanonicalResponse:
        if not request.config.stream:
            return await self.complete(request)
        stream = await self.open_stream(request, token=token)
        parts: List[str] = []

        async def emit(item: StreamItem) -> None:
            if isinstance(item, CanonicalChunk) and item.delta_text:
                parts.append(item.delta_text)
                await invoke_callback(callbacks.on_update, "".join(parts), item.delta_text)

        delivered = await stream.pump(emit)
        transcoder = stream.transcoder
        if not delivered and transcoder.emit_error is not None:
            raise transcoder.emit_error
        return CanonicalResponse(
            text=transcoder.text,
            model=transcoder.model,
            raw={"finish_reason": transcoder.finish_reason.value if transcoder.finish_reason else None},
        )

    async def chat(self, request: ChatRequest, callbacks: Optional[ChatCallbacks] = None) -> None:
        """Run one chat request and report through ``callbacks``.

        Failures never raise out of ``chat``; they are delivered once to
        ``on_error``. An abort through the controller reports
        :class:`CancelledError`. Cancellation of the calling task propagates.
        """
        ctx = LogContext(provider=self.PROVIDER, model=request.config.model or None)
        await deliver_chat(
            lambda token, cbs: self._run_chat(request, cbs, token),
            callbacks,
            logger=self._logger,
            ctx=ctx,
        )

    async def models(self) -> List[ModelDescriptor]:
        self._ensure_configured()
        try:
            return await self._models()
        except ProviderError:
            raise
        except Exception as exc:
            raise self._wrap(exc) from exc

    async def usage(self) -> UsageInfo:
        self._ensure_configured()
        try:
            return await self._usage()
        except ProviderError:
            raise
        except Exception as exc:
            raise self._wrap(exc) from exc

    async def speech(self, options: SpeechOptions) -> bytes:
        self._ensure_configured()
        try:
            return await self._speech(options)
        except ProviderError:
            raise
        except Exception as exc:
            raise self._wrap(exc, options.model) from exc


__all__ = ["BaseProviderAdapter", "ChatRunner", "deliver_chat"]
