"""Streaming transcoder: native backend events to canonical chunks.

The transcoder is a two-state machine:

``STREAMING``
    Each native event is run through the adapter's decoder. Frames that fail
    to decode are discarded (logged at DEBUG). Non-empty text deltas become
    ``CanonicalChunk(delta, None)``. A completion signal produces
    ``CanonicalChunk("", finish_reason)`` followed by ``STREAM_SENTINEL`` and
    moves the machine to ``DONE``.

``DONE``
    Terminal. Further events are ignored.

A transport that is exhausted without a completion signal is finished with
``FinishReason.LENGTH`` so the sentinel is still produced exactly once.

Two drivers are provided. :meth:`StreamTranscoder.pump` pushes items into an
``emit`` callable (sync or async) and stops at the first emit failure.
:meth:`StreamTranscoder.iterate` is an async generator used by the HTTP
service. Both release the transport in ``finally`` so every exit path, including
cancellation and consumer disconnect, releases it once.
"""
from __future__ import annotations

import inspect
import logging
import time
from enum import Enum
from typing import Any, AsyncIterator, Callable, List, Optional

from ..cancellation import CancellationToken, CancelledError
from ..errors import ProviderError
from ..logging import LogContext, get_logger, log_event, normalized_log_event
from ..models import STREAM_SENTINEL, CanonicalChunk, FinishReason, StreamItem
from .native import EventDecoder, NativeDelta, NativeStop, TransportHandle
from .streaming_metrics import StreamMetrics

Emit = Callable[[StreamItem], Any]


class StreamState(str, Enum):
    STREAMING = "streaming"
    DONE = "done"


class StreamTranscoder:
    """Per-request state machine converting one backend stream."""

    def __init__(
        self,
        decode: EventDecoder,
        *,
        provider: str,
        model: str,
        token: Optional[CancellationToken] = None,
        wrap_error: Optional[Callable[[Exception], Exception]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._decode = decode
        self.provider = provider
        self.model = model
        self.token = token
        self._wrap_error = wrap_error
        self.logger = logger or get_logger("chatbridge.streaming")
        self.ctx = LogContext(provider=provider, model=model)
        self.state = StreamState.STREAMING
        self.finish_reason: Optional[FinishReason] = None
        self.emit_error: Optional[BaseException] = None
        self.metrics = StreamMetrics()
        self._parts: List[str] = []
        self._t0: Optional[float] = None

    @property
    def text(self) -> str:
        """All delta text seen so far, in order."""
        return "".join(self._parts)

    @property
    def done(self) -> bool:
        return self.state is StreamState.DONE

    def step(self, event: Any) -> List[StreamItem]:
        """Process one native event and return the items it produces."""
        if self.done:
            return []
        try:
            signals = self._decode(event)
        except Exception as exc:  # unparseable frame
            self.metrics.skipped += 1
            log_event(
                self.logger,
                "stream.frame.skipped",
                self.ctx,
                level=logging.DEBUG,
                error=f"{type(exc).__name__}: {exc}",
            )
            return []
        out: List[StreamItem] = []
        for signal in signals or ():
            if isinstance(signal, NativeDelta):
                if not signal.text:
                    continue
                self._record_delta(signal.text)
                out.append(CanonicalChunk(signal.text))
            elif isinstance(signal, NativeStop):
                out.extend(self._complete(signal.finish_reason))
                break
        return out

    def finish(self, reason: FinishReason = FinishReason.LENGTH) -> List[StreamItem]:
        """Close the stream when the transport ran dry without a stop event."""
        if self.done:
            return []
        return self._complete(reason)

    def _record_delta(self, text: str) -> None:
        if self.metrics.time_to_first_token_ms is None and self._t0 is not None:
            self.metrics.time_to_first_token_ms = (time.perf_counter() - self._t0) * 1000.0
        self._parts.append(text)

    def _complete(self, reason: FinishReason) -> List[StreamItem]:
        self.state = StreamState.DONE
        self.finish_reason = reason
        return [CanonicalChunk("", reason), STREAM_SENTINEL]

    def _translate(self, exc: Exception) -> Exception:
        if self._wrap_error is None or isinstance(exc, (ProviderError, CancelledError)):
            return exc
        return self._wrap_error(exc)

    def _check_cancelled(self) -> None:
        if self.token is not None:
            self.token.raise_if_cancelled()

    def _start(self) -> None:
        self._t0 = time.perf_counter()
        log_event(self.logger, "stream.start", self.ctx)

    async def _emit_all(self, items: List[StreamItem], emit: Emit) -> bool:
        for item in items:
            try:
                result = emit(item)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                self.state = StreamState.DONE
                self.emit_error = exc
                log_event(
                    self.logger,
                    "stream.emit.failed",
                    self.ctx,
                    level=logging.WARNING,
                    error=f"{type(exc).__name__}: {exc}",
                )
                return False
            if isinstance(item, CanonicalChunk) and item.delta_text:
                self.metrics.emitted += 1
        return True

    async def pump(self, transport: TransportHandle, emit: Emit) -> bool:
        """Drive ``transport`` to completion, pushing items into ``emit``.

        Returns ``True`` when the sentinel was delivered. Backend errors and
        cancellation propagate after the transport has been released.
        """
        self._start()
        error: Optional[BaseException] = None
        try:
            async for event in transport:
                self._check_cancelled()
                if not await self._emit_all(self.step(event), emit):
                    break
                if self.done:
                    break
            else:
                self._check_cancelled()
                await self._emit_all(self.finish(), emit)
        except Exception as exc:
            error = self._translate(exc)
            self.state = StreamState.DONE
            if error is exc:
                raise
            raise error from exc
        except BaseException as exc:
            error = exc
            self.state = StreamState.DONE
            raise
        finally:
            await transport.release()
            self._finalize(error or self.emit_error)
        return self.finish_reason is not None and self.emit_error is None

    async def iterate(self, transport: TransportHandle) -> AsyncIterator[StreamItem]:
        """Yield canonical items; closing the generator releases the transport."""
        self._start()
        error: Optional[BaseException] = None
        try:
            async for event in transport:
                self._check_cancelled()
                for item in self.step(event):
                    if isinstance(item, CanonicalChunk) and item.delta_text:
                        self.metrics.emitted += 1
                    yield item
                if self.done:
                    return
            for item in self.finish():
                yield item
        except GeneratorExit:
            # consumer went away
            self.emit_error = self.emit_error or ConnectionAbortedError("consumer closed the stream")
            raise
        except Exception as exc:
            error = self._translate(exc)
            if error is exc:
                raise
            raise error from exc
        except BaseException as exc:
            error = exc
            raise
        finally:
            self.state = StreamState.DONE
            await transport.release()
            self._finalize(error or self.emit_error)

    def _finalize(self, error: Optional[BaseException]) -> None:
        if self._t0 is not None:
            self.metrics.total_duration_ms = (time.perf_counter() - self._t0) * 1000.0
        code = getattr(getattr(error, "code", None), "value", None)
        if error is not None and code is None:
            code = type(error).__name__
        normalized_log_event(
            self.logger,
            "stream.end" if error is None else "stream.error",
            self.ctx,
            phase="finalize",
            error_code=code,
            emitted=self.metrics.emitted > 0,
            tokens=None,
            level=logging.INFO if error is None else logging.WARNING,
            finish_reason=self.finish_reason.value if self.finish_reason else None,
            emitted_count=self.metrics.emitted,
            skipped_count=self.metrics.skipped,
            time_to_first_token_ms=self.metrics.time_to_first_token_ms,
            total_duration_ms=self.metrics.total_duration_ms,
            error=None if error is None else str(error),
        )


class ChunkStream:
    """Canonical item stream returned by ``open_stream``.

    Iterate with ``async for``; call :meth:`aclose` to stop early. The
    transport is released exactly once whether or not iteration started.
    """

    def __init__(self, transcoder: StreamTranscoder, transport: TransportHandle) -> None:
        self.transcoder = transcoder
        self._transport = transport
        self._iterator: Optional[AsyncIterator[StreamItem]] = None

    @property
    def model(self) -> str:
        return self.transcoder.model

    def __aiter__(self) -> AsyncIterator[StreamItem]:
        if self._iterator is None:
            self._iterator = self.transcoder.iterate(self._transport)
        return self._iterator

    async def pump(self, emit: Emit) -> bool:
        """Push every item into ``emit``; see :meth:`StreamTranscoder.pump`."""
        return await self.transcoder.pump(self._transport, emit)

    async def aclose(self) -> None:
        if self._iterator is not None:
            await self._iterator.aclose()  # type: ignore[attr-defined]
        await self._transport.release()


__all__ = ["StreamState", "StreamTranscoder", "ChunkStream", "Emit"]
