"""Backend-side streaming primitives.

Adapters decode each native event into zero or more signals:

* :class:`NativeDelta`: a piece of response text.
* :class:`NativeStop`: the backend declared the stream complete.

:class:`TransportHandle` wraps the backend's incremental transport together
with the action that releases it, so the transcoder can guarantee a single
release on every exit path.
"""
from __future__ import annotations

import asyncio
import inspect
from contextlib import suppress
from dataclasses import dataclass
from typing import Any, AsyncIterable, AsyncIterator, Callable, Iterable, Iterator, Optional, Sequence, Union

from ..models import FinishReason


@dataclass(frozen=True)
class NativeDelta:
    """Text produced by the backend in one event."""

    text: str


@dataclass(frozen=True)
class NativeStop:
    """End of the backend stream with the inferred finish reason."""

    finish_reason: FinishReason


NativeSignal = Union[NativeDelta, NativeStop]
EventDecoder = Callable[[Any], Sequence[NativeSignal]]

_END = object()


async def iterate_in_thread(iterable: Iterable[Any]) -> AsyncIterator[Any]:
    """Iterate a blocking iterable, running each ``next`` in a worker thread.

    Each read is a suspension point, so other requests keep running while a
    blocking SDK stream waits for bytes.
    """
    iterator: Iterator[Any] = iter(iterable)
    while True:
        item = await asyncio.to_thread(next, iterator, _END)
        if item is _END:
            return
        yield item


class TransportHandle:
    """A backend event transport plus its release action.

    ``release`` is idempotent: the first call runs the close action (sync or
    async) and later calls do nothing. Close failures are suppressed; the
    transport is being abandoned either way.
    """

    def __init__(
        self,
        events: AsyncIterable[Any],
        close: Optional[Callable[[], Any]] = None,
        *,
        raw: Any = None,
    ) -> None:
        self._events = events
        self._close = close
        self.raw = raw
        self.released = False

    def __aiter__(self) -> AsyncIterator[Any]:
        return self._events.__aiter__()

    async def release(self) -> None:
        if self.released:
            return
        self.released = True
        closers = [self._close]
        aclose = getattr(self._events, "aclose", None)
        if callable(aclose) and aclose != self._close:
            closers.append(aclose)
        for close in closers:
            if close is None:
                continue
            with suppress(Exception):
                result = close()
                if inspect.isawaitable(result):
                    await result

    @classmethod
    def from_sdk_stream(cls, stream: Any, *, client: Any = None) -> "TransportHandle":
        """Wrap an SDK async stream exposing ``close()``/``aclose()``.

        When ``client`` is given, releasing the handle also closes that SDK
        client (and its connection pool) after the stream.
        """
        close = getattr(stream, "aclose", None) or getattr(stream, "close", None)
        close = close if callable(close) else None
        if client is None:
            return cls(stream, close, raw=stream)

        async def close_stream_and_client() -> None:
            try:
                if close is not None:
                    await _maybe_await(close())
            finally:
                await _maybe_await(client.close())

        return cls(stream, close_stream_and_client, raw=stream)


async def _maybe_await(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


__all__ = [
    "NativeDelta",
    "NativeStop",
    "NativeSignal",
    "EventDecoder",
    "TransportHandle",
    "iterate_in_thread",
]
