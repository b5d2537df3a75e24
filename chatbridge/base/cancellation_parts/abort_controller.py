"""Abort handle handed to chat callers.

``ProviderAdapter.chat`` passes an :class:`AbortController` to
``on_controller`` before the backend call starts. ``abort()`` cancels the
asyncio task running the backend operation, which unwinds through the
transcoder's ``finally`` and releases the transport. Chunks already delivered
are not retracted.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Optional, TypeVar

from .cancellation_token import CancellationToken
from .cancelled_error import CancelledError

T = TypeVar("T")


class AbortController:
    """Cancel an in-flight backend operation from outside."""

    def __init__(self, token: CancellationToken | None = None) -> None:
        self.token = token or CancellationToken()
        self._task: Optional[asyncio.Future] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.token.on_cancel(self._cancel_task)

    @property
    def aborted(self) -> bool:
        return self.token.cancelled

    def abort(self, reason: str | None = None) -> None:
        """Request cancellation; safe to call repeatedly, before or after completion."""
        self.token.cancel(reason or "aborted by caller")

    def _cancel_task(self) -> None:
        task, loop = self._task, self._loop
        if task is None or task.done():
            return
        if loop is not None and loop.is_running():
            loop.call_soon_threadsafe(task.cancel)
        else:
            task.cancel()

    async def run(self, operation: Awaitable[T]) -> T:
        """Run ``operation`` as a cancellable task bound to this controller.

        Raises :class:`CancelledError` when the operation was stopped by
        :meth:`abort`; an outer cancellation propagates unchanged.
        """
        if self.aborted:
            if asyncio.iscoroutine(operation):
                operation.close()
            self.token.raise_if_cancelled()
        self._loop = asyncio.get_running_loop()
        self._task = asyncio.ensure_future(operation)
        try:
            return await self._task
        except asyncio.CancelledError:
            if self.aborted and self._task.cancelled():
                current = asyncio.current_task()
                if current is None or not current.cancelling():
                    raise CancelledError(self.token.reason or "aborted by caller") from None
            raise
        finally:
            self._task = None


__all__ = ["AbortController"]
