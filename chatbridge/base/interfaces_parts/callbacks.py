"""Callback bundle passed to ``ProviderAdapter.chat``.

Every callback is optional and may be a plain function or a coroutine
function; awaitable results are awaited before the adapter continues.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass
class ChatCallbacks:
    """Observer hooks for one chat invocation.

    Attributes:
        on_controller: Receives the ``AbortController`` once, before the
            backend call starts.
        on_update: ``(accumulated_text, delta)`` for every non-empty delta.
        on_finish: ``(text, raw)`` exactly once on success.
        on_error: ``(error)`` at most once on failure or abort.
    """

    on_controller: Optional[Callable[[Any], Any]] = None
    on_update: Optional[Callable[[str, str], Any]] = None
    on_finish: Optional[Callable[[str, Any], Any]] = None
    on_error: Optional[Callable[[BaseException], Any]] = None


async def invoke_callback(callback: Optional[Callable[..., Any]], *args: Any) -> None:
    """Call ``callback`` with ``args`` and await the result when needed."""
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


__all__ = ["ChatCallbacks", "invoke_callback"]
