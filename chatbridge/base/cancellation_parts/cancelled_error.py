"""Cancellation error type.

Defines the public ``CancelledError`` delivered to ``on_error`` when a caller
aborts an in-flight chat through its :class:`AbortController`.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when an operation is cancelled cooperatively.

    Distinct from :class:`asyncio.CancelledError`: this one is an ordinary
    exception describing a caller-requested abort, so it can be reported
    through error callbacks without tearing down the surrounding task.
    """

__all__ = ["CancelledError"]
