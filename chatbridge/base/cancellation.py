"""Cooperative cancellation primitives (public API facade).

- ``CancellationToken`` carries the cancellation flag polled between
  transport reads.
- ``AbortController`` is the handle given to chat callers; it cancels the
  running backend task.
- ``CancelledError`` is reported when an operation observes an abort.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancellationToken
from .cancellation_parts.abort_controller import AbortController

__all__ = ["AbortController", "CancellationToken", "CancelledError"]
