"""HTTP service layer: route dispatcher, FastAPI app and remote client."""

from .auth import AuthResult, authorize
from .dispatcher import DispatchResult, InboundCall, RouteDispatcher

__all__ = ["AuthResult", "authorize", "DispatchResult", "InboundCall", "RouteDispatcher"]
