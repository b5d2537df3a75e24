"""
Concrete error kinds raised by the translation layer.

Each kind fixes its :class:`ErrorCode` and HTTP status class so callers only
supply the message and context:

* ``ValidationError``, ``UnsupportedModelError`` and
  ``UnsupportedCapabilityError`` are client errors (400).
* ``ForbiddenError`` (403) and ``AuthError`` (401) are raised by the route
  dispatcher before any credential is loaded.
* ``ConfigurationError`` is a server configuration error (500), distinct from
  upstream failures.
* ``UpstreamProtocolError`` and ``UpstreamError`` describe backend failures
  (500).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .error_code import ErrorCode
from .provider_error import ProviderError


@dataclass(eq=False)
class ValidationError(ProviderError):
    """Malformed or incomplete inbound request; never reaches a backend."""

    code: ErrorCode = ErrorCode.VALIDATION
    message: str = "invalid request"
    http_status = 400


@dataclass(eq=False)
class ForbiddenError(ProviderError):
    """Sub-path (or backend) not on the allow-list."""

    code: ErrorCode = ErrorCode.FORBIDDEN
    message: str = "forbidden"
    http_status = 403


@dataclass(eq=False)
class AuthError(ProviderError):
    """Authorization check failed."""

    code: ErrorCode = ErrorCode.AUTH
    message: str = "unauthorized"
    http_status = 401


@dataclass(eq=False)
class ConfigurationError(ProviderError):
    """Backend disabled or missing required credentials."""

    code: ErrorCode = ErrorCode.CONFIGURATION
    message: str = "backend is not configured"
    http_status = 500


@dataclass(eq=False)
class UnsupportedModelError(ProviderError):
    """Requested model identifier is outside the backend's model family."""

    code: ErrorCode = ErrorCode.UNSUPPORTED_MODEL
    message: str = "unsupported model"
    http_status = 400


@dataclass(eq=False)
class UnsupportedCapabilityError(ProviderError):
    """Backend does not implement the requested capability."""

    code: ErrorCode = ErrorCode.UNSUPPORTED
    message: str = "unsupported capability"
    http_status = 400


@dataclass(eq=False)
class UpstreamProtocolError(ProviderError):
    """Backend returned a structurally invalid response.

    ``raw_body`` keeps the undecoded backend body for diagnostics; it is
    never echoed to clients.
    """

    code: ErrorCode = ErrorCode.PROTOCOL
    message: str = "invalid response from backend"
    raw_body: Optional[bytes] = field(default=None, repr=False)
    http_status = 500


@dataclass(eq=False)
class UpstreamError(ProviderError):
    """Network or SDK failure during the backend call, with backend context."""

    code: ErrorCode = ErrorCode.UNKNOWN
    message: str = "backend call failed"
    http_status = 500


__all__ = [
    "ValidationError",
    "ForbiddenError",
    "AuthError",
    "ConfigurationError",
    "UnsupportedModelError",
    "UnsupportedCapabilityError",
    "UpstreamProtocolError",
    "UpstreamError",
]
