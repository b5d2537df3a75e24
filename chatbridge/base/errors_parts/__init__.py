"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `chatbridge.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import ProviderError
from .taxonomy import (
    AuthError,
    ConfigurationError,
    ForbiddenError,
    UnsupportedCapabilityError,
    UnsupportedModelError,
    UpstreamError,
    UpstreamProtocolError,
    ValidationError,
)
from .classification import classify_exception, wrap_upstream

__all__ = [
    "ErrorCode",
    "ProviderError",
    "AuthError",
    "ConfigurationError",
    "ForbiddenError",
    "UnsupportedCapabilityError",
    "UnsupportedModelError",
    "UpstreamError",
    "UpstreamProtocolError",
    "ValidationError",
    "classify_exception",
    "wrap_upstream",
]
