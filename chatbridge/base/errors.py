"""Unified provider error taxonomy public surface.

This module re-exports the implementations under
``chatbridge.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts import (
    AuthError,
    ConfigurationError,
    ErrorCode,
    ForbiddenError,
    ProviderError,
    UnsupportedCapabilityError,
    UnsupportedModelError,
    UpstreamError,
    UpstreamProtocolError,
    ValidationError,
    classify_exception,
    wrap_upstream,
)

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
