"""chatbridge package

Provider adapter and protocol translation layer for chat backends.

Purpose:
    One canonical chat request goes in, is rendered into each backend's
    native format, and the backend's answer (a single document or an event
    stream) comes back as one canonical response or chunk stream.

Public API (re-exported):
    - Version: ``__version__``
    - Exceptions: :class:`ProviderError`, :class:`ErrorCode` and the error
      taxonomy
    - Factory: :func:`create`, :class:`ProviderFactory`
    - Canonical model: :class:`ChatRequest`, :class:`ChatMessage`,
      :class:`ModelConfig`, :class:`ChatCallbacks`
"""

from .base.errors import (
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
)
from .base.factory import ProviderFactory
from .base.interfaces import ChatCallbacks
from .base.models import ChatMessage, ChatRequest, ImagePart, ModelConfig, RemoteURL, TextPart

__version__ = "0.1.0"


def create(provider: str, **kwargs):
    """Create a backend adapter by canonical name, e.g. ``create("bedrock")``."""
    return ProviderFactory.create(provider, **kwargs)


__all__ = [
    "__version__",
    "create",
    "ProviderFactory",
    "ProviderError",
    "ErrorCode",
    "AuthError",
    "ConfigurationError",
    "ForbiddenError",
    "UnsupportedCapabilityError",
    "UnsupportedModelError",
    "UpstreamError",
    "UpstreamProtocolError",
    "ValidationError",
    "ChatCallbacks",
    "ChatMessage",
    "ChatRequest",
    "ImagePart",
    "ModelConfig",
    "RemoteURL",
    "TextPart",
]
