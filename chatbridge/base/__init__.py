"""
Base package

Backend-agnostic contracts shared by every adapter:

- Models: canonical request/response/chunk DTOs
- Interfaces: the ``ProviderAdapter`` protocol and ``ChatCallbacks``
- Streaming: native signals, the transcoder and the SSE codec
- Normalize: multimodal content conversion
- Factory: lazy creation of backend adapters by canonical name
"""

from .cancellation import AbortController, CancellationToken, CancelledError
from .interfaces import ChatCallbacks, ProviderAdapter
from .models import (
    CanonicalChunk,
    CanonicalResponse,
    ChatMessage,
    ChatRequest,
    FinishReason,
    ImagePart,
    InlineData,
    ModelConfig,
    ModelDescriptor,
    RemoteURL,
    SpeechOptions,
    STREAM_SENTINEL,
    TextPart,
    TokenUsage,
    UsageInfo,
)
from .normalize import ContentNormalizer, ensure_images_encoded
from .streaming import ChunkStream, StreamMetrics, StreamState, StreamTranscoder
from .adapter import BaseProviderAdapter
from .factory import ProviderFactory, UnknownProviderError

__all__ = [
    # Models
    "ChatMessage",
    "TextPart",
    "ImagePart",
    "RemoteURL",
    "InlineData",
    "ModelConfig",
    "ChatRequest",
    "CanonicalChunk",
    "FinishReason",
    "STREAM_SENTINEL",
    "CanonicalResponse",
    "TokenUsage",
    "ModelDescriptor",
    "UsageInfo",
    "SpeechOptions",
    # Contracts
    "ProviderAdapter",
    "ChatCallbacks",
    "BaseProviderAdapter",
    # Runtime
    "AbortController",
    "CancellationToken",
    "CancelledError",
    "ContentNormalizer",
    "ensure_images_encoded",
    "ChunkStream",
    "StreamMetrics",
    "StreamState",
    "StreamTranscoder",
    # Factory
    "ProviderFactory",
    "UnknownProviderError",
]
