"""
Canonical message model public surface.

This module re-exports the implementations under
``chatbridge.base.models_parts`` so callers have one stable import path.
"""

from .models_parts import (
    ContentPart,
    ImagePart,
    ImageSource,
    InlineData,
    RemoteURL,
    TextPart,
    ROLES,
    ChatMessage,
    Role,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    ModelConfig,
    ChatRequest,
    is_valid_request,
    validate_request,
    STREAM_SENTINEL,
    CanonicalChunk,
    FinishReason,
    StreamItem,
    StreamSentinel,
    UNKNOWN_TOKENS,
    CanonicalResponse,
    TokenUsage,
    new_completion_id,
    ModelDescriptor,
    UNLIMITED_TOTAL,
    UsageInfo,
    SpeechOptions,
)

__all__ = [
    "ContentPart",
    "ImagePart",
    "ImageSource",
    "InlineData",
    "RemoteURL",
    "TextPart",
    "ROLES",
    "ChatMessage",
    "Role",
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_TEMPERATURE",
    "ModelConfig",
    "ChatRequest",
    "is_valid_request",
    "validate_request",
    "STREAM_SENTINEL",
    "CanonicalChunk",
    "FinishReason",
    "StreamItem",
    "StreamSentinel",
    "UNKNOWN_TOKENS",
    "CanonicalResponse",
    "TokenUsage",
    "new_completion_id",
    "ModelDescriptor",
    "UNLIMITED_TOTAL",
    "UsageInfo",
    "SpeechOptions",
]
