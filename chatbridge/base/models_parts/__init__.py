"""Models parts package public surface.

Re-exports individual DTOs; `chatbridge.base.models` remains the primary
stable import path.
"""

from .content_part import ContentPart, ImagePart, ImageSource, InlineData, RemoteURL, TextPart
from .message import ROLES, ChatMessage, Role
from .model_config import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, ModelConfig
from .chat_request import ChatRequest, is_valid_request, validate_request
from .chunk import STREAM_SENTINEL, CanonicalChunk, FinishReason, StreamItem, StreamSentinel
from .chat_response import UNKNOWN_TOKENS, CanonicalResponse, TokenUsage, new_completion_id
from .model_descriptor import ModelDescriptor
from .usage_info import UNLIMITED_TOTAL, UsageInfo
from .speech_options import SpeechOptions

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
