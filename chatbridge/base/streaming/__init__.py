"""Streaming package: native signals, transcoder, metrics and SSE codec."""

from .native import (
    EventDecoder,
    NativeDelta,
    NativeSignal,
    NativeStop,
    TransportHandle,
    iterate_in_thread,
)
from .sse import (
    DONE_LINE,
    DONE_MARKER,
    SSE_MEDIA_TYPE,
    SSEEncoder,
    decode_chunk_payload,
    decode_error_payload,
    iter_sse_data,
)
from .streaming_metrics import StreamMetrics
from .transcoder import ChunkStream, StreamState, StreamTranscoder

__all__ = [
    "EventDecoder",
    "NativeDelta",
    "NativeSignal",
    "NativeStop",
    "TransportHandle",
    "iterate_in_thread",
    "DONE_LINE",
    "DONE_MARKER",
    "SSE_MEDIA_TYPE",
    "SSEEncoder",
    "decode_chunk_payload",
    "decode_error_payload",
    "iter_sse_data",
    "StreamMetrics",
    "ChunkStream",
    "StreamState",
    "StreamTranscoder",
]
