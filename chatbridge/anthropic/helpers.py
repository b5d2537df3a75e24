"""Anthropic Messages API translation helpers.

Request parameters mirror the Bedrock body without ``anthropic_version``
(the SDK sets it). Streaming uses the raw event stream of
``messages.create(stream=True)``: ``content_block_delta``/``text_delta`` carries
text, ``message_delta`` carries the stop reason and ``message_stop`` ends the
stream.
"""

from __future__ import annotations

from typing import Any, Dict, List

from ..base.errors import UpstreamProtocolError
from ..base.models import CanonicalResponse, ChatRequest, FinishReason, ModelDescriptor, TokenUsage
from ..base.streaming import NativeDelta, NativeSignal, NativeStop
from ..base.utils import get_field, render_claude_messages, split_system_and_rest, to_epoch

PROVIDER = "anthropic"


def build_params(request: ChatRequest) -> Dict[str, Any]:
    """Return keyword arguments for ``client.messages.create``."""
    system, rest = split_system_and_rest(request)
    params: Dict[str, Any] = {
        "model": request.model,
        "max_tokens": request.config.max_tokens,
        "temperature": request.config.temperature,
        "messages": render_claude_messages(rest),
    }
    if system is not None:
        params["system"] = system
    return params


def finish_reason_from(stop_reason: Any) -> FinishReason:
    return FinishReason.LENGTH if stop_reason == "max_tokens" else FinishReason.STOP


def parse_message(message: Any, model: str) -> CanonicalResponse:
    """Convert a ``Message`` into the canonical response.

    Raises :class:`UpstreamProtocolError` when there are no content blocks.
    """
    content = get_field(message, "content")
    if not content:
        raise UpstreamProtocolError(
            message="Anthropic response has no content",
            provider=PROVIDER,
            model=model,
            raw_body=repr(message).encode("utf-8"),
        )
    text = "".join(
        get_field(block, "text") or ""
        for block in content
        if get_field(block, "type", "text") == "text"
    )
    usage = get_field(message, "usage")
    return CanonicalResponse(
        text=text,
        usage=TokenUsage.from_counts(get_field(usage, "input_tokens"), get_field(usage, "output_tokens")),
        model=get_field(message, "model") or model,
        raw=message,
    )


def decode_stream_event(event: Any) -> List[NativeSignal]:
    """Decode one raw Messages stream event."""
    kind = get_field(event, "type")
    if kind == "content_block_delta":
        delta = get_field(event, "delta")
        if get_field(delta, "type") == "text_delta":
            return [NativeDelta(get_field(delta, "text") or "")]
        return []
    if kind == "message_delta":
        stop_reason = get_field(get_field(event, "delta"), "stop_reason")
        if stop_reason:
            return [NativeStop(finish_reason_from(stop_reason))]
        return []
    if kind == "message_stop":
        return [NativeStop(FinishReason.STOP)]
    return []


def to_descriptor(item: Any) -> ModelDescriptor:
    model_id = str(get_field(item, "id"))
    return ModelDescriptor(
        id=model_id,
        name=get_field(item, "display_name") or model_id,
        provider=PROVIDER,
        owned_by=PROVIDER,
        created=to_epoch(get_field(item, "created_at")),
    )


__all__ = [
    "build_params",
    "finish_reason_from",
    "parse_message",
    "decode_stream_event",
    "to_descriptor",
]
