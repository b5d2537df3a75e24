"""OpenAI Chat Completions translation helpers.

System text is sent as one leading ``system`` message. Structured content
becomes ``text``/``image_url`` parts with images as ``data:`` URLs. Reasoning
models (``o1``, ``o3``...) take ``max_completion_tokens`` and no temperature.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List

from ..base.errors import UpstreamProtocolError
from ..base.models import (
    CanonicalResponse,
    ChatMessage,
    ChatRequest,
    FinishReason,
    ImagePart,
    InlineData,
    ModelDescriptor,
    TextPart,
    TokenUsage,
)
from ..base.streaming import NativeDelta, NativeSignal, NativeStop
from ..base.utils import get_field, split_system_and_rest

PROVIDER = "openai"
_REASONING_MODEL = re.compile(r"^o\d")


def render_message(message: ChatMessage) -> Dict[str, Any]:
    if isinstance(message.content, str):
        return {"role": message.role, "content": message.content}
    parts: List[Dict[str, Any]] = []
    for part in message.content:
        if isinstance(part, TextPart):
            parts.append({"type": "text", "text": part.text})
        elif isinstance(part, ImagePart) and isinstance(part.source, InlineData):
            parts.append({"type": "image_url", "image_url": {"url": part.source.data_url()}})
    return {"role": message.role, "content": parts}


def build_params(request: ChatRequest) -> Dict[str, Any]:
    """Return keyword arguments for ``client.chat.completions.create``."""
    system, rest = split_system_and_rest(request)
    messages: List[Dict[str, Any]] = []
    if system is not None:
        messages.append({"role": "system", "content": system})
    messages.extend(render_message(m) for m in rest)
    params: Dict[str, Any] = {"model": request.model, "messages": messages}
    if _REASONING_MODEL.match(request.model):
        params["max_completion_tokens"] = request.config.max_tokens
    else:
        params["max_tokens"] = request.config.max_tokens
        params["temperature"] = request.config.temperature
    return params


def finish_reason_from(value: Any) -> FinishReason:
    return FinishReason.LENGTH if value == "length" else FinishReason.STOP


def parse_completion(completion: Any, model: str) -> CanonicalResponse:
    """Convert a ``ChatCompletion``; raises when ``choices`` is missing or empty."""
    choices = get_field(completion, "choices")
    if not choices:
        raise UpstreamProtocolError(
            message="OpenAI response has no choices",
            provider=PROVIDER,
            model=model,
            raw_body=repr(completion).encode("utf-8"),
        )
    message = get_field(choices[0], "message")
    usage = get_field(completion, "usage")
    return CanonicalResponse(
        text=get_field(message, "content") or "",
        usage=TokenUsage.from_counts(get_field(usage, "prompt_tokens"), get_field(usage, "completion_tokens")),
        model=get_field(completion, "model") or model,
        raw=completion,
    )


def decode_chunk(chunk: Any) -> List[NativeSignal]:
    """Decode one ``ChatCompletionChunk``; a chunk may carry text and a stop."""
    choices = get_field(chunk, "choices")
    if not choices:
        return []
    choice = choices[0]
    out: List[NativeSignal] = []
    content = get_field(get_field(choice, "delta"), "content")
    if content:
        out.append(NativeDelta(content))
    reason = get_field(choice, "finish_reason")
    if reason:
        out.append(NativeStop(finish_reason_from(reason)))
    return out


def to_descriptor(item: Any) -> ModelDescriptor:
    model_id = str(get_field(item, "id"))
    return ModelDescriptor(
        id=model_id,
        name=model_id,
        provider=PROVIDER,
        owned_by=get_field(item, "owned_by"),
        created=get_field(item, "created"),
    )


__all__ = [
    "render_message",
    "build_params",
    "finish_reason_from",
    "parse_completion",
    "decode_chunk",
    "to_descriptor",
]
