"""Bedrock (Claude Messages on Bedrock) wire translation.

Request: system messages are folded into the top-level ``system`` string;
every other message becomes a list of ``text``/``image`` blocks with inline
base64 images.

Response: the single-shot body must carry a non-empty ``content`` list.
Stream events carry a JSON document in ``chunk.bytes``; ``text_delta``
blocks are text and ``message_stop`` closes the stream, with the finish
reason read from the invocation metrics.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional

from ..base.errors import UpstreamProtocolError
from ..base.models import (
    CanonicalResponse,
    ChatRequest,
    FinishReason,
    TokenUsage,
)
from ..base.streaming import NativeDelta, NativeSignal, NativeStop
from ..base.utils import render_claude_messages, split_system_and_rest
from ..config.defaults import BEDROCK_ANTHROPIC_VERSION

METRICS_KEY = "amazon-bedrock-invocationMetrics"
INPUT_TOKENS_HEADER = "x-amzn-bedrock-input-token-count"
OUTPUT_TOKENS_HEADER = "x-amzn-bedrock-output-token-count"


def build_payload(request: ChatRequest) -> Dict[str, Any]:
    """Return the ``InvokeModel`` body for a normalized request."""
    system, rest = split_system_and_rest(request)
    payload: Dict[str, Any] = {
        "anthropic_version": BEDROCK_ANTHROPIC_VERSION,
        "max_tokens": request.config.max_tokens,
        "temperature": request.config.temperature,
        "messages": render_claude_messages(rest),
    }
    if system is not None:
        payload["system"] = system
    return payload


def _header_int(headers: Mapping[str, str], name: str) -> Optional[int]:
    try:
        return int(headers[name])
    except (KeyError, TypeError, ValueError):
        return None


def extract_usage(body: Mapping[str, Any], headers: Mapping[str, str]) -> TokenUsage:
    """Read token counts from ``usage``, then invocation metrics, then headers."""
    usage = body.get("usage") if isinstance(body.get("usage"), Mapping) else {}
    metrics = body.get(METRICS_KEY) if isinstance(body.get(METRICS_KEY), Mapping) else {}
    prompt = usage.get("input_tokens", metrics.get("inputTokenCount"))
    completion = usage.get("output_tokens", metrics.get("outputTokenCount"))
    if prompt is None:
        prompt = _header_int(headers, INPUT_TOKENS_HEADER)
    if completion is None:
        completion = _header_int(headers, OUTPUT_TOKENS_HEADER)
    return TokenUsage.from_counts(prompt, completion)


def parse_response(raw: bytes, headers: Mapping[str, str], model: str) -> CanonicalResponse:
    """Validate and convert an ``InvokeModel`` body.

    Raises :class:`UpstreamProtocolError` (keeping ``raw``) when the body is
    not JSON or has no content blocks.
    """
    try:
        body = json.loads(raw)
    except ValueError:
        body = None
    if not isinstance(body, Mapping):
        raise UpstreamProtocolError(
            message="Bedrock returned a non-JSON body", provider="bedrock", model=model, raw_body=raw
        )
    content = body.get("content")
    if not isinstance(content, list) or not content:
        raise UpstreamProtocolError(
            message="Bedrock response has no content", provider="bedrock", model=model, raw_body=raw
        )
    text = "".join(
        block.get("text") or ""
        for block in content
        if isinstance(block, Mapping) and block.get("type", "text") == "text"
    )
    return CanonicalResponse(text=text, usage=extract_usage(body, headers), model=model, raw=body)


def decode_stream_event(event: Any) -> List[NativeSignal]:
    """Decode one ``InvokeModelWithResponseStream`` event.

    Events without chunk bytes produce nothing. Malformed JSON raises, which
    the transcoder treats as a skipped frame.
    """
    chunk = event.get("chunk") if isinstance(event, Mapping) else None
    data = chunk.get("bytes") if isinstance(chunk, Mapping) else None
    if not data:
        return []
    doc = json.loads(data)
    kind = doc.get("type")
    if kind == "content_block_delta":
        delta = doc.get("delta") or {}
        if delta.get("type") == "text_delta":
            return [NativeDelta(delta.get("text") or "")]
        return []
    if kind == "message_stop":
        metrics = doc.get(METRICS_KEY) or {}
        count = metrics.get("outputTokenCount")
        produced = isinstance(count, (int, float)) and not isinstance(count, bool) and count > 0
        return [NativeStop(FinishReason.STOP if produced else FinishReason.LENGTH)]
    return []


__all__ = [
    "build_payload",
    "extract_usage",
    "parse_response",
    "decode_stream_event",
]
