"""boto3 transport for the Bedrock runtime.

boto3 is blocking, so every call and every read of the response event stream
runs in a worker thread via ``asyncio.to_thread``. One client is built per
request from the backend configuration; nothing is cached.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, Mapping, Tuple

import boto3

from ..base.streaming import TransportHandle, iterate_in_thread
from ..config.defaults import BEDROCK_DEFAULT_REGION

_CONTENT_TYPE = "application/json"


def make_runtime_client(config: Mapping[str, Any]) -> Any:
    """Return a ``bedrock-runtime`` client for ``config``."""
    kwargs: Dict[str, Any] = {
        "region_name": config.get("region") or BEDROCK_DEFAULT_REGION,
        "aws_access_key_id": config.get("access_key_id"),
        "aws_secret_access_key": config.get("secret_access_key"),
    }
    if endpoint := config.get("endpoint"):
        kwargs["endpoint_url"] = endpoint
    return boto3.client("bedrock-runtime", **kwargs)


def _encode(payload: Mapping[str, Any]) -> bytes:
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


def _headers(response: Mapping[str, Any]) -> Dict[str, str]:
    meta = response.get("ResponseMetadata") or {}
    return {str(k).lower(): str(v) for k, v in (meta.get("HTTPHeaders") or {}).items()}


async def invoke_model(client: Any, model_id: str, payload: Mapping[str, Any]) -> Tuple[bytes, Dict[str, str]]:
    """Run ``InvokeModel`` and return ``(body_bytes, lower-cased headers)``."""
    response = await asyncio.to_thread(
        client.invoke_model,
        modelId=model_id,
        contentType=_CONTENT_TYPE,
        accept=_CONTENT_TYPE,
        body=_encode(payload),
    )
    body = response.get("body")
    raw = await asyncio.to_thread(body.read) if hasattr(body, "read") else (body or b"")
    return raw, _headers(response)


async def open_response_stream(client: Any, model_id: str, payload: Mapping[str, Any]) -> TransportHandle:
    """Run ``InvokeModelWithResponseStream`` and wrap its event stream."""
    response = await asyncio.to_thread(
        client.invoke_model_with_response_stream,
        modelId=model_id,
        contentType=_CONTENT_TYPE,
        accept=_CONTENT_TYPE,
        body=_encode(payload),
    )
    stream = response.get("body")
    if stream is None:
        raise RuntimeError("empty response stream from Bedrock")
    close = getattr(stream, "close", None)
    return TransportHandle(iterate_in_thread(stream), close if callable(close) else None, raw=response)


__all__ = ["make_runtime_client", "invoke_model", "open_response_stream"]
