"""AnthropicProvider adapter.

Uses the ``anthropic`` SDK's async Messages API (``client.messages.create``),
with ``stream=True`` for incremental responses, and ``client.models.list``
for model discovery.

Key behaviors:
* Model identifiers must start with ``claude``.
* The SDK's own retries are disabled (``max_retries=0``) and no timeout is
  set; retrying and deadlines belong to the caller.
* A fresh ``AsyncAnthropic`` is created per request through
  ``client_factory`` and closed when the call ends; for streams, when the
  transport is released.
"""

from __future__ import annotations

import re
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional

import anthropic

from ..base.adapter import BaseProviderAdapter
from ..base.models import CanonicalResponse, ChatRequest, ModelDescriptor
from ..base.streaming import NativeSignal, TransportHandle
from .helpers import build_params, decode_stream_event, parse_message, to_descriptor


def make_client(config: Mapping[str, Any]) -> anthropic.AsyncAnthropic:
    """Instantiate the async SDK client from backend configuration."""
    return anthropic.AsyncAnthropic(
        api_key=config.get("api_key"),
        base_url=config.get("base_url") or None,
        max_retries=0,
        timeout=None,
    )


class AnthropicProvider(BaseProviderAdapter):
    """Adapter for the Anthropic Messages API."""

    PROVIDER: ClassVar[str] = "anthropic"
    MODEL_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"^claude")
    ALLOWED_PATHS: ClassVar[Mapping[str, str]] = {
        "v1/chat/completions": "chat",
        "v1/models": "models",
    }

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        *,
        client_factory: Optional[Callable[[Mapping[str, Any]], Any]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(config, **kwargs)
        self._client_factory = client_factory or make_client

    def _create_client(self) -> Any:
        return self._client_factory(self.config)

    def build_payload(self, request: ChatRequest) -> Dict[str, Any]:
        return build_params(request)

    async def _complete(self, request: ChatRequest) -> CanonicalResponse:
        async with self._create_client() as client:
            message = await client.messages.create(**self.build_payload(request))
        return parse_message(message, request.model)

    async def _open_transport(self, request: ChatRequest) -> TransportHandle:
        client = self._create_client()
        try:
            stream = await client.messages.create(**self.build_payload(request), stream=True)
        except BaseException:
            await client.close()
            raise
        return TransportHandle.from_sdk_stream(stream, client=client)

    def decode_event(self, event: Any) -> List[NativeSignal]:
        return decode_stream_event(event)

    async def _models(self) -> List[ModelDescriptor]:
        async with self._create_client() as client:
            return [to_descriptor(item) async for item in client.models.list()]


__all__ = ["AnthropicProvider", "make_client"]
