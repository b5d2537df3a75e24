"""BedrockProvider adapter.

Runs Claude models hosted on AWS Bedrock through the ``bedrock-runtime``
``InvokeModel`` and ``InvokeModelWithResponseStream`` APIs.

Key behaviors:
* Only chat is exposed over HTTP; models() is empty and usage() is the
  unlimited sentinel because Bedrock offers neither as a simple query.
* Model identifiers must contain ``anthropic.claude``.
* The blocking boto3 client is driven from worker threads; a fresh client is
  created per request through ``client_factory``.
"""

from __future__ import annotations

import re
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional

from ..base.adapter import BaseProviderAdapter
from ..base.models import CanonicalResponse, ChatRequest
from ..base.streaming import NativeSignal, TransportHandle
from .helpers import build_payload as _build_payload
from .helpers import decode_stream_event, parse_response
from .transport import invoke_model, make_runtime_client, open_response_stream


class BedrockProvider(BaseProviderAdapter):
    """Adapter for Claude on AWS Bedrock."""

    PROVIDER: ClassVar[str] = "bedrock"
    MODEL_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"anthropic\.claude")
    ALLOWED_PATHS: ClassVar[Mapping[str, str]] = {"v1/chat/completions": "chat"}

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        *,
        client_factory: Optional[Callable[[Mapping[str, Any]], Any]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(config, **kwargs)
        self._client_factory = client_factory or make_runtime_client

    def _create_client(self) -> Any:
        return self._client_factory(self.config)

    def build_payload(self, request: ChatRequest) -> Dict[str, Any]:
        return _build_payload(request)

    async def _complete(self, request: ChatRequest) -> CanonicalResponse:
        raw, headers = await invoke_model(self._create_client(), request.model, self.build_payload(request))
        return parse_response(raw, headers, request.model)

    async def _open_transport(self, request: ChatRequest) -> TransportHandle:
        return await open_response_stream(self._create_client(), request.model, self.build_payload(request))

    def decode_event(self, event: Any) -> List[NativeSignal]:
        return decode_stream_event(event)


__all__ = ["BedrockProvider"]
