"""OpenAI provider adapter.

Uses the ``openai`` SDK's async client for Chat Completions (streaming and
not), model listing and text-to-speech.

Key behaviors:
* Model identifiers must look like ``gpt-*``, ``o<digit>*`` or ``chatgpt-*``.
* Billing usage has no public API for project keys, so ``usage()`` reports
  the unlimited sentinel.
* SDK retries are disabled and no timeout is set.
* Each call builds its own ``AsyncOpenAI`` and closes it when the call ends;
  a stream closes it together with the response.
"""

from __future__ import annotations

import re
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional

import openai

from ..base.adapter import BaseProviderAdapter
from ..base.models import CanonicalResponse, ChatRequest, ModelDescriptor, SpeechOptions
from ..base.streaming import NativeSignal, TransportHandle
from .helpers import build_params, decode_chunk, parse_completion, to_descriptor


def make_client(config: Mapping[str, Any]) -> openai.AsyncOpenAI:
    """Instantiate the async SDK client from backend configuration."""
    return openai.AsyncOpenAI(
        api_key=config.get("api_key"),
        base_url=config.get("base_url") or None,
        organization=config.get("organization") or None,
        max_retries=0,
        timeout=None,
    )


class OpenAIProvider(BaseProviderAdapter):
    """Adapter for the OpenAI API."""

    PROVIDER: ClassVar[str] = "openai"
    MODEL_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"^(gpt-|o\d|chatgpt-)")
    ALLOWED_PATHS: ClassVar[Mapping[str, str]] = {
        "v1/chat/completions": "chat",
        "v1/models": "models",
        "dashboard/billing/usage": "usage",
        "v1/audio/speech": "speech",
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
            completion = await client.chat.completions.create(**self.build_payload(request))
        return parse_completion(completion, request.model)

    async def _open_transport(self, request: ChatRequest) -> TransportHandle:
        client = self._create_client()
        try:
            stream = await client.chat.completions.create(**self.build_payload(request), stream=True)
        except BaseException:
            await client.close()
            raise
        return TransportHandle.from_sdk_stream(stream, client=client)

    def decode_event(self, event: Any) -> List[NativeSignal]:
        return decode_chunk(event)

    async def _models(self) -> List[ModelDescriptor]:
        async with self._create_client() as client:
            return [to_descriptor(item) async for item in client.models.list()]

    async def _speech(self, options: SpeechOptions) -> bytes:
        async with self._create_client() as client:
            response = await client.audio.speech.create(
                model=options.model,
                input=options.input,
                voice=options.voice,
                response_format=options.response_format,
                speed=options.speed,
            )
            return response.content


__all__ = ["OpenAIProvider", "make_client"]
