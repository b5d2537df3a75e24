"""Inbound and outbound wire shapes of the HTTP service.

Inbound bodies are validated with pydantic and converted to the canonical
model; pydantic failures become :class:`ValidationError` (HTTP 400).
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..base.errors import ValidationError
from ..base.models import (
    ChatMessage,
    ChatRequest,
    ContentPart,
    ImagePart,
    ModelConfig,
    ModelDescriptor,
    RemoteURL,
    SpeechOptions,
    TextPart,
    UsageInfo,
)


class InboundTextPart(BaseModel):
    type: Literal["text"]
    text: str = ""


class InboundImageURL(BaseModel):
    url: str
    detail: Optional[str] = None


class InboundImagePart(BaseModel):
    type: Literal["image_url"]
    image_url: InboundImageURL


InboundPart = Annotated[Union[InboundTextPart, InboundImagePart], Field(discriminator="type")]


class InboundMessage(BaseModel):
    """One message as sent by clients."""

    model_config = ConfigDict(extra="ignore")

    role: Literal["system", "user", "assistant"]
    content: Union[str, List[InboundPart]]

    def to_canonical(self) -> ChatMessage:
        if isinstance(self.content, str):
            return ChatMessage(role=self.role, content=self.content)
        parts: List[ContentPart] = []
        for part in self.content:
            if isinstance(part, InboundTextPart):
                parts.append(TextPart(part.text))
            else:
                parts.append(ImagePart(source=RemoteURL(part.image_url.url)))
        return ChatMessage(role=self.role, content=parts)


class InboundChatBody(BaseModel):
    """``POST .../v1/chat/completions`` body.

    Unknown fields (backend-specific sampling knobs) are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    model: str
    messages: List[InboundMessage]
    stream: Optional[bool] = False
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None

    def to_request(self) -> ChatRequest:
        return ChatRequest(
            messages=[m.to_canonical() for m in self.messages],
            config=ModelConfig(
                model=self.model,
                temperature=self.temperature,
                stream=bool(self.stream),
                max_tokens=self.max_tokens,
            ),
        )


class InboundSpeechBody(BaseModel):
    """``POST .../v1/audio/speech`` body."""

    model_config = ConfigDict(extra="ignore")

    model: str
    input: str
    voice: str = "alloy"
    response_format: str = "mp3"
    speed: float = 1.0

    def to_options(self) -> SpeechOptions:
        return SpeechOptions(
            model=self.model,
            input=self.input,
            voice=self.voice,
            response_format=self.response_format,
            speed=self.speed,
        )


def _summarize(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors()[:3]:
        loc = ".".join(str(p) for p in err.get("loc", ())) or "body"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts) or "invalid request body"


def parse_chat_body(data: Any, *, provider: str = "-") -> ChatRequest:
    """Validate an inbound chat body and return the canonical request."""
    if data is None:
        raise ValidationError(message="request body is required", provider=provider)
    try:
        return InboundChatBody.model_validate(data).to_request()
    except PydanticValidationError as exc:
        raise ValidationError(message=_summarize(exc), provider=provider) from exc


def parse_speech_body(data: Any, *, provider: str = "-") -> SpeechOptions:
    if data is None:
        raise ValidationError(message="request body is required", provider=provider)
    try:
        return InboundSpeechBody.model_validate(data).to_options()
    except PydanticValidationError as exc:
        raise ValidationError(message=_summarize(exc), provider=provider) from exc


def model_list_payload(models: List[ModelDescriptor]) -> Dict[str, Any]:
    return {
        "object": "list",
        "data": [
            {
                "id": m.id,
                "object": "model",
                "name": m.name,
                "created": m.created,
                "owned_by": m.owned_by or m.provider,
            }
            for m in models
        ],
    }


def usage_payload(usage: UsageInfo) -> Dict[str, Any]:
    return usage.to_dict()


AUDIO_MEDIA_TYPES = {
    "mp3": "audio/mpeg",
    "opus": "audio/ogg",
    "aac": "audio/aac",
    "flac": "audio/flac",
    "wav": "audio/wav",
    "pcm": "audio/pcm",
}


__all__ = [
    "InboundChatBody",
    "InboundMessage",
    "InboundSpeechBody",
    "parse_chat_body",
    "parse_speech_body",
    "model_list_payload",
    "usage_payload",
    "AUDIO_MEDIA_TYPES",
]
