"""ProviderAdapter Protocol (single-class module).

Defines the capability set every backend adapter offers.
"""

from __future__ import annotations

from typing import ClassVar, List, Mapping, Protocol, runtime_checkable

from ..models import ChatRequest, ModelDescriptor, SpeechOptions, UsageInfo
from .callbacks import ChatCallbacks


@runtime_checkable
class ProviderAdapter(Protocol):
    """Interface for chat backends.

    Implementations translate :class:`ChatRequest` to the backend's native
    payload, run the call, and report results through :class:`ChatCallbacks`.
    SDK objects never leak to callers.
    """

    ALLOWED_PATHS: ClassVar[Mapping[str, str]]

    @property
    def provider_name(self) -> str:
        """Canonical backend identifier, e.g. ``"bedrock"`` or ``"openai"``."""
        ...

    async def chat(self, request: ChatRequest, callbacks: ChatCallbacks) -> None:
        """Run one chat request, streaming or not, reporting via callbacks."""
        ...

    async def models(self) -> List[ModelDescriptor]:
        """Return available models; empty when discovery is unsupported."""
        ...

    async def usage(self) -> UsageInfo:
        """Return account usage, or ``UsageInfo.unlimited()`` when unknown."""
        ...

    async def speech(self, options: SpeechOptions) -> bytes:
        """Synthesize audio; raises ``UnsupportedCapabilityError`` when absent."""
        ...
