"""Provider factory.

Purpose
-------
Resolve a backend name to its adapter class and construct adapters. Adapter
modules are imported lazily with ``importlib`` so SDKs load only for the
backends actually used.

Scope
-----
Supported backends: ``bedrock``, ``anthropic`` and ``openai``. Adding a
backend means adding one adapter module and one entry in ``_PROVIDERS``.
"""

from __future__ import annotations

from dataclasses import dataclass
from importlib import import_module
from typing import Any, Dict, Tuple, Type

from .errors import ErrorCode, ForbiddenError


@dataclass(eq=False)
class UnknownProviderError(ForbiddenError):
    """Backend name is not registered or its adapter cannot be loaded."""

    code: ErrorCode = ErrorCode.FORBIDDEN
    message: str = "unknown provider"


class ProviderFactory:
    """Create backend adapters from a canonical name (e.g. ``"bedrock"``)."""

    # Map canonical backend names to import paths and class names
    _PROVIDERS: Dict[str, Dict[str, str]] = {
        "bedrock": {"module": "chatbridge.bedrock.client", "class": "BedrockProvider"},
        "anthropic": {"module": "chatbridge.anthropic.client", "class": "AnthropicProvider"},
        "openai": {"module": "chatbridge.openai.client", "class": "OpenAIProvider"},
    }

    @classmethod
    def resolve(cls, provider: str) -> Type[Any]:
        """Return the adapter class registered for ``provider``.

        Raises
        ------
        UnknownProviderError
            If the name is unknown, the module fails to import, or the class
            is missing.
        """
        name = (provider or "").lower().strip()
        spec = cls._PROVIDERS.get(name)
        if not spec:
            raise UnknownProviderError(message=f"Unknown provider '{provider}'", provider=name or "-")

        module_path, class_name = spec["module"], spec["class"]
        try:
            mod = import_module(module_path)
        except ImportError as exc:  # pragma: no cover - import failure path
            raise UnknownProviderError(
                message=f"Failed to import module '{module_path}' for provider '{provider}': {exc}",
                provider=name,
            ) from exc
        try:
            return getattr(mod, class_name)
        except AttributeError as exc:
            raise UnknownProviderError(
                message=f"Adapter class '{class_name}' not found in '{module_path}'",
                provider=name,
            ) from exc

    @classmethod
    def create(cls, provider: str, **kwargs: Any) -> Any:
        """Construct the adapter for ``provider`` with ``kwargs``.

        Constructor ``TypeError`` (bad keyword arguments) propagates unchanged.
        """
        return cls.resolve(provider)(**kwargs)

    @classmethod
    def supported(cls) -> Tuple[str, ...]:
        """Return the supported canonical backend names in deterministic order."""
        return tuple(cls._PROVIDERS.keys())


def create_provider(provider: str, **kwargs: Any) -> Any:
    """Shorthand for :meth:`ProviderFactory.create`."""
    return ProviderFactory.create(provider, **kwargs)


__all__ = ["ProviderFactory", "UnknownProviderError", "create_provider"]
