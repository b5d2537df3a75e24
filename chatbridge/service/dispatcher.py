"""Route dispatcher: one generic flow for every backend.

``dispatch`` runs the same steps for each request:

1. resolve the backend adapter class (unknown name -> ``ForbiddenError``);
2. check the sub-path against the class's ``ALLOWED_PATHS``
   (``ForbiddenError`` before any credential or network access);
3. authorize the bearer token (``AuthError`` carrying the auth result);
4. load the backend configuration (``ConfigurationError`` when disabled or
   incomplete);
5. construct the adapter, decode the request body and invoke the mapped
   operation.

The body is only decoded in step 5, so a malformed body never hides a
forbidden path, a failed authorization or a disabled backend.

Adding a backend never changes this module; see ``ProviderFactory``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Type

from ..base.errors import AuthError, ForbiddenError, ProviderError, ValidationError
from ..base.factory import ProviderFactory
from ..base.logging import LogContext, get_logger, log_event
from ..config import get_provider_config, require_backend_config
from .auth import AuthResult, authorize
from .wire import parse_chat_body, parse_speech_body

Authorizer = Callable[[Optional[str], str], AuthResult]


@dataclass
class InboundCall:
    """Transport-independent view of one HTTP request.

    ``raw_body`` is kept undecoded until the dispatcher has passed its
    path, authorization and configuration checks.
    """

    method: str
    authorization: Optional[str] = None
    raw_body: bytes = b""

    def json(self, *, provider: str = "-") -> Any:
        """Decode ``raw_body``; an empty body is ``None``."""
        if not self.raw_body.strip():
            return None
        try:
            return json.loads(self.raw_body)
        except ValueError as exc:
            raise ValidationError(message="request body is not valid JSON", provider=provider) from exc


@dataclass
class DispatchResult:
    """Operation name plus its raw result (response, stream, list, bytes...).

    ``media_format`` is the requested audio format for speech results.
    """

    operation: str
    value: Any
    media_format: Optional[str] = None


class RouteDispatcher:
    """Resolve, authorize, configure and invoke backend adapters."""

    def __init__(
        self,
        *,
        factory: Type[ProviderFactory] = ProviderFactory,
        authorizer: Authorizer = authorize,
        adapter_kwargs: Optional[Mapping[str, Mapping[str, Any]]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._factory = factory
        self._authorize = authorizer
        self._adapter_kwargs: Dict[str, Mapping[str, Any]] = dict(adapter_kwargs or {})
        self._logger = logger or get_logger("chatbridge.service")

    def resolve(self, provider: str, sub_path: str) -> tuple[type, str]:
        """Return ``(adapter_class, operation)`` or raise ``ForbiddenError``."""
        klass = self._factory.resolve(provider)
        path = sub_path.strip("/")
        operation = klass.ALLOWED_PATHS.get(path)
        if operation is None:
            log_event(self._logger, "route.forbidden", LogContext(provider=provider), level=logging.WARNING, path=path)
            raise ForbiddenError(message=f"you are not allowed to request {path}", provider=provider)
        return klass, operation

    def check_auth(self, provider: str, authorization: Optional[str]) -> AuthResult:
        result = self._authorize(authorization, provider)
        if result.error:
            log_event(
                self._logger, "route.auth.failed", LogContext(provider=provider), level=logging.WARNING, msg=result.msg
            )
            raise AuthError(message=result.msg, provider=provider)
        return result

    def build_adapter(self, klass: type, provider: str, auth: AuthResult) -> Any:
        config = get_provider_config(provider, {"api_key": auth.api_key} if auth.api_key else None)
        require_backend_config(provider, config)
        return klass(config, **self._adapter_kwargs.get(provider, {}))

    async def dispatch(self, provider: str, sub_path: str, call: InboundCall) -> DispatchResult:
        name = (provider or "").lower().strip()
        klass, operation = self.resolve(name, sub_path)
        auth = self.check_auth(name, call.authorization)
        adapter = self.build_adapter(klass, name, auth)
        try:
            return await self._invoke(adapter, operation, name, call)
        except ProviderError as exc:
            log_event(
                self._logger,
                "route.error",
                LogContext(provider=name, model=exc.model),
                level=logging.WARNING,
                operation=operation,
                error_code=exc.code.value,
                error=exc.message,
            )
            raise

    async def _invoke(self, adapter: Any, operation: str, provider: str, call: InboundCall) -> DispatchResult:
        if operation == "chat":
            request = parse_chat_body(call.json(provider=provider), provider=provider)
            if request.config.stream:
                value = await adapter.open_stream(request)
            else:
                value = await adapter.complete(request)
            return DispatchResult(operation=operation, value=value)
        if operation == "models":
            return DispatchResult(operation=operation, value=await adapter.models())
        if operation == "usage":
            return DispatchResult(operation=operation, value=await adapter.usage())
        if operation == "speech":
            options = parse_speech_body(call.json(provider=provider), provider=provider)
            audio = await adapter.speech(options)
            return DispatchResult(operation=operation, value=audio, media_format=options.response_format)
        raise ForbiddenError(message=f"unknown operation {operation}", provider=provider)


__all__ = ["RouteDispatcher", "InboundCall", "DispatchResult", "Authorizer"]
