"""Bearer-token authorization for the HTTP routes.

``Authorization: Bearer <token>`` carries either an access code (prefixed
``nk-``) or the caller's own backend API key.

* When access codes are configured (``CODE``, comma separated), a request
  must present a valid code or its own API key. Codes are compared by MD5
  digest so the raw codes are not kept around.
* ``HIDE_USER_API_KEY`` forbids callers from bringing their own key.
* A caller-supplied key replaces the configured backend key for that
  request only.
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional

from ..config.defaults import ACCESS_CODE_PREFIX
from ..config.env import env_flag, env_list


@dataclass
class AuthResult:
    """Outcome of the authorization check."""

    error: bool
    msg: str = ""
    api_key: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.error, "msg": self.msg}


def hash_code(code: str) -> str:
    return hashlib.md5(code.encode("utf-8")).hexdigest()


def configured_code_hashes() -> FrozenSet[str]:
    return frozenset(hash_code(c) for c in env_list("CODE"))


def parse_bearer(header: Optional[str]) -> str:
    """Return the token of a ``Bearer`` header, or ``""``."""
    value = (header or "").strip()
    if value[:7].lower() == "bearer ":
        value = value[7:]
    return value.strip()


def authorize(authorization: Optional[str], provider: str = "-") -> AuthResult:
    """Check the bearer token of one request."""
    token = parse_bearer(authorization)
    codes = configured_code_hashes()

    if token.startswith(ACCESS_CODE_PREFIX):
        code = token[len(ACCESS_CODE_PREFIX):]
        if codes and hash_code(code) not in codes:
            return AuthResult(error=True, msg="wrong access code" if code else "empty access code")
        return AuthResult(error=False)

    if token and env_flag("HIDE_USER_API_KEY"):
        return AuthResult(error=True, msg="you are not allowed to access with your own api key")
    if codes and not token:
        return AuthResult(error=True, msg="empty access code")
    return AuthResult(error=False, api_key=token or None)


__all__ = ["AuthResult", "authorize", "configured_code_hashes", "hash_code", "parse_bearer"]
