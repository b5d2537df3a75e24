"""chatbridge.config.env
=====================

Environment variable mapping for backend settings.

Purpose
-------
- Single source of truth mapping each backend field to its environment
  variable names (canonical first, then aliases).
- Small helpers to read flags and values consistently.

Failure Modes
-------------
- Helpers never raise on unknown backends or unset variables; callers decide
  how to proceed.
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, Optional, Tuple

# Backend -> field -> ordered env var names (canonical first)
ENV_MAP: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "bedrock": {
        "enabled": ("ENABLE_AWS_BEDROCK",),
        "access_key_id": ("AWS_BEDROCK_ACCESS_KEY_ID",),
        "secret_access_key": ("AWS_BEDROCK_SECRET_ACCESS_KEY",),
        "region": ("AWS_BEDROCK_REGION",),
        "endpoint": ("AWS_BEDROCK_ENDPOINT",),
    },
    "anthropic": {
        "enabled": ("ENABLE_ANTHROPIC",),
        "api_key": ("ANTHROPIC_API_KEY",),
        "base_url": ("ANTHROPIC_BASE_URL", "ANTHROPIC_URL"),
    },
    "openai": {
        "enabled": ("ENABLE_OPENAI",),
        "api_key": ("OPENAI_API_KEY",),
        "base_url": ("OPENAI_BASE_URL", "BASE_URL"),
        "organization": ("OPENAI_ORG_ID",),
    },
}

# Fields that must be non-empty for a backend to be usable.
REQUIRED_FIELDS: Dict[str, Tuple[str, ...]] = {
    "bedrock": ("access_key_id", "secret_access_key"),
    "anthropic": ("api_key",),
    "openai": ("api_key",),
}

_TRUTHY = {"1", "true", "yes", "on"}


def is_truthy(val: object) -> bool:
    """Return True for ``1/true/yes/on`` (case-insensitive) and ``True``."""
    if isinstance(val, bool):
        return val
    if val is None:
        return False
    return str(val).strip().lower() in _TRUTHY


def get_env_var_candidates(provider: str, field: str) -> Iterable[str]:
    """Yield env var names for ``provider.field`` in priority order."""
    return ENV_MAP.get((provider or "").lower(), {}).get(field, ())


def resolve_env(provider: str, field: str) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(value, env_var_used)`` for the first non-empty candidate."""
    for name in get_env_var_candidates(provider, field):
        if val := os.environ.get(name):
            return val, name
    return None, None


def env_flag(name: str) -> bool:
    return is_truthy(os.environ.get(name))


def env_list(name: str, default: str = "") -> list[str]:
    """Split a comma-separated env var into trimmed, non-empty items."""
    raw = os.environ.get(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


__all__ = [
    "ENV_MAP",
    "REQUIRED_FIELDS",
    "is_truthy",
    "get_env_var_candidates",
    "resolve_env",
    "env_flag",
    "env_list",
]
