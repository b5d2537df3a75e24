"""Unified configuration layer for backends.

Goals
-----
* Centralize defaults (regions, protocol versions).
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. Optional external config file (JSON or YAML) pointed to by
       CHATBRIDGE_CONFIG_FILE
    3. Environment variables (see ``chatbridge.config.env.ENV_MAP``)
    4. In-code overrides passed to the helper
* Provide a single call site: ``get_provider_config(provider)``.

External Config File (Optional)
-------------------------------
JSON is tried first, then YAML. Structure example:

```
bedrock:
  enabled: true
  region: eu-west-1
openai:
  enabled: true
  base_url: https://api.openai.com
```

Public API
----------
* get_provider_config(provider: str, overrides: dict | None = None) -> dict
* is_enabled(provider: str) -> bool
* require_backend_config(provider: str, cfg: dict | None = None) -> dict
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from ..base.errors import ConfigurationError
from .defaults import BEDROCK_DEFAULT_REGION
from .env import ENV_MAP, REQUIRED_FIELDS, is_truthy, resolve_env

# -------------------- Defaults --------------------

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "bedrock": {"enabled": False, "region": BEDROCK_DEFAULT_REGION},
    "anthropic": {"enabled": False},
    "openai": {"enabled": False},
}

_FILE_CACHE: Optional[Dict[str, Any]] = None
_DOTENV_LOADED = False


def _load_dotenv_once() -> None:
    """Lightweight .env loader.

    Parses KEY=VALUE lines, ignoring comments and blank lines. Variables that
    are already set in the process environment are left untouched.
    """
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    path = os.getenv("DOTENV_FILE", ".env")
    if not os.path.isfile(path):
        _DOTENV_LOADED = True
        return
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                k, v = line.split("=", 1)
                k = k.strip()
                if k.startswith("export "):
                    k = k[len("export "):].strip()
                v = v.strip().strip('"').strip("'")
                if k and k not in os.environ:
                    os.environ[k] = v
    finally:
        _DOTENV_LOADED = True


def _load_external_config() -> Dict[str, Any]:
    global _FILE_CACHE
    if _FILE_CACHE is not None:
        return _FILE_CACHE
    path = os.getenv("CHATBRIDGE_CONFIG_FILE")
    if not path or not Path(path).exists():
        _FILE_CACHE = {}
        return _FILE_CACHE
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except ValueError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError:
            data = {}
    if not isinstance(data, dict):
        data = {}
    _FILE_CACHE = data
    return data


def reset_config_cache() -> None:
    """Forget the cached config file and .env state (used by tests)."""
    global _FILE_CACHE, _DOTENV_LOADED
    _FILE_CACHE = None
    _DOTENV_LOADED = False


def _env_overrides(provider: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for field in ENV_MAP.get(provider, {}):
        val, _ = resolve_env(provider, field)
        if val is not None:
            out[field] = val
    return out


def get_provider_config(provider: str, overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Return merged configuration for a backend.

    Merge order (later wins): defaults -> external config -> env vars -> overrides.
    ``enabled`` is always normalized to a bool.
    """
    _load_dotenv_once()
    name = (provider or "").lower().strip()
    cfg: Dict[str, Any] = {}

    cfg |= DEFAULTS.get(name, {})

    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, dict):
        cfg |= file_cfg

    cfg |= _env_overrides(name)

    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}

    cfg["enabled"] = is_truthy(cfg.get("enabled"))
    return cfg


def is_enabled(provider: str) -> bool:
    return bool(get_provider_config(provider).get("enabled"))


def missing_fields(provider: str, cfg: Mapping[str, Any]) -> list[str]:
    """Return required fields of ``provider`` that are empty in ``cfg``."""
    return [f for f in REQUIRED_FIELDS.get(provider, ()) if not str(cfg.get(f) or "").strip()]


def require_backend_config(provider: str, cfg: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Return the backend config or raise :class:`ConfigurationError`.

    Raised when the backend is disabled or a required credential is empty.
    Never touches the network.
    """
    name = (provider or "").lower().strip()
    resolved = dict(cfg) if cfg is not None else get_provider_config(name)
    if not is_truthy(resolved.get("enabled")):
        raise ConfigurationError(message=f"{name} is not enabled", provider=name)
    if missing := missing_fields(name, resolved):
        raise ConfigurationError(
            message=f"{name} is missing credentials: {', '.join(missing)}",
            provider=name,
        )
    return resolved


__all__ = [
    "DEFAULTS",
    "get_provider_config",
    "is_enabled",
    "missing_fields",
    "require_backend_config",
    "reset_config_cache",
]
