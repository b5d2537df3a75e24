from __future__ import annotations

import os

import uvicorn

from ..config.defaults import SERVICE_DEFAULT_HOST, SERVICE_DEFAULT_PORT
from ..config.env import is_truthy


def _parse_port(value: str | None, default: int) -> int:
    """Best-effort parse of a port from string, falling back to ``default``."""
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def main() -> None:
    """Start the development server for the chatbridge FastAPI app.

    - CHATBRIDGE_HOST: interface to bind (default "127.0.0.1")
    - CHATBRIDGE_PORT: port to bind (default 8787)
    - CHATBRIDGE_RELOAD: toggle auto-reload (default on)
    """
    host = os.getenv("CHATBRIDGE_HOST", SERVICE_DEFAULT_HOST)
    port = _parse_port(os.getenv("CHATBRIDGE_PORT"), SERVICE_DEFAULT_PORT)
    reload_env = os.getenv("CHATBRIDGE_RELOAD")
    reload_enabled = True if reload_env is None else is_truthy(reload_env)

    uvicorn.run(
        "chatbridge.service.app:app",
        host=host,
        port=port,
        reload=reload_enabled,
    )


if __name__ == "__main__":
    main()
