"""chatbridge.config.defaults
=========================

Central place for small, stable default values used by the backends and the
HTTP service. Everything here can be overridden through the config file or
environment variables.

Only plain constants live here; this module imports nothing from the rest of
the package.
"""

from __future__ import annotations

# ---- Service / HTTP layer ----

# Comma-separated list of allowed origins for the service.
SERVICE_CORS_DEFAULT_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"
SERVICE_DEFAULT_HOST = "127.0.0.1"
SERVICE_DEFAULT_PORT = 8787

# Prefix marking a bearer token as an access code rather than an API key.
ACCESS_CODE_PREFIX = "nk-"

# ---- Backends ----

BEDROCK_DEFAULT_REGION = "us-east-1"
BEDROCK_ANTHROPIC_VERSION = "bedrock-2023-05-31"
ANTHROPIC_DEFAULT_MAX_TOKENS = 4096
OPENAI_DEFAULT_SPEECH_MODEL = "tts-1"

__all__ = [
    "SERVICE_CORS_DEFAULT_ORIGINS",
    "SERVICE_DEFAULT_HOST",
    "SERVICE_DEFAULT_PORT",
    "ACCESS_CODE_PREFIX",
    "BEDROCK_DEFAULT_REGION",
    "BEDROCK_ANTHROPIC_VERSION",
    "ANTHROPIC_DEFAULT_MAX_TOKENS",
    "OPENAI_DEFAULT_SPEECH_MODEL",
]
