"""HTTP helpers."""

from .client import AsyncClientFactory, new_async_client

__all__ = ["AsyncClientFactory", "new_async_client"]
