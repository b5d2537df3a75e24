"""Adapter interfaces (public API facade).

Re-exports the ``ProviderAdapter`` protocol and the ``ChatCallbacks`` bundle
from ``chatbridge.base.interfaces_parts``.
"""

from .interfaces_parts import ChatCallbacks, ProviderAdapter, invoke_callback

__all__ = ["ChatCallbacks", "ProviderAdapter", "invoke_callback"]
