from .callbacks import ChatCallbacks, invoke_callback
from .provider_adapter import ProviderAdapter

__all__ = ["ChatCallbacks", "invoke_callback", "ProviderAdapter"]
