from .client import BedrockProvider

__all__ = ["BedrockProvider"]
