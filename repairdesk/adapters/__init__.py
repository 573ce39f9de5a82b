"""
Adapters - External service integrations.

All external API calls are wrapped here to isolate domains from third-party changes.
"""

from .gemini import GeminiClient
from .rest import ShopAPIClient

__all__ = [
    "GeminiClient",
    "ShopAPIClient",
]
