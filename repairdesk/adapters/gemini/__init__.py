"""
Gemini Adapter - Google Gemini API client.

This is the ONLY place that calls the Gemini API.
The extraction domain uses this adapter for all model calls.
"""

from .client import GeminiAPIError, GeminiClient, RateLimitError
from .models import GeminiConfig, GeminiRequest, GeminiResponse

__all__ = [
    "GeminiClient",
    "GeminiConfig",
    "GeminiRequest",
    "GeminiResponse",
    "GeminiAPIError",
    "RateLimitError",
]
