"""
Gemini Models - Request/Response types for Gemini API.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class GeminiConfig(BaseModel):
    """Configuration for Gemini client."""

    model: str = Field(default="gemini-2.0-flash")
    api_key: str | None = Field(default=None, repr=False)
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=8192)
    timeout_seconds: int = Field(default=60)
    max_retries: int = Field(default=3)
    rate_limit_rpm: int = Field(default=60)

    model_config = {"frozen": True}


class GeminiRequest(BaseModel):
    """Schema-constrained generation request."""

    prompt: str
    system_instruction: str | None = None
    response_mime_type: str = Field(default="text/plain")
    response_schema: dict[str, Any] | None = None

    model_config = {"frozen": True}

    def generation_config(self) -> dict[str, Any]:
        """Per-call generation overrides for the SDK."""
        config: dict[str, Any] = {"response_mime_type": self.response_mime_type}
        if self.response_schema is not None:
            config["response_mime_type"] = "application/json"
            config["response_schema"] = self.response_schema
        return config


class GeminiResponse(BaseModel):
    """Generic Gemini API response."""

    text: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    finish_reason: str = "STOP"
