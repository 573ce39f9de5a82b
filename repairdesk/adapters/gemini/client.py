"""
Gemini Client - Google Gemini API client.

Authentication:
- Uses the configured API key when present
- Falls back to OAuth/ADC (Application Default Credentials) otherwise

Features:
- Async operations (SDK calls run in a worker thread)
- Rate limiting (60 RPM default)
- Automatic retries with exponential backoff
- Schema-constrained JSON output
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from repairdesk.config import ErrorCode, LLMError

from .models import GeminiConfig, GeminiRequest, GeminiResponse

logger = logging.getLogger(__name__)

__all__ = ["GeminiClient", "RateLimitError", "GeminiAPIError"]


class RateLimitError(LLMError):
    """Rate limit exceeded."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code=ErrorCode.LLM_RATE_LIMITED)


class GeminiAPIError(LLMError):
    """Gemini API error."""


class GeminiClient:
    """
    Gemini API client.

    Example:
        >>> client = GeminiClient(GeminiConfig(api_key="..."))
        >>> data = await client.generate_structured(
        ...     "Дисплей iPhone 11, 2 штуки",
        ...     response_schema={"type": "object", "properties": {...}},
        ... )
    """

    def __init__(
        self,
        config: GeminiConfig | None = None,
    ) -> None:
        """
        Initialize Gemini client.

        Args:
            config: Client configuration. Uses defaults if None.
        """
        self.config = config or GeminiConfig()

        if self.config.api_key:
            genai.configure(api_key=self.config.api_key)

        # Rate limiting state
        self._request_times: list[float] = []
        self._rate_lock = asyncio.Lock()

        # Model instance (lazy loaded)
        self._model: genai.GenerativeModel | None = None

        logger.info(
            "GeminiClient initialized (%s): model=%s",
            "api key" if self.config.api_key else "ADC",
            self.config.model,
        )

    def _get_model(self) -> genai.GenerativeModel:
        """Get or create model instance."""
        if self._model is None:
            self._model = genai.GenerativeModel(
                model_name=self.config.model,
                generation_config={
                    "temperature": self.config.temperature,
                    "max_output_tokens": self.config.max_output_tokens,
                },
            )
        return self._model

    async def _check_rate_limit(self) -> None:
        """Enforce rate limiting."""
        async with self._rate_lock:
            now = time.time()
            # Remove requests older than 1 minute
            self._request_times = [t for t in self._request_times if now - t < 60]

            if len(self._request_times) >= self.config.rate_limit_rpm:
                wait_time = 60 - (now - self._request_times[0])
                if wait_time > 0:
                    logger.warning("Rate limit reached, waiting %.1fs", wait_time)
                    await asyncio.sleep(wait_time)

            self._request_times.append(now)

    @staticmethod
    def _build_contents(request: GeminiRequest) -> list[dict[str, Any]]:
        contents = []
        if request.system_instruction:
            contents.append({"role": "user", "parts": [request.system_instruction]})
            contents.append({"role": "model", "parts": ["Understood."]})
        contents.append({"role": "user", "parts": [request.prompt]})
        return contents

    @retry(
        retry=retry_if_exception_type((GeminiAPIError, ConnectionError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def generate(self, request: GeminiRequest) -> GeminiResponse:
        """
        Generate a response for a request.

        Args:
            request: Prompt, optional system instruction and output schema

        Returns:
            GeminiResponse with generated text

        Raises:
            GeminiAPIError: API call failed (after retries)
            RateLimitError: Rate limit exceeded
        """
        await self._check_rate_limit()

        try:
            model = self._get_model()

            response = await asyncio.to_thread(
                model.generate_content,
                self._build_contents(request),
                generation_config=request.generation_config(),
                request_options={"timeout": self.config.timeout_seconds},
            )

            text = response.text if hasattr(response, "text") else str(response)

            usage = getattr(response, "usage_metadata", None)
            prompt_tokens = getattr(usage, "prompt_token_count", 0) if usage else 0
            completion_tokens = (
                getattr(usage, "candidates_token_count", 0) if usage else 0
            )

            return GeminiResponse(
                text=text,
                model=self.config.model,
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            )

        except google_exceptions.ResourceExhausted as e:
            raise RateLimitError(f"Rate limit exceeded: {e}") from e
        except Exception as e:
            if "429" in str(e):
                raise RateLimitError(f"Rate limit exceeded: {e}") from e
            raise GeminiAPIError(f"Gemini API error: {e}") from e

    async def generate_structured(
        self,
        prompt: str,
        response_schema: dict[str, Any],
        system_instruction: str | None = None,
    ) -> Any:
        """
        Generate JSON constrained by an output schema.

        Args:
            prompt: User prompt
            response_schema: OpenAPI-style schema the model must follow
            system_instruction: Optional system instruction

        Returns:
            Parsed JSON (object or array)

        Raises:
            GeminiAPIError: API call failed
            json.JSONDecodeError: Response is not JSON
        """
        response = await self.generate(
            GeminiRequest(
                prompt=prompt,
                system_instruction=system_instruction,
                response_schema=response_schema,
            )
        )
        return parse_json_text(response.text)


def parse_json_text(text: str) -> Any:
    """Parse JSON, tolerating prose or code fences around the payload."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        # Outermost bracket first
        pairs = sorted(
            (("[", "]"), ("{", "}")),
            key=lambda pair: text.find(pair[0]) % (len(text) + 1),
        )
        for opener, closer in pairs:
            start = text.find(opener)
            end = text.rfind(closer) + 1
            if start >= 0 and end > start:
                try:
                    return json.loads(text[start:end])
                except json.JSONDecodeError:
                    continue
        raise
