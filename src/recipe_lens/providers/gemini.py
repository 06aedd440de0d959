"""Gemini provider implementation."""

import logging
import os

from google import genai
from google.genai import errors, types

from recipe_lens.exceptions import AuthenticationError, LLMError, RateLimitError
from recipe_lens.providers.base import BaseProvider

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"


class GeminiProvider(BaseProvider):
    """Gemini text generation provider."""

    def __init__(self, api_key: str | None = None, model: str | None = None):
        """Initialize Gemini provider.

        Args:
            api_key: Gemini API key. Falls back to GEMINI_API_KEY env var.
            model: Model name to use. Falls back to GEMINI_MODEL env var.

        Raises:
            AuthenticationError: If no API key is provided or found.
        """
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY")
        if not self.api_key:
            raise AuthenticationError(
                "No API key provided. Set GEMINI_API_KEY environment variable "
                "or pass api_key parameter."
            )
        self.model = model or os.environ.get("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL
        self.client = genai.Client(api_key=self.api_key)
        self.logger = logging.getLogger(__name__)

    def invoke(
        self,
        prompt: str,
        *,
        max_tokens: int = 2000,
        temperature: float = 0.2,
        model_override: str | None = None,
    ) -> str:
        """Generate a JSON response for ``prompt``.

        Raises:
            RateLimitError: If API rate limit is exceeded
            AuthenticationError: If API key is invalid
            LLMError: For any other failure or an empty response
        """
        model = model_override or self.model
        try:
            response = self.client.models.generate_content(
                model=model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    max_output_tokens=max_tokens,
                    temperature=temperature,
                ),
            )
        except errors.ClientError as e:
            if "rate" in str(e).lower() or "quota" in str(e).lower():
                raise RateLimitError(f"API rate limit exceeded: {e}") from e
            if "auth" in str(e).lower() or "key" in str(e).lower():
                raise AuthenticationError(f"Invalid API key: {e}") from e
            raise LLMError(f"Gemini request failed: {e}") from e
        except Exception as e:
            raise LLMError(f"Gemini request failed: {e}") from e

        text = getattr(response, "text", None)
        if not text:
            raise LLMError(f"Gemini returned an empty response (model={model})")
        self.logger.debug("Gemini response received model=%s chars=%s", model, len(text))
        return text

    def get_extraction_metadata(self) -> dict[str, str]:
        return {"provider": "gemini", "model": self.model}
