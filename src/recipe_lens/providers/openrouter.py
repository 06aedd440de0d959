"""OpenRouter chat-completions provider."""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Callable

import httpx

from recipe_lens.exceptions import AuthenticationError, LLMError, RateLimitError
from recipe_lens.providers.base import BaseProvider

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "anthropic/claude-3-haiku"
DEFAULT_APP_TITLE = "Recipe Lens"
DEFAULT_APP_URL = "http://localhost:3000"

SYSTEM_PROMPT = "You are a culinary extraction engine. Return valid JSON only."


class OpenRouterProvider(BaseProvider):
    """Synchronous OpenRouter client with bounded retries."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        base_url: str | None = None,
        app_title: str | None = None,
        app_url: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_base: float = 1.0,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize OpenRouter provider.

        Args:
            api_key: OpenRouter API key. Falls back to OPENROUTER_API_KEY env var.
            model: Default model. Falls back to OPENROUTER_MODEL env var.
            base_url: API root. Falls back to OPENROUTER_BASE_URL env var.
            app_title: Sent as X-Title.
            app_url: Sent as HTTP-Referer.
            timeout: Per-request timeout in seconds.
            max_retries: Attempts per invocation, at least one.
            backoff_base: First retry delay; doubles on each attempt.
            client: Pre-built httpx client (tests pass a MockTransport one).
            sleep: Delay function used between retries.

        Raises:
            AuthenticationError: If no API key is provided or found.
        """
        self.api_key = api_key or os.environ.get("OPENROUTER_API_KEY")
        if not self.api_key:
            raise AuthenticationError(
                "No API key provided. Set OPENROUTER_API_KEY environment variable "
                "or pass api_key parameter."
            )
        self.model = model or os.environ.get("OPENROUTER_MODEL") or DEFAULT_MODEL
        self.base_url = (base_url or os.environ.get("OPENROUTER_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        self.app_title = app_title or os.environ.get("OPENROUTER_APP_TITLE") or DEFAULT_APP_TITLE
        self.app_url = app_url or os.environ.get("APP_URL") or DEFAULT_APP_URL
        self.max_retries = max(1, int(max_retries))
        self.backoff_base = max(0.0, float(backoff_base))
        self._sleep = sleep
        self._client = client or httpx.Client(timeout=timeout)
        self.logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.app_url,
            "X-Title": self.app_title,
        }

    def _payload(self, prompt: str, model: str, max_tokens: int, temperature: float) -> dict[str, Any]:
        return {
            "model": model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

    def invoke(
        self,
        prompt: str,
        *,
        max_tokens: int = 2000,
        temperature: float = 0.2,
        model_override: str | None = None,
    ) -> str:
        """Post the prompt to chat completions and return the message content.

        Rate limits, server errors and transport errors are retried with
        exponential backoff. Authentication failures are not retried.

        Raises:
            AuthenticationError: On HTTP 401/403.
            RateLimitError: On HTTP 429 after the last attempt.
            LLMError: On any other failure or an empty message.
        """
        model = model_override or self.model
        url = f"{self.base_url}/chat/completions"
        payload = self._payload(prompt, model, max_tokens, temperature)

        last_error: Exception | None = None
        for attempt in range(1, self.max_retries + 1):
            try:
                return self._post(url, payload, model)
            except AuthenticationError:
                raise
            except (RateLimitError, LLMError) as e:
                last_error = e
                if not getattr(e, "retryable", True) or attempt == self.max_retries:
                    break
                delay = self.backoff_base * (2 ** (attempt - 1))
                self.logger.warning(
                    "OpenRouter attempt %s/%s failed (%s); retrying in %.2fs",
                    attempt,
                    self.max_retries,
                    e,
                    delay,
                )
                if delay:
                    self._sleep(delay)

        raise last_error or LLMError(f"OpenRouter request was not attempted (max_retries={self.max_retries})")

    def _post(self, url: str, payload: dict[str, Any], model: str) -> str:
        try:
            response = self._client.post(url, headers=self._headers(), json=payload)
        except httpx.HTTPError as e:
            raise LLMError(f"OpenRouter request failed: {e}") from e

        status = response.status_code
        if status in (401, 403):
            raise AuthenticationError(f"Invalid API key: HTTP {status}")
        if status == 429:
            raise RateLimitError(f"API rate limit exceeded: HTTP {status}")
        if status >= 400:
            raise LLMError(f"OpenRouter HTTP {status}: {response.text[:200]}", retryable=status >= 500)

        try:
            data = response.json()
        except ValueError as e:
            raise LLMError(f"OpenRouter returned non-JSON body: {e}") from e

        if isinstance(data, dict) and data.get("error"):
            error_info = data["error"]
            message = error_info.get("message") if isinstance(error_info, dict) else str(error_info)
            raise LLMError(f"OpenRouter error: {message}")

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMError(f"OpenRouter response missing choices: {e}") from e
        if not content:
            raise LLMError(f"OpenRouter returned empty content (model={model})")
        return content

    def close(self) -> None:
        self._client.close()

    def get_extraction_metadata(self) -> dict[str, str]:
        return {"provider": "openrouter", "model": self.model}
