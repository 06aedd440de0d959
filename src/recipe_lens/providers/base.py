"""Base provider interface."""

from abc import ABC, abstractmethod


class BaseProvider(ABC):
    """Abstract base class for LLM providers.

    A provider turns a prompt into response text. The pipeline expects JSON in
    that text but never trusts it to be there.
    """

    model: str | None = None

    @abstractmethod
    def invoke(
        self,
        prompt: str,
        *,
        max_tokens: int = 2000,
        temperature: float = 0.2,
        model_override: str | None = None,
    ) -> str:
        """Send a prompt and return the raw response text.

        Args:
            prompt: Full prompt text.
            max_tokens: Upper bound on generated tokens.
            temperature: Sampling temperature.
            model_override: Model name to use instead of the default.

        Returns:
            Response text as produced by the model.
        """
        pass

    def get_extraction_metadata(self) -> dict[str, str]:
        """Return provider-specific extraction metadata."""
        return {}

    def close(self) -> None:
        """Release network resources held by the provider."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
