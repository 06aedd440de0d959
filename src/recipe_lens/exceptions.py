"""Custom exceptions for recipe-lens."""


class RecipeLensError(Exception):
    """Base exception for recipe-lens."""

    pass


class AuthenticationError(RecipeLensError):
    """Raised when API key is invalid or missing."""

    pass


class RateLimitError(RecipeLensError):
    """Raised when API rate limit is exceeded."""

    pass


class LLMError(RecipeLensError):
    """Raised when a model call fails or returns no content."""

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message)
        self.retryable = retryable


class ParseError(RecipeLensError):
    """Raised when a model response holds no usable JSON object."""

    pass


class StageError(RecipeLensError):
    """Raised when a pipeline stage cannot produce its output."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"{stage}: {message}")
        self.stage = stage
