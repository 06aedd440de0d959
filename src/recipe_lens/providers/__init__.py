"""Providers for recipe-lens."""

from recipe_lens.providers.base import BaseProvider
from recipe_lens.providers.gemini import GeminiProvider
from recipe_lens.providers.openrouter import OpenRouterProvider

__all__ = ["BaseProvider", "GeminiProvider", "OpenRouterProvider"]
