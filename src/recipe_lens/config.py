"""Pipeline configuration read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _safe_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _safe_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass(frozen=True)
class PipelineConfig:
    provider: str = "openrouter"  # openrouter|gemini|none
    openrouter_api_key: str | None = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    model: str | None = None
    fallback_model: str | None = None
    app_title: str = "Recipe Lens"
    app_url: str = "http://localhost:3000"
    timeout: float = 30.0
    max_retries: int = 3
    gemini_api_key: str | None = None
    gemini_model: str | None = None
    validation_review_enabled: bool = True
    low_confidence_threshold: float = 0.4
    shopping_list_min_confidence: float = 0.3

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        return cls(
            provider=(os.getenv("RECIPE_LENS_PROVIDER", "openrouter").strip().lower() or "openrouter"),
            openrouter_api_key=os.getenv("OPENROUTER_API_KEY"),
            openrouter_base_url=os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1"),
            model=os.getenv("OPENROUTER_MODEL"),
            fallback_model=os.getenv("OPENROUTER_FALLBACK_MODEL") or None,
            app_title=os.getenv("OPENROUTER_APP_TITLE", "Recipe Lens"),
            app_url=os.getenv("APP_URL", "http://localhost:3000"),
            timeout=max(1.0, _safe_float(os.getenv("AI_TIMEOUT"), 30.0)),
            max_retries=max(1, _safe_int(os.getenv("AI_MAX_RETRIES"), 3)),
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL"),
            validation_review_enabled=_parse_bool(os.getenv("VALIDATION_REVIEW_ENABLED"), True),
            low_confidence_threshold=_clamp01(_safe_float(os.getenv("LOW_CONFIDENCE_THRESHOLD"), 0.4)),
            shopping_list_min_confidence=_clamp01(_safe_float(os.getenv("SHOPPING_LIST_MIN_CONFIDENCE"), 0.3)),
        )
