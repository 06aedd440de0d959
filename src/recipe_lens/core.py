"""Core extraction functions."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from typing import Any

from recipe_lens.config import PipelineConfig
from recipe_lens.normalization.taxonomy import name_key
from recipe_lens.pipeline.orchestrator import RecipeOrchestrator
from recipe_lens.providers.base import BaseProvider
from recipe_lens.schema import ExtractionResult, RecipeInput, ShoppingListItem

logger = logging.getLogger(__name__)

RecipeLike = RecipeInput | dict[str, Any] | str


def _build_openrouter_provider(api_key: str | None, model: str | None, config: PipelineConfig) -> BaseProvider:
    from recipe_lens.providers.openrouter import OpenRouterProvider

    return OpenRouterProvider(
        api_key=api_key or config.openrouter_api_key,
        model=model or config.model,
        base_url=config.openrouter_base_url,
        app_title=config.app_title,
        app_url=config.app_url,
        timeout=config.timeout,
        max_retries=config.max_retries,
    )


def _build_gemini_provider(api_key: str | None, model: str | None, config: PipelineConfig) -> BaseProvider:
    from recipe_lens.providers.gemini import GeminiProvider

    return GeminiProvider(api_key=api_key or config.gemini_api_key, model=model or config.gemini_model)


def _select_provider(
    provider: str | BaseProvider | None,
    api_key: str | None,
    config: PipelineConfig,
    model: str | None = None,
) -> BaseProvider | None:
    """Resolve the model provider; None runs the heuristic paths only.

    Raises:
        AuthenticationError: An explicitly requested provider has no API key.
        ValueError: Unknown provider name.
    """
    if isinstance(provider, BaseProvider):
        return provider

    provider_name = (provider or config.provider).strip().lower()
    if provider_name in {"none", "off", "heuristic"}:
        return None
    if provider_name == "openrouter":
        if provider is None and not (api_key or config.openrouter_api_key):
            logger.warning("OPENROUTER_API_KEY is not set; running heuristic extraction only")
            return None
        return _build_openrouter_provider(api_key, model, config)
    if provider_name == "gemini":
        return _build_gemini_provider(api_key, model, config)
    raise ValueError(f"Unsupported provider: {provider_name}")


def build_orchestrator(
    *,
    api_key: str | None = None,
    provider: str | BaseProvider | None = None,
    model: str | None = None,
    config: PipelineConfig | None = None,
) -> RecipeOrchestrator:
    config = config or PipelineConfig.from_env()
    engine = _select_provider(provider, api_key, config, model)
    return RecipeOrchestrator(engine, config)


def _close_owned(orchestrator: RecipeOrchestrator, requested: str | BaseProvider | None) -> None:
    # Caller-supplied provider instances stay open; the caller owns them.
    engine = orchestrator.provider
    if engine is not None and engine is not requested:
        engine.close()


def extract_ingredients(
    recipe: RecipeLike | None,
    *,
    raw_text: str | None = None,
    options: dict[str, Any] | None = None,
    api_key: str | None = None,
    provider: str | BaseProvider | None = None,
    model: str | None = None,
    config: PipelineConfig | None = None,
) -> ExtractionResult:
    """Extract a structured ingredient list from a recipe.

    Args:
        recipe: Recipe text, a RecipeInput, or a dict of the same shape.
        raw_text: Extra free text to append to the recipe.
        options: Per-call options; ``target_servings`` is supported.
        api_key: API key for the selected provider.
        provider: Provider name (`openrouter`, `gemini` or `none`) or a
            provider instance. Defaults to `RECIPE_LENS_PROVIDER`, then
            `openrouter`.
        model: Model name override for the provider.
        config: Pipeline settings. Defaults to `PipelineConfig.from_env()`.

    Returns:
        ExtractionResult. Extraction failures never raise; they show up as
        fallbacks, issues and a lower confidence.
    """
    orchestrator = build_orchestrator(api_key=api_key, provider=provider, model=model, config=config)
    try:
        return orchestrator.extract_ingredients(recipe, raw_text=raw_text, options=options)
    finally:
        _close_owned(orchestrator, provider)


def extract_meal_plan(
    recipes: Iterable[RecipeLike],
    *,
    delay_seconds: float = 0.2,
    sleep: Callable[[float], None] = time.sleep,
    api_key: str | None = None,
    provider: str | BaseProvider | None = None,
    model: str | None = None,
    config: PipelineConfig | None = None,
) -> list[ExtractionResult]:
    """Extract several recipes one after another, pausing between calls."""
    orchestrator = build_orchestrator(api_key=api_key, provider=provider, model=model, config=config)
    results: list[ExtractionResult] = []
    try:
        for index, recipe in enumerate(recipes):
            if index and delay_seconds > 0:
                sleep(delay_seconds)
            results.append(orchestrator.extract_ingredients(recipe))
    finally:
        _close_owned(orchestrator, provider)
    return results


def consolidate_shopping_list(results: Iterable[ExtractionResult]) -> list[ShoppingListItem]:
    """Merge shopping-list items across recipes on (name key, unit)."""
    merged: dict[tuple[str, str | None], ShoppingListItem] = {}
    for result in results:
        for item in result.shopping_list:
            key = (name_key(item.name) or item.name, item.unit)
            existing = merged.get(key)
            if existing is None:
                merged[key] = item.model_copy()
                continue
            quantity = existing.quantity
            if quantity is None:
                quantity = item.quantity
            elif item.quantity is not None:
                quantity = round(quantity + item.quantity, 3)
            notes = existing.notes
            if item.notes and item.notes not in notes.split("; "):
                notes = f"{notes}; {item.notes}" if notes else item.notes
            merged[key] = ShoppingListItem(
                name=existing.name,
                quantity=quantity,
                unit=existing.unit,
                category=existing.category,
                notes=notes,
            )
    return list(merged.values())
