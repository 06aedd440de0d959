"""Stage 2: standardize measurements and attach category and allergen data."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any

from recipe_lens.exceptions import ParseError
from recipe_lens.normalization.taxonomy import (
    categorize,
    clean_name,
    detect_allergens,
    extract_preparation,
    name_key,
    subcategory,
)
from recipe_lens.normalization.units import normalize_quantity, normalize_unit, split_quantity_unit
from recipe_lens.normalization.vocabulary import CANONICAL_UNITS, CATEGORIES
from recipe_lens.parsing.heuristic import is_non_ingredient_name
from recipe_lens.pipeline.base import clamp, invoke_json_with_fallback, mean, require_ingredient_list
from recipe_lens.pipeline.prompts import build_extraction_prompt
from recipe_lens.providers.base import BaseProvider
from recipe_lens.schema import CategorizationResult, CategorizedIngredient, NormalizedIngredient, ProcessingResult

logger = logging.getLogger(__name__)

STAGE_NAME = "information_extraction"
MAX_TOKENS = 3000
TEMPERATURE = 0.1
FALLBACK_SCALE = 0.8

_QUANTITY_KEYS = ("quantity", "amount", "qty")
_UNIT_KEYS = ("unit", "units", "measurement")


def _first_present(item: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = item.get(key)
        if value is not None and value != "" and not isinstance(value, bool):
            return value
    return None


def _as_tags(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple, set)):
        return [str(tag) for tag in value if isinstance(tag, str) and tag.strip()]
    return []


def is_complete(ingredient: CategorizedIngredient) -> bool:
    return bool(ingredient.name and ingredient.quantity is not None and ingredient.unit and ingredient.category != "other")


def enhance(item: dict[str, Any], upstream: NormalizedIngredient | None = None) -> CategorizedIngredient | None:
    """Build a categorized ingredient from model output or an upstream mention.

    Quantity and unit are only backfilled when missing: first from alternate
    keys, then from a unit glued to the quantity string, then from
    ``upstream``. Category is always recomputed; allergens only grow.
    """
    name = clean_name(str(item.get("name") or ""))
    if not name or is_non_ingredient_name(name):
        return None

    raw_quantity = _first_present(item, _QUANTITY_KEYS)
    raw_unit = _first_present(item, _UNIT_KEYS)
    quantity = normalize_quantity(raw_quantity)
    unit = normalize_unit(raw_unit)
    if unit is None and isinstance(raw_quantity, str):
        split_quantity, split_unit = split_quantity_unit(raw_quantity)
        if split_unit:
            unit = split_unit
            if split_quantity is not None:
                quantity = split_quantity

    if upstream is not None:
        if quantity is None:
            quantity = upstream.quantity
        if unit is None:
            unit = upstream.unit

    preparation = item.get("preparation")
    preparation = preparation.strip().lower() if isinstance(preparation, str) and preparation.strip() else None
    if preparation is None and upstream is not None:
        preparation = upstream.preparation
    if preparation is None:
        name, preparation = extract_preparation(name)

    category = categorize(name)
    suggested = item.get("subcategory")
    optional = item.get("optional")
    notes = item.get("notes")
    context = item.get("source") or item.get("context") or (upstream.context if upstream else "")
    confidence = item.get("confidence", upstream.confidence if upstream else 0.5)

    ingredient = CategorizedIngredient(
        name=name,
        quantity=quantity,
        unit=unit,
        preparation=preparation,
        context=str(context or ""),
        confidence=confidence,
        raw_text=str(item.get("raw_text") or (upstream.raw_text if upstream else "")),
        category=category,
        subcategory=subcategory(name, category, suggested if isinstance(suggested, str) else None),
        allergens=detect_allergens(name, _as_tags(item.get("allergens"))),
        optional=optional if isinstance(optional, bool) else False,
        notes=notes.strip() if isinstance(notes, str) else "",
    )
    if is_complete(ingredient):
        ingredient = CategorizedIngredient(
            **ingredient.model_dump(exclude={"confidence"}),
            confidence=min(1.0, ingredient.confidence + 0.1),
        )
    return ingredient


def extraction_confidence(ingredients: list[CategorizedIngredient], preprocessing_confidence: float) -> float:
    if not ingredients:
        return 0.0
    score = 0.3
    score += mean([item.confidence for item in ingredients]) * 0.4
    score += sum(1 for item in ingredients if is_complete(item)) / len(ingredients) * 0.2
    score += clamp(preprocessing_confidence) * 0.1
    return round(clamp(score), 3)


def category_counts(ingredients: list[CategorizedIngredient]) -> dict[str, int]:
    return dict(Counter(item.category for item in ingredients))


class InformationExtractionStage:
    """Second model pass over the segmented mentions, plus deterministic enrichment."""

    name = STAGE_NAME

    def __init__(
        self,
        provider: BaseProvider | None = None,
        *,
        fallback_model: str | None = None,
        target_servings: int | None = None,
    ):
        self.provider = provider
        self.fallback_model = fallback_model
        self.target_servings = target_servings

    def extract(self, processed: ProcessingResult) -> CategorizationResult:
        mentions = processed.normalized_ingredients
        if not mentions:
            return self._deterministic(processed, "No ingredient mentions to categorize")
        if self.provider is None:
            return self._deterministic(processed, "LLM disabled")

        upstream_by_key: dict[str, NormalizedIngredient] = {}
        for mention in mentions:
            upstream_by_key.setdefault(name_key(mention.name), mention)

        def _parse(payload: dict[str, Any]) -> list[CategorizedIngredient]:
            ingredients = []
            for item in payload.get("ingredients") or []:
                if not isinstance(item, dict):
                    continue
                upstream = upstream_by_key.get(name_key(clean_name(str(item.get("name") or ""))))
                ingredient = enhance(item, upstream)
                if ingredient is not None:
                    ingredients.append(ingredient)
            return ingredients

        def _validate(payload: dict[str, Any]) -> None:
            require_ingredient_list(payload)
            if not _parse(payload):
                raise ParseError("Response has no usable ingredients")

        prompt = build_extraction_prompt(
            [
                mention.model_dump(include={"name", "quantity", "unit", "preparation", "context"})
                for mention in mentions
            ],
            sorted(CANONICAL_UNITS),
            list(CATEGORIES),
            self.target_servings,
        )
        try:
            response = invoke_json_with_fallback(
                self.provider,
                prompt,
                max_tokens=MAX_TOKENS,
                temperature=TEMPERATURE,
                fallback_model=self.fallback_model,
                validate=_validate,
            )
        except Exception as exc:
            logger.exception("Information extraction LLM path failed; categorizing deterministically")
            return self._deterministic(processed, f"LLM extraction failed: {exc}")

        ingredients = _parse(response.payload)
        return CategorizationResult(
            categorized_ingredients=ingredients,
            confidence=extraction_confidence(ingredients, processed.confidence),
            extraction_method="llm",
            model=response.model,
            fallback_used=False,
            fallback_reason=(
                f"Primary model failed, used {response.model}: {response.primary_error}"
                if response.used_fallback_model
                else None
            ),
            categories=category_counts(ingredients),
        )

    def fallback(self, processed: ProcessingResult, error: Exception) -> CategorizationResult:
        return self._deterministic(processed, str(error))

    def _deterministic(self, processed: ProcessingResult, reason: str) -> CategorizationResult:
        ingredients = []
        for mention in processed.normalized_ingredients:
            ingredient = enhance(mention.model_dump(), mention)
            if ingredient is not None:
                ingredients.append(ingredient)
        confidence = extraction_confidence(ingredients, processed.confidence) * FALLBACK_SCALE
        return CategorizationResult(
            categorized_ingredients=ingredients,
            confidence=round(confidence, 3),
            extraction_method="deterministic",
            model=None,
            fallback_used=True,
            fallback_reason=reason,
            categories=category_counts(ingredients),
        )
