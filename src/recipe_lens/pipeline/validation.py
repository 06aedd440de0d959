"""Stage 3: merge duplicates, flag weak entries and optionally ask for a review."""

from __future__ import annotations

import logging
from typing import Any

from recipe_lens.exceptions import ParseError
from recipe_lens.normalization.taxonomy import name_key
from recipe_lens.pipeline.base import invoke_json_with_fallback, mean
from recipe_lens.pipeline.prompts import build_validation_prompt
from recipe_lens.providers.base import BaseProvider
from recipe_lens.schema import (
    CategorizationResult,
    DuplicateResolution,
    Issue,
    ProcessingResult,
    ValidatedIngredient,
    ValidationResult,
)

logger = logging.getLogger(__name__)

STAGE_NAME = "validation"
MAX_TOKENS = 1200
TEMPERATURE = 0.2
REVIEW_FALLBACK_SCALE = 0.8
LARGE_QUANTITY_CONFIDENCE_CAP = 0.7

REVIEW_UNAVAILABLE = "AI validation unavailable - using basic validation only"
LARGE_QUANTITY_NOTE = "Unusually large quantity - verify units"
LOW_CONFIDENCE_NOTE = "Low confidence extraction - review recommended"

# Upper bound of a plausible home-recipe amount per unit.
PLAUSIBLE_MAXIMUM = {
    "cups": 50,
    "tablespoons": 100,
    "teaspoons": 100,
    "fluid ounces": 400,
    "ounces": 500,
    "pounds": 50,
    "grams": 20000,
    "kilograms": 50,
    "milligrams": 100000,
    "milliliters": 20000,
    "liters": 50,
    "pinches": 20,
    "dashes": 20,
}
DEFAULT_PLAUSIBLE_MAXIMUM = 1000


def unavailable_issue(ingredients: list[ValidatedIngredient]) -> Issue:
    return Issue(
        type="system",
        severity="medium",
        description=REVIEW_UNAVAILABLE,
        affected_ingredients=[item.name for item in ingredients],
    )


def _to_validated(extraction: CategorizationResult) -> list[ValidatedIngredient]:
    return [
        ValidatedIngredient(
            **item.model_dump(),
            sources=[item.context] if item.context else [],
        )
        for item in extraction.categorized_ingredients
    ]


def apply_quantity_rules(ingredient: ValidatedIngredient) -> ValidatedIngredient:
    """Cap confidence for amounts no home recipe would use."""
    if ingredient.quantity is None:
        return ingredient
    limit = PLAUSIBLE_MAXIMUM.get(ingredient.unit or "", DEFAULT_PLAUSIBLE_MAXIMUM)
    if ingredient.quantity <= limit:
        return ingredient
    data = ingredient.model_dump()
    data["confidence"] = min(ingredient.confidence, LARGE_QUANTITY_CONFIDENCE_CAP)
    data["validation_issues"] = ingredient.validation_issues + [LARGE_QUANTITY_NOTE]
    return ValidatedIngredient(**data)


def _merge(first: ValidatedIngredient, second: ValidatedIngredient) -> ValidatedIngredient:
    data = first.model_dump()
    if first.quantity is None:
        data["quantity"] = second.quantity
    elif second.quantity is not None:
        data["quantity"] = round(first.quantity + second.quantity, 3)
    data["allergens"] = first.allergens + [tag for tag in second.allergens if tag not in first.allergens]
    data["sources"] = first.sources + [source for source in second.sources if source not in first.sources]
    data["context"] = "; ".join(part for part in (first.context, second.context) if part)
    data["confidence"] = max(first.confidence, second.confidence)
    data["preparation"] = first.preparation or second.preparation
    data["subcategory"] = first.subcategory or second.subcategory
    data["notes"] = "; ".join(part for part in (first.notes, second.notes) if part)
    data["optional"] = first.optional and second.optional
    data["validation_issues"] = first.validation_issues + [
        note for note in second.validation_issues if note not in first.validation_issues
    ]
    return ValidatedIngredient(**data)


def deduplicate(
    ingredients: list[ValidatedIngredient],
) -> tuple[list[ValidatedIngredient], list[DuplicateResolution]]:
    """Merge entries sharing (name key, unit); the first entry keeps its position."""
    merged: dict[tuple[str, str | None], ValidatedIngredient] = {}
    originals: dict[tuple[str, str | None], list[str]] = {}
    for ingredient in ingredients:
        key = (name_key(ingredient.name) or ingredient.name, ingredient.unit)
        if key in merged:
            merged[key] = _merge(merged[key], ingredient)
            originals[key].append(ingredient.name)
        else:
            merged[key] = ingredient
            originals[key] = [ingredient.name]

    resolutions = [
        DuplicateResolution(key=key[0], original=names, resolved=merged[key].name)
        for key, names in originals.items()
        if len(names) > 1
    ]
    return list(merged.values()), resolutions


def flag_low_confidence(
    ingredients: list[ValidatedIngredient],
    threshold: float,
) -> tuple[list[ValidatedIngredient], list[Issue]]:
    """Annotate weak entries instead of dropping them."""
    flagged: list[ValidatedIngredient] = []
    issues: list[Issue] = []
    for ingredient in ingredients:
        if ingredient.confidence >= threshold:
            flagged.append(ingredient)
            continue
        data = ingredient.model_dump()
        if LOW_CONFIDENCE_NOTE not in ingredient.validation_issues:
            data["validation_issues"] = ingredient.validation_issues + [LOW_CONFIDENCE_NOTE]
        flagged.append(ValidatedIngredient(**data))
        issues.append(
            Issue(
                type="low_confidence",
                severity="medium",
                description=f"Low confidence ({ingredient.confidence:.2f}) for '{ingredient.name}' - verify manually",
                affected_ingredients=[ingredient.name],
            )
        )
    return flagged, issues


def _issue_from_item(item: Any) -> Issue | None:
    if not isinstance(item, dict):
        return None
    description = str(item.get("description") or "").strip()
    if not description:
        return None
    severity = str(item.get("severity") or "low").strip().lower()
    if severity not in {"low", "medium", "high", "critical"}:
        severity = "low"
    affected = item.get("affected_ingredients") or item.get("affectedIngredients") or []
    if not isinstance(affected, list):
        affected = [affected]
    return Issue(
        type=str(item.get("type") or "review"),
        severity=severity,
        description=description,
        affected_ingredients=[str(name) for name in affected],
    )


def _require_issue_list(payload: dict[str, Any]) -> None:
    if not isinstance(payload.get("issues"), list):
        raise ParseError("Response has no issues list")


class ValidationStage:
    """Dedup, business rules, low-confidence flags and an optional model review."""

    name = STAGE_NAME

    def __init__(
        self,
        provider: BaseProvider | None = None,
        *,
        fallback_model: str | None = None,
        review_enabled: bool = True,
        low_confidence_threshold: float = 0.4,
    ):
        self.provider = provider
        self.fallback_model = fallback_model
        self.review_enabled = review_enabled
        self.low_confidence_threshold = low_confidence_threshold

    def validate_and_enhance(
        self,
        extraction: CategorizationResult,
        preprocessing: ProcessingResult,
    ) -> ValidationResult:
        ingredients = [apply_quantity_rules(item) for item in _to_validated(extraction)]
        ingredients, duplicates = deduplicate(ingredients)
        ingredients, issues = flag_low_confidence(ingredients, self.low_confidence_threshold)

        if not ingredients:
            issues.append(
                Issue(
                    type="empty",
                    severity="critical",
                    description="No ingredients could be extracted - manual review required",
                )
            )

        fallback_used = False
        fallback_reason: str | None = None
        if ingredients and self.review_enabled:
            review_issues, fallback_reason = self._review(ingredients, preprocessing)
            if fallback_reason is None:
                issues.extend(review_issues)
            else:
                fallback_used = True
                issues.append(unavailable_issue(ingredients))

        confidence = 0.0
        if ingredients:
            confidence = min(extraction.confidence, mean([item.confidence for item in ingredients]))
            if fallback_used:
                confidence *= REVIEW_FALLBACK_SCALE

        return ValidationResult(
            validated_ingredients=ingredients,
            issues=issues,
            duplicates_resolved=duplicates,
            confidence=round(confidence, 3),
            fallback_used=fallback_used,
            fallback_reason=fallback_reason,
        )

    def fallback(
        self,
        extraction: CategorizationResult,
        preprocessing: ProcessingResult,
        error: Exception,
    ) -> ValidationResult:
        """Pass the extraction through untouched with a single review-unavailable issue."""
        ingredients = _to_validated(extraction)
        return ValidationResult(
            validated_ingredients=ingredients,
            issues=[unavailable_issue(ingredients)],
            duplicates_resolved=[],
            confidence=round(extraction.confidence * REVIEW_FALLBACK_SCALE, 3),
            fallback_used=True,
            fallback_reason=str(error),
        )

    def _review(
        self,
        ingredients: list[ValidatedIngredient],
        preprocessing: ProcessingResult,
    ) -> tuple[list[Issue], str | None]:
        if self.provider is None:
            return [], "LLM disabled"

        prompt = build_validation_prompt(
            [
                item.model_dump(include={"name", "quantity", "unit", "category", "preparation", "confidence"})
                for item in ingredients
            ],
            preprocessing.format_type,
            preprocessing.confidence,
        )
        try:
            response = invoke_json_with_fallback(
                self.provider,
                prompt,
                max_tokens=MAX_TOKENS,
                temperature=TEMPERATURE,
                fallback_model=self.fallback_model,
                validate=_require_issue_list,
            )
        except Exception as exc:
            logger.exception("Validation review failed; using basic validation only")
            return [], f"LLM review failed: {exc}"

        issues = []
        for item in response.payload.get("issues") or []:
            issue = _issue_from_item(item)
            if issue is not None:
                issues.append(issue)
        return issues, None
