"""Run the three extraction stages and compile the final result."""

from __future__ import annotations

import logging
import re
import uuid
from typing import Any, TypeVar

from recipe_lens.config import PipelineConfig
from recipe_lens.exceptions import StageError
from recipe_lens.normalization.taxonomy import categorize, detect_allergens, subcategory
from recipe_lens.parsing.heuristic import is_non_ingredient_name, parse_text
from recipe_lens.pipeline.base import Stage
from recipe_lens.pipeline.information_extraction import InformationExtractionStage
from recipe_lens.pipeline.smart_processing import SmartProcessingStage, normalize_mention, prepare_text
from recipe_lens.pipeline.validation import ValidationStage
from recipe_lens.providers.base import BaseProvider
from recipe_lens.schema import (
    CategorizationResult,
    ExtractionResult,
    Issue,
    PantryCheckItem,
    ProcessingResult,
    RecipeInput,
    ShoppingListItem,
    ValidatedIngredient,
    ValidationResult,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

STAGE_NAMES = ("smart_processing", "information_extraction", "validation")
EMERGENCY_CONFIDENCE = 0.2
EMERGENCY_NOTE = "Emergency fallback - manual review required"

_LABEL_ARTIFACT_RE = re.compile(r"^(?:ingredients?|instructions?|directions?)\s*[:\-–]\s*", re.IGNORECASE)
_LABEL_ONLY = {"ingredient", "ingredients", "instruction", "instructions", "direction", "directions"}


def new_extraction_id() -> str:
    return f"extract_{uuid.uuid4().hex}"


def processing_quality(confidence: float, issues: list[Issue]) -> str:
    if any(issue.severity in ("high", "critical") for issue in issues):
        return "needs-review"
    if confidence < 0.7:
        return "fair"
    if confidence < 0.85:
        return "good"
    return "excellent"


def category_summary(ingredients: list[ValidatedIngredient]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for ingredient in ingredients:
        counts[ingredient.category] = counts.get(ingredient.category, 0) + 1
    return counts


def allergen_summary(ingredients: list[ValidatedIngredient]) -> list[str]:
    allergens: list[str] = []
    for ingredient in ingredients:
        for allergen in ingredient.allergens:
            if allergen not in allergens:
                allergens.append(allergen)
    return allergens


def shopping_list_view(ingredients: list[ValidatedIngredient], min_confidence: float) -> list[ShoppingListItem]:
    """Flat list for shopping, without weak entries or section-label artifacts."""
    items = []
    for ingredient in ingredients:
        if ingredient.confidence < min_confidence:
            continue
        name = _LABEL_ARTIFACT_RE.sub("", ingredient.name).strip()
        if not name or name.lower() in _LABEL_ONLY or is_non_ingredient_name(name):
            continue
        items.append(
            ShoppingListItem(
                name=name,
                quantity=ingredient.quantity,
                unit=ingredient.unit,
                category=ingredient.category,
                notes=ingredient.notes,
            )
        )
    return items


def pantry_check_view(ingredients: list[ValidatedIngredient]) -> list[PantryCheckItem]:
    return [
        PantryCheckItem(ingredient=item.name, needed=item.quantity, unit=item.unit)
        for item in ingredients
    ]


class RecipeOrchestrator:
    """Smart processing -> information extraction -> validation, each with a substitute."""

    def __init__(self, provider: BaseProvider | None = None, config: PipelineConfig | None = None):
        self.provider = provider
        self.config = config or PipelineConfig()
        self.smart_processing = SmartProcessingStage(provider, fallback_model=self.config.fallback_model)
        self.information_extraction = InformationExtractionStage(provider, fallback_model=self.config.fallback_model)
        self.validation = ValidationStage(
            provider,
            fallback_model=self.config.fallback_model,
            review_enabled=self.config.validation_review_enabled,
            low_confidence_threshold=self.config.low_confidence_threshold,
        )

    def extract_ingredients(
        self,
        recipe: RecipeInput | dict[str, Any] | str | None,
        raw_text: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> ExtractionResult:
        """Extract structured ingredients; always returns a result.

        Args:
            recipe: Structured recipe, a dict of the same shape, or plain text.
            raw_text: Extra free text appended to the recipe.
            options: ``target_servings`` scales quantities in the model pass.
        """
        options = options or {}
        extraction_id = new_extraction_id()
        source = _merge_raw_text(recipe, raw_text)
        logger.info("Starting ingredient extraction %s", extraction_id)

        try:
            result = self._run(extraction_id, source, options)
        except Exception:
            logger.exception("Extraction %s failed in every stage; using emergency fallback", extraction_id)
            return self._emergency(extraction_id, source)

        logger.info(
            "Extraction %s completed: %s ingredients, confidence %.2f, fallbacks %s",
            extraction_id,
            len(result.ingredients),
            result.confidence,
            result.fallbacks_used or "none",
        )
        return result

    def _run(self, extraction_id: str, source: Any, options: dict[str, Any]) -> ExtractionResult:
        fallbacks: list[str] = []
        reasons: dict[str, str] = {}

        extraction_stage = self.information_extraction
        target_servings = options.get("target_servings")
        if target_servings:
            extraction_stage = InformationExtractionStage(
                self.provider,
                fallback_model=self.config.fallback_model,
                target_servings=target_servings,
            )

        processing_stage: Stage[Any, ProcessingResult] = Stage(
            self.smart_processing.name, self.smart_processing.process, self.smart_processing.fallback
        )
        processed = self._run_stage(processing_stage, source, fallbacks, reasons)

        categorization_stage: Stage[ProcessingResult, CategorizationResult] = Stage(
            extraction_stage.name, extraction_stage.extract, extraction_stage.fallback
        )
        categorized = self._run_stage(categorization_stage, processed, fallbacks, reasons)

        validation_stage: Stage[tuple[CategorizationResult, ProcessingResult], ValidationResult] = Stage(
            self.validation.name,
            lambda pair: self.validation.validate_and_enhance(*pair),
            lambda pair, error: self.validation.fallback(*pair, error),
        )
        validated = self._run_stage(validation_stage, (categorized, processed), fallbacks, reasons)

        ingredients = validated.validated_ingredients
        return ExtractionResult(
            extraction_id=extraction_id,
            format_type=processed.format_type,
            ingredients=ingredients,
            issues=validated.issues,
            confidence=validated.confidence,
            fallbacks_used=fallbacks,
            fallback_reasons=reasons,
            categories=category_summary(ingredients),
            allergens=allergen_summary(ingredients),
            duplicates_resolved=validated.duplicates_resolved,
            processing_quality=processing_quality(validated.confidence, validated.issues),
            shopping_list=shopping_list_view(ingredients, self.config.shopping_list_min_confidence),
            pantry_check=pantry_check_view(ingredients),
        )

    def _run_stage(
        self,
        stage: Stage[Any, T],
        value: Any,
        fallbacks: list[str],
        reasons: dict[str, str],
    ) -> T:
        try:
            result = stage.run(value)
        except Exception as exc:
            logger.warning("Stage %s failed, using fallback: %s", stage.name, exc)
            try:
                result = stage.fallback(value, exc)
            except Exception as fallback_exc:
                raise StageError(stage.name, f"fallback failed: {fallback_exc}") from fallback_exc
            fallbacks.append(stage.name)
            reasons[stage.name] = f"Stage failed: {exc}"
            return result

        if getattr(result, "fallback_used", False):
            fallbacks.append(stage.name)
            reasons[stage.name] = getattr(result, "fallback_reason", None) or "fallback"
        return result

    def _emergency(self, extraction_id: str, source: Any) -> ExtractionResult:
        text = source if isinstance(source, str) else prepare_text(source)
        mentions = parse_text(text)[0]
        ingredients: list[ValidatedIngredient] = []
        for mention in mentions:
            normalized = normalize_mention(mention)
            if normalized is None:
                continue
            category = categorize(normalized.name)
            ingredients.append(
                ValidatedIngredient(
                    **normalized.model_dump(exclude={"confidence"}),
                    confidence=EMERGENCY_CONFIDENCE,
                    category=category,
                    subcategory=subcategory(normalized.name, category),
                    allergens=detect_allergens(normalized.name),
                    validation_issues=[EMERGENCY_NOTE],
                )
            )

        issues = [
            Issue(
                type="critical",
                severity="critical",
                description="All extraction stages failed - manual review required",
                affected_ingredients=[item.name for item in ingredients],
            )
        ]
        return ExtractionResult(
            extraction_id=extraction_id,
            format_type="unknown",
            ingredients=ingredients,
            issues=issues,
            confidence=EMERGENCY_CONFIDENCE,
            fallbacks_used=list(STAGE_NAMES) + ["emergency"],
            fallback_reasons={"emergency": "All stages failed"},
            categories=category_summary(ingredients),
            allergens=allergen_summary(ingredients),
            duplicates_resolved=[],
            processing_quality="needs-review",
            shopping_list=shopping_list_view(ingredients, self.config.shopping_list_min_confidence),
            pantry_check=pantry_check_view(ingredients),
        )


def _merge_raw_text(recipe: Any, raw_text: str | None) -> Any:
    if not raw_text:
        return recipe
    if recipe is None or recipe == "":
        return raw_text
    if isinstance(recipe, str):
        return f"{recipe}\n{raw_text}"
    if isinstance(recipe, RecipeInput):
        combined = f"{recipe.text}\n{raw_text}" if recipe.text else raw_text
        return recipe.model_copy(update={"text": combined})
    if isinstance(recipe, dict):
        merged = dict(recipe)
        merged["text"] = f"{merged['text']}\n{raw_text}" if merged.get("text") else raw_text
        return merged
    return recipe

