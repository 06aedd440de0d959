"""Stage 1: detect the recipe format and pull raw ingredient mentions."""

from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import ValidationError

from recipe_lens.exceptions import ParseError
from recipe_lens.normalization.taxonomy import clean_name, extract_preparation
from recipe_lens.normalization.units import split_quantity_unit
from recipe_lens.parsing.heuristic import is_non_ingredient_name, parse_line, parse_text
from recipe_lens.parsing.segmenter import segment
from recipe_lens.pipeline.base import invoke_json_with_fallback, mean
from recipe_lens.pipeline.prompts import build_processing_prompt
from recipe_lens.providers.base import BaseProvider
from recipe_lens.schema import NormalizedIngredient, ProcessingResult, RawIngredientMention, RecipeInput

logger = logging.getLogger(__name__)

STAGE_NAME = "smart_processing"
MAX_TOKENS = 2000
TEMPERATURE = 0.2
HEURISTIC_SCALE = 0.8

# Scores are accumulated in this order; the first format wins a tie.
FORMAT_PATTERNS: dict[str, tuple[tuple[str, ...], tuple[re.Pattern, ...]]] = {
    "structured": (
        ("ingredients:", "ingredients list", "you will need", "what you need"),
        (
            re.compile(r"ingredients\s*[:\-]\s*"),
            re.compile(r"you will need\s*[:\-]\s*"),
            re.compile(r"what you need\s*[:\-]\s*"),
        ),
    ),
    "narrative": (
        ("first", "then", "next", "after", "start", "begin"),
        (
            re.compile(r"first.*?add", re.DOTALL),
            re.compile(r"then.*?add", re.DOTALL),
            re.compile(r"next.*?add", re.DOTALL),
            re.compile(r"start.*?with", re.DOTALL),
        ),
    ),
    "mixed": (
        ("ingredients", "instructions", "method"),
        (
            re.compile(r"ingredients.*?instructions", re.DOTALL),
            re.compile(r"method.*?ingredients", re.DOTALL),
        ),
    ),
    "casual": (
        ("just mix", "throw in", "grab", "get", "use"),
        (
            re.compile(r"just mix.*?and", re.DOTALL),
            re.compile(r"throw in.*?with", re.DOTALL),
            re.compile(r"grab.*?and", re.DOTALL),
        ),
    ),
}


def prepare_text(recipe: Any) -> str:
    """Flatten a recipe (string, dict or RecipeInput) into one text blob."""
    if recipe is None:
        return ""
    if isinstance(recipe, str):
        return recipe.strip()
    if isinstance(recipe, RecipeInput):
        return recipe.to_text()
    if isinstance(recipe, dict):
        try:
            return RecipeInput.model_validate(recipe).to_text()
        except ValidationError:
            logger.warning("Recipe dict did not match the expected shape; using its text values")
            return "\n".join(str(value) for value in recipe.values() if isinstance(value, str)).strip()
    return str(recipe).strip()


def detect_format(text: str | None) -> str:
    """Classify text as structured, narrative, mixed or casual."""
    lowered = (text or "").lower()
    scores = {name: 0 for name in FORMAT_PATTERNS}

    for name, (indicators, patterns) in FORMAT_PATTERNS.items():
        for indicator in indicators:
            if indicator in lowered:
                scores[name] += 2
        for pattern in patterns:
            if pattern.search(lowered):
                scores[name] += 3

    if ":" in lowered and "\n" in lowered:
        scores["structured"] += 2
    if len(lowered) > 500 and "ingredients:" not in lowered:
        scores["narrative"] += 2
    if "step" in lowered or "instruction" in lowered:
        scores["mixed"] += 1

    best = max(scores.values())
    if best == 0:
        return "mixed"
    return next(name for name, score in scores.items() if score == best)


def normalize_mention(mention: RawIngredientMention) -> NormalizedIngredient | None:
    """Canonicalize quantity, unit and name; move preparation out of the name."""
    name = clean_name(mention.name)
    if not name or is_non_ingredient_name(name):
        return None

    preparation = (mention.preparation or "").strip().lower() or None
    if not preparation:
        name, preparation = extract_preparation(name)

    quantity = mention.quantity
    unit = mention.unit
    if not unit and isinstance(quantity, str):
        split_quantity, split_unit = split_quantity_unit(quantity)
        if split_unit:
            quantity, unit = split_quantity, split_unit

    return NormalizedIngredient(
        name=name,
        quantity=quantity,
        unit=unit,
        preparation=preparation,
        context=mention.context,
        confidence=mention.confidence,
        raw_text=mention.raw_text,
    )


def processing_confidence(ingredients: list[NormalizedIngredient]) -> float:
    score = 0.3
    if ingredients:
        total = len(ingredients)
        score += 0.2
        if sum(1 for item in ingredients if item.quantity is not None) / total > 0.5:
            score += 0.2
        if sum(1 for item in ingredients if item.unit) / total > 0.5:
            score += 0.1
        if any(item.preparation for item in ingredients):
            score += 0.1
        if mean([item.confidence for item in ingredients]) > 0.7:
            score += 0.1
    return round(min(1.0, score), 3)


def _mention_from_item(item: Any) -> RawIngredientMention | None:
    if isinstance(item, str):
        return parse_line(item)
    if not isinstance(item, dict):
        return None

    name = str(item.get("name") or "").strip()
    if not name or is_non_ingredient_name(name):
        return None

    quantity = item.get("quantity")
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float, str)):
        quantity = None
    unit = item.get("unit")
    preparation = item.get("preparation")
    return RawIngredientMention(
        name=name,
        quantity=quantity,
        unit=unit if isinstance(unit, str) else None,
        preparation=preparation if isinstance(preparation, str) else None,
        context=str(item.get("context") or ""),
        confidence=item.get("confidence", 0.5),
        raw_text=str(item.get("raw_text") or ""),
    )


def mentions_from_payload(payload: dict[str, Any]) -> list[RawIngredientMention]:
    """Map model output onto mentions, dropping steps and bare verbs."""
    mentions = []
    for item in payload.get("ingredients") or []:
        mention = _mention_from_item(item)
        if mention is not None:
            mentions.append(mention)
    return mentions


class SmartProcessingStage:
    """Format detection, segmentation and raw mention extraction."""

    name = STAGE_NAME

    def __init__(self, provider: BaseProvider | None = None, *, fallback_model: str | None = None):
        self.provider = provider
        self.fallback_model = fallback_model

    def process(self, recipe: Any) -> ProcessingResult:
        original_text = prepare_text(recipe)
        format_type = detect_format(original_text)
        segmented_text = segment(original_text)

        if self.provider is None:
            return self._heuristic(original_text, segmented_text, format_type, "LLM disabled")

        def _validate(payload: dict[str, Any]) -> None:
            if not any(normalize_mention(m) for m in mentions_from_payload(payload)):
                raise ParseError("Response has no usable ingredients")

        prompt = build_processing_prompt(segmented_text or original_text, format_type)
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
            logger.exception("Smart processing LLM path failed; using heuristic parser")
            return self._heuristic(original_text, segmented_text, format_type, f"LLM extraction failed: {exc}")

        ingredients = _normalize_all(mentions_from_payload(response.payload))
        return ProcessingResult(
            format_type=format_type,
            original_text=original_text,
            segmented_text=segmented_text,
            normalized_ingredients=ingredients,
            confidence=processing_confidence(ingredients),
            method="llm",
            model=response.model,
            fallback_used=False,
            fallback_reason=(
                f"Primary model failed, used {response.model}: {response.primary_error}"
                if response.used_fallback_model
                else None
            ),
        )

    def fallback(self, recipe: Any, error: Exception) -> ProcessingResult:
        """Heuristic substitute used by the orchestrator when process() raised."""
        original_text = prepare_text(recipe)
        return self._heuristic(original_text, segment(original_text), detect_format(original_text), str(error))

    def _heuristic(self, original_text: str, segmented_text: str, format_type: str, reason: str) -> ProcessingResult:
        mentions, coverage = parse_text(segmented_text or original_text)
        ingredients = _normalize_all(mentions)
        return ProcessingResult(
            format_type=format_type,
            original_text=original_text,
            segmented_text=segmented_text,
            normalized_ingredients=ingredients,
            confidence=round(processing_confidence(ingredients) * coverage * HEURISTIC_SCALE, 3),
            method="heuristic",
            model=None,
            fallback_used=True,
            fallback_reason=reason,
        )


def _normalize_all(mentions: list[RawIngredientMention]) -> list[NormalizedIngredient]:
    ingredients = []
    for mention in mentions:
        normalized = normalize_mention(mention)
        if normalized is not None:
            ingredients.append(normalized)
    return ingredients
