"""Prompt templates for the extraction stages."""

from __future__ import annotations

import json
from typing import Any

FORMAT_INSTRUCTIONS = {
    "structured": "This recipe has a structured ingredients section. Extract every ingredient listed in it.",
    "narrative": (
        "This recipe is written as narrative text. Extract every ingredient mention, "
        "including quantities, units and preparation methods."
    ),
    "mixed": "This recipe has mixed formatting. Extract the ingredients from the ingredient lines only.",
    "casual": (
        "This is a casual recipe description. Extract every ingredient mention, "
        "inferring quantities and units from context where possible."
    ),
}

PROCESSING_PROMPT = """You are a smart recipe processing agent. Extract the ingredients from the recipe text below.

{format_instruction}

Only return content from the ingredients section. Do NOT include:
- step numbers or "Step 1" style markers
- cooking instructions (preheat, mix, bake, stir, ...)
- yields, servings, prep or cook times
- oven temperatures

For each ingredient provide:
- name: the ingredient name without quantity or unit
- quantity: the amount as written, or null
- unit: the unit as written, or null
- preparation: chopped, diced, beaten, ... or null
- context: where it was found
- confidence: 0.0-1.0
- raw_text: the exact source line

Return ONLY this JSON object:
{{
  "ingredients": [
    {{"name": "...", "quantity": "...", "unit": "...", "preparation": null, "context": "...", "confidence": 0.9, "raw_text": "..."}}
  ],
  "format_confidence": 0.0,
  "total_mentions": 0
}}

Recipe text:
{text}

Respond only with valid JSON, no additional text."""

EXTRACTION_PROMPT = """You are an expert culinary information extraction agent. The ingredient mentions below were
already isolated from a recipe. For each one:

1. Standardize the quantity as a decimal number and the unit as one of:
   {units}
2. Assign a category from: {categories}
3. Give a more specific subcategory
4. Identify the preparation method
5. List allergens (milk, eggs, wheat, soy, peanuts, tree nuts, fish, shellfish)
6. Mark optional ingredients
7. Merge obvious duplicates
{scaling}
Never add ingredients that are not in the list. Never include instructions.

Return ONLY this JSON object:
{{
  "ingredients": [
    {{"name": "...", "quantity": 1.0, "unit": "...", "preparation": null, "category": "...",
      "subcategory": "...", "notes": "", "confidence": 0.9, "optional": false, "allergens": []}}
  ],
  "extraction_confidence": 0.0
}}

Ingredient mentions:
{mentions}

Respond only with valid JSON, no additional text."""

VALIDATION_PROMPT = """You are a validation agent reviewing ingredients extracted from a recipe.
Report problems only: duplicates, conflicting quantities, missing information, implausible
amounts or entries that are not ingredients. Do not rewrite or remove ingredients.

Return ONLY this JSON object:
{{
  "issues": [
    {{"type": "duplicate|conflict|missing|unclear", "severity": "low|medium|high",
      "description": "...", "affected_ingredients": ["..."]}}
  ]
}}

Preprocessing format: {format_type} (confidence {confidence:.2f})

Ingredients:
{ingredients}

Respond only with valid JSON, no additional text."""


def build_processing_prompt(text: str, format_type: str) -> str:
    instruction = FORMAT_INSTRUCTIONS.get(format_type, FORMAT_INSTRUCTIONS["mixed"])
    return PROCESSING_PROMPT.format(format_instruction=instruction, text=text)


def build_extraction_prompt(
    mentions: list[dict[str, Any]],
    units: list[str],
    categories: list[str],
    target_servings: int | None = None,
) -> str:
    scaling = ""
    if target_servings:
        scaling = f"8. Scale every quantity to {target_servings} servings if the recipe states its servings\n"
    return EXTRACTION_PROMPT.format(
        units=", ".join(units),
        categories=", ".join(categories),
        scaling=scaling,
        mentions=json.dumps(mentions, indent=2, ensure_ascii=False),
    )


def build_validation_prompt(ingredients: list[dict[str, Any]], format_type: str, confidence: float) -> str:
    return VALIDATION_PROMPT.format(
        format_type=format_type,
        confidence=confidence,
        ingredients=json.dumps(ingredients, indent=2, ensure_ascii=False),
    )
