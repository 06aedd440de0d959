"""Tests for categorization and measurement standardization."""

import pytest

from recipe_lens.pipeline.information_extraction import (
    MAX_TOKENS,
    TEMPERATURE,
    InformationExtractionStage,
    enhance,
    extraction_confidence,
)
from recipe_lens.pipeline.smart_processing import SmartProcessingStage
from recipe_lens.schema import NormalizedIngredient, ProcessingResult


@pytest.fixture
def processed():
    return ProcessingResult(
        format_type="structured",
        normalized_ingredients=[
            NormalizedIngredient(name="flour", quantity="2", unit="cups", confidence=0.5),
            NormalizedIngredient(name="eggs", quantity=3, preparation="beaten", confidence=0.4),
        ],
        confidence=0.8,
    )


def test_enhance_reads_alternate_keys_and_categorizes():
    ingredient = enhance({"name": "Chicken Breast", "amount": "1 1/2", "units": "lbs"})

    assert ingredient.quantity == 1.5
    assert ingredient.unit == "pounds"
    assert ingredient.category == "meat"


def test_enhance_backfills_from_upstream(processed):
    eggs = processed.normalized_ingredients[1]

    ingredient = enhance({"name": "eggs", "confidence": 0.7}, eggs)

    assert ingredient.quantity == 3.0
    assert ingredient.preparation == "beaten"
    assert ingredient.category == "dairy"
    assert "eggs" in ingredient.allergens
    assert ingredient.confidence == 0.7


def test_enhance_complete_entries_gain_confidence():
    ingredient = enhance({"name": "flour", "quantity": 2, "unit": "cups", "confidence": 0.5})

    assert ingredient.confidence == pytest.approx(0.6)


def test_enhance_keeps_model_allergens():
    ingredient = enhance({"name": "flour", "allergens": ["gluten"]})

    assert ingredient.allergens[0] == "gluten"
    assert "wheat" in ingredient.allergens


def test_enhance_rejects_steps():
    assert enhance({"name": "Step 2"}) is None
    assert enhance({"name": ""}) is None


def test_extraction_confidence_empty_is_zero():
    assert extraction_confidence([], 0.9) == 0.0


def test_deterministic_without_provider(processed):
    result = InformationExtractionStage().extract(processed)

    assert result.extraction_method == "deterministic"
    assert result.fallback_used is True
    assert result.fallback_reason == "LLM disabled"
    assert [item.category for item in result.categorized_ingredients] == ["pantry", "dairy"]
    assert result.categories == {"pantry": 1, "dairy": 1}


def test_no_mentions_skips_model(scripted_provider):
    provider = scripted_provider([])

    result = InformationExtractionStage(provider).extract(ProcessingResult())

    assert result.categorized_ingredients == []
    assert result.confidence == 0.0
    assert result.fallback_used is True
    assert provider.calls == []


def test_llm_path_merges_model_output_with_upstream(scripted_provider, processed):
    provider = scripted_provider(
        [
            {
                "ingredients": [
                    {"name": "Flour", "amount": "2", "unit": "cup", "allergens": ["gluten"], "confidence": 0.9},
                    {"name": "eggs", "confidence": 0.8, "subcategory": "eggs"},
                    "not an object",
                ]
            }
        ]
    )

    result = InformationExtractionStage(provider).extract(processed)

    assert result.extraction_method == "llm"
    assert result.fallback_used is False
    flour, eggs = result.categorized_ingredients
    assert (flour.quantity, flour.unit) == (2.0, "cups")
    assert flour.confidence == pytest.approx(1.0)
    assert eggs.quantity == 3.0
    assert eggs.preparation == "beaten"
    assert provider.calls[0]["max_tokens"] == MAX_TOKENS
    assert provider.calls[0]["temperature"] == TEMPERATURE


def test_target_servings_reach_the_prompt(scripted_provider, processed):
    provider = scripted_provider([{"ingredients": [{"name": "flour", "quantity": 4, "unit": "cups"}]}])

    InformationExtractionStage(provider, target_servings=8).extract(processed)

    assert "8 servings" in provider.calls[0]["prompt"]


def test_empty_model_list_falls_back(scripted_provider, processed):
    provider = scripted_provider([{"ingredients": []}])

    result = InformationExtractionStage(provider).extract(processed)

    assert result.extraction_method == "deterministic"
    assert result.fallback_reason.startswith("LLM extraction failed")
    assert len(result.categorized_ingredients) == 2


def test_deterministic_confidence_on_heuristic_input(e2e_recipe):
    processed = SmartProcessingStage().process(e2e_recipe)

    result = InformationExtractionStage().extract(processed)

    assert result.confidence == pytest.approx(0.575, abs=0.001)
    flour, salt, eggs = result.categorized_ingredients
    assert flour.allergens == ["wheat"]
    assert salt.unit == "teaspoons"
    assert eggs.unit is None
