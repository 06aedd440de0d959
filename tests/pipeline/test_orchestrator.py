"""End-to-end tests for the three-stage orchestrator."""

import pytest

from recipe_lens.config import PipelineConfig
from recipe_lens.pipeline.orchestrator import (
    EMERGENCY_NOTE,
    STAGE_NAMES,
    RecipeOrchestrator,
    processing_quality,
    shopping_list_view,
)
from recipe_lens.schema import Issue, RecipeInput, ValidatedIngredient


def _by_name(result):
    return {ingredient.name: ingredient for ingredient in result.ingredients}


def test_heuristic_only_extraction(e2e_recipe):
    result = RecipeOrchestrator().extract_ingredients(e2e_recipe)

    ingredients = _by_name(result)
    assert sorted(ingredients) == ["eggs", "flour", "salt"]
    assert (ingredients["flour"].quantity, ingredients["flour"].unit) == (2.0, "cups")
    assert (ingredients["salt"].quantity, ingredients["salt"].unit) == (1.5, "teaspoons")
    assert ingredients["eggs"].quantity == 3.0
    assert ingredients["eggs"].unit is None
    assert ingredients["eggs"].preparation == "beaten"
    assert result.fallbacks_used == list(STAGE_NAMES)
    assert result.extraction_id.startswith("extract_")
    assert "wheat" in result.allergens
    assert result.categories == {"pantry": 2, "dairy": 1}
    assert len(result.shopping_list) == 3
    assert len(result.pantry_check) == 3


def test_failing_provider_degrades_to_heuristics(e2e_recipe, failing_provider):
    result = RecipeOrchestrator(failing_provider).extract_ingredients(e2e_recipe)

    assert set(STAGE_NAMES) <= set(result.fallbacks_used)
    assert result.confidence <= 0.5
    assert sorted(_by_name(result)) == ["eggs", "flour", "salt"]
    assert all("step" not in name and "preheat" not in name for name in _by_name(result))
    assert failing_provider.calls == 3


def test_full_model_path(scripted_provider, e2e_recipe):
    provider = scripted_provider(
        [
            {
                "ingredients": [
                    {"name": "flour", "quantity": "2", "unit": "cups", "confidence": 0.95},
                    {"name": "salt", "quantity": "1 1/2", "unit": "tsp", "confidence": 0.95},
                    {"name": "eggs", "quantity": 3, "preparation": "beaten", "confidence": 0.9},
                ]
            },
            {
                "ingredients": [
                    {"name": "flour", "quantity": 2, "unit": "cups", "confidence": 0.95},
                    {"name": "salt", "quantity": 1.5, "unit": "teaspoons", "confidence": 0.95},
                    {"name": "eggs", "quantity": 3, "confidence": 0.9},
                ]
            },
            {"issues": []},
        ]
    )

    result = RecipeOrchestrator(provider).extract_ingredients(e2e_recipe)

    assert result.fallbacks_used == []
    assert result.issues == []
    assert result.confidence == pytest.approx(0.92)
    assert result.processing_quality == "excellent"
    assert _by_name(result)["eggs"].preparation == "beaten"
    assert len(provider.calls) == 3


def test_stage_exception_uses_substitute(mocker, e2e_recipe):
    orchestrator = RecipeOrchestrator()
    mocker.patch.object(orchestrator.information_extraction, "extract", side_effect=RuntimeError("kaboom"))

    result = orchestrator.extract_ingredients(e2e_recipe)

    assert "information_extraction" in result.fallbacks_used
    assert result.fallback_reasons["information_extraction"] == "Stage failed: kaboom"
    assert len(result.ingredients) == 3


def test_emergency_fallback_when_pipeline_breaks(mocker, e2e_recipe):
    mocker.patch.object(RecipeOrchestrator, "_run", side_effect=RuntimeError("everything broke"))

    result = RecipeOrchestrator().extract_ingredients(e2e_recipe)

    assert result.fallbacks_used == list(STAGE_NAMES) + ["emergency"]
    assert result.confidence == 0.2
    assert result.processing_quality == "needs-review"
    assert sorted(_by_name(result)) == ["eggs", "flour", "salt"]
    assert all(EMERGENCY_NOTE in item.validation_issues for item in result.ingredients)
    assert result.issues[0].severity == "critical"
    assert result.shopping_list == []


def test_failing_substitute_escalates_to_emergency(mocker, e2e_recipe):
    orchestrator = RecipeOrchestrator()
    mocker.patch.object(orchestrator.validation, "validate_and_enhance", side_effect=RuntimeError("first"))
    mocker.patch.object(orchestrator.validation, "fallback", side_effect=RuntimeError("second"))

    result = orchestrator.extract_ingredients(e2e_recipe)

    assert result.fallbacks_used[-1] == "emergency"
    assert result.confidence == 0.2


def test_raw_text_is_appended_to_structured_recipe():
    recipe = RecipeInput(name="Toast", ingredients=["2 slices bread"])

    result = RecipeOrchestrator().extract_ingredients(recipe, raw_text="1 tbsp butter")

    assert {"bread", "butter"} <= set(_by_name(result))


def test_empty_input_needs_review():
    result = RecipeOrchestrator().extract_ingredients("")

    assert result.ingredients == []
    assert result.confidence == 0.0
    assert result.processing_quality == "needs-review"


def test_review_disabled_by_config_is_not_a_fallback(e2e_recipe):
    config = PipelineConfig(validation_review_enabled=False)

    result = RecipeOrchestrator(config=config).extract_ingredients(e2e_recipe)

    assert "validation" not in result.fallbacks_used


def test_target_servings_option_reaches_extraction_prompt(scripted_provider, e2e_recipe):
    provider = scripted_provider([])

    RecipeOrchestrator(provider).extract_ingredients(e2e_recipe, options={"target_servings": 6})

    assert any("6 servings" in call["prompt"] for call in provider.calls)


@pytest.mark.parametrize(
    ("confidence", "issues", "expected"),
    [
        (0.9, [], "excellent"),
        (0.8, [], "good"),
        (0.5, [], "fair"),
        (0.95, [Issue(severity="high", description="x")], "needs-review"),
    ],
)
def test_processing_quality(confidence, issues, expected):
    assert processing_quality(confidence, issues) == expected


def test_shopping_list_view_filters_weak_and_label_entries():
    ingredients = [
        ValidatedIngredient(name="flour", quantity=2, unit="cups", confidence=0.9),
        ValidatedIngredient(name="ingredients: sugar", quantity=1, unit="cups", confidence=0.9),
        ValidatedIngredient(name="instructions", confidence=0.9),
        ValidatedIngredient(name="saffron", confidence=0.1),
    ]

    items = shopping_list_view(ingredients, min_confidence=0.3)

    assert [item.name for item in items] == ["flour", "sugar"]
