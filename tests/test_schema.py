"""Tests for schema models."""

import pytest
from pydantic import ValidationError

from recipe_lens import ExtractionResult, RecipeInput
from recipe_lens.schema import IngredientRef, Issue, NormalizedIngredient, RawIngredientMention


def test_recipe_input_all_none():
    """RecipeInput with no data should flatten to an empty string."""
    assert RecipeInput().to_text() == ""


def test_recipe_input_flattens_structured_fields():
    recipe = RecipeInput(
        name="Omelette",
        ingredients=[IngredientRef(name="eggs", quantity="3"), "1 tbsp butter"],
        instructions="Whisk and cook.",
        servings=2,
    )

    text = recipe.to_text()

    assert text.startswith("Recipe: Omelette")
    assert "- 3 eggs" in text
    assert "- 1 tbsp butter" in text
    assert "Instructions:\nWhisk and cook." in text
    assert "Servings: 2" in text


def test_mention_confidence_is_clamped():
    assert RawIngredientMention(name="salt", confidence=3).confidence == 1.0
    assert RawIngredientMention(name="salt", confidence=-1).confidence == 0.0
    assert RawIngredientMention(name="salt", confidence="high").confidence == 0.5


def test_normalized_ingredient_canonicalizes_fields():
    ingredient = NormalizedIngredient(name="flour", quantity="1 1/2", unit="Tbsp")

    assert ingredient.quantity == 1.5
    assert ingredient.unit == "tablespoons"


def test_normalized_ingredient_unknown_values_become_none():
    ingredient = NormalizedIngredient(name="flour", quantity="some", unit="handfulish thing")

    assert ingredient.quantity is None
    assert ingredient.unit is None


def test_issue_severity_is_restricted():
    with pytest.raises(ValidationError):
        Issue(severity="urgent", description="x")


def test_extraction_result_is_immutable():
    result = ExtractionResult(extraction_id="extract_1")

    with pytest.raises(ValidationError):
        result.confidence = 0.9


def test_extraction_result_confidence_bounds():
    with pytest.raises(ValidationError):
        ExtractionResult(extraction_id="extract_1", confidence=1.5)


def test_extraction_result_to_dict():
    data = ExtractionResult(extraction_id="extract_1", fallbacks_used=["validation"]).to_dict()

    assert data["extraction_id"] == "extract_1"
    assert data["fallbacks_used"] == ["validation"]
    assert data["ingredients"] == []
