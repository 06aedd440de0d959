"""recipe-lens: Extract structured ingredient lists from free-form recipe text."""

from recipe_lens.core import consolidate_shopping_list, extract_ingredients, extract_meal_plan
from recipe_lens.normalization import normalize_quantity, normalize_unit
from recipe_lens.schema import ExtractionResult, RecipeInput, ValidatedIngredient

__version__ = "0.1.0"

__all__ = [
    "extract_ingredients",
    "extract_meal_plan",
    "consolidate_shopping_list",
    "normalize_quantity",
    "normalize_unit",
    "ExtractionResult",
    "RecipeInput",
    "ValidatedIngredient",
    "__version__",
]
