"""Normalization utilities for recipe-lens."""

from recipe_lens.normalization.taxonomy import categorize, detect_allergens, extract_preparation, name_key
from recipe_lens.normalization.units import normalize_quantity, normalize_unit

__all__ = [
    "categorize",
    "detect_allergens",
    "extract_preparation",
    "name_key",
    "normalize_quantity",
    "normalize_unit",
]
