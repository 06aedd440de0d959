"""Data models for recipe-lens."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from recipe_lens.normalization.units import normalize_quantity, normalize_unit

Category = Literal["produce", "dairy", "meat", "pantry", "frozen", "bakery", "beverages", "household", "other"]
Severity = Literal["low", "medium", "high", "critical"]
FormatType = Literal["structured", "narrative", "mixed", "casual", "unknown"]


def _coerce_confidence(value: Any, default: float = 0.5) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number:
        return default
    return max(0.0, min(1.0, number))


class IngredientRef(BaseModel):
    """Structured ingredient line inside a recipe object."""

    name: str
    quantity: str | float | None = None
    unit: str | None = None


class RecipeInput(BaseModel):
    """A recipe as handed to the pipeline: structured fields and/or raw text."""

    name: str | None = None
    description: str | None = None
    ingredients: str | list[str | IngredientRef] | None = None
    instructions: str | list[str] | None = None
    servings: int | str | None = None
    text: str | None = None

    def to_text(self) -> str:
        """Flatten the recipe into one text blob."""
        parts: list[str] = []
        if self.name:
            parts.append(f"Recipe: {self.name}\n")
        if self.description:
            parts.append(f"Description: {self.description}\n")

        if self.ingredients:
            if isinstance(self.ingredients, str):
                parts.append(f"Ingredients:\n{self.ingredients}\n")
            else:
                lines = ["Ingredients:"]
                for item in self.ingredients:
                    if isinstance(item, str):
                        lines.append(f"- {item}")
                    elif item.name:
                        fields = [str(item.quantity) if item.quantity is not None else "", item.unit or "", item.name]
                        lines.append("- " + " ".join(field for field in fields if field))
                parts.append("\n".join(lines) + "\n")

        if self.instructions:
            steps = self.instructions
            if isinstance(steps, list):
                steps = "\n".join(steps)
            parts.append(f"Instructions:\n{steps}\n")

        if self.servings:
            parts.append(f"Servings: {self.servings}\n")
        if self.text:
            parts.append(self.text)
        return "\n".join(parts).strip()


class RawIngredientMention(BaseModel):
    """A single ingredient occurrence before normalization."""

    name: str
    quantity: str | float | None = None
    unit: str | None = None
    preparation: str | None = None
    context: str = ""
    confidence: float = 0.5
    raw_text: str = ""

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> float:
        return _coerce_confidence(value)


class NormalizedIngredient(RawIngredientMention):
    """Mention with a decimal quantity and a canonical unit (or None)."""

    quantity: float | None = None
    unit: str | None = None

    @field_validator("quantity", mode="before")
    @classmethod
    def _normalize_quantity(cls, value: Any) -> float | None:
        return normalize_quantity(value)

    @field_validator("unit", mode="before")
    @classmethod
    def _normalize_unit(cls, value: Any) -> str | None:
        return normalize_unit(value)


class CategorizedIngredient(NormalizedIngredient):
    """Normalized ingredient with category and allergen annotations."""

    category: Category = "other"
    subcategory: str | None = None
    allergens: list[str] = Field(default_factory=list)
    optional: bool = False
    notes: str = ""


class ValidatedIngredient(CategorizedIngredient):
    """Categorized ingredient after deduplication and review."""

    sources: list[str] = Field(default_factory=list)
    validation_issues: list[str] = Field(default_factory=list)


class Issue(BaseModel):
    """Something a human should look at; never a reason to drop data."""

    type: str = "review"
    severity: Severity = "low"
    description: str
    affected_ingredients: list[str] = Field(default_factory=list)


class DuplicateResolution(BaseModel):
    key: str
    original: list[str]
    resolved: str


class ShoppingListItem(BaseModel):
    name: str
    quantity: float | None = None
    unit: str | None = None
    category: Category = "other"
    notes: str = ""
    checked: bool = False


class PantryCheckItem(BaseModel):
    ingredient: str
    needed: float | None = None
    unit: str | None = None
    have: float | None = None
    status: str = "unknown"


class ProcessingResult(BaseModel):
    """Output of the smart processing stage."""

    format_type: FormatType = "unknown"
    original_text: str = ""
    segmented_text: str = ""
    normalized_ingredients: list[NormalizedIngredient] = Field(default_factory=list)
    confidence: float = 0.0
    method: str = "llm"
    model: str | None = None
    fallback_used: bool = False
    fallback_reason: str | None = None


class CategorizationResult(BaseModel):
    """Output of the information extraction stage."""

    categorized_ingredients: list[CategorizedIngredient] = Field(default_factory=list)
    confidence: float = 0.0
    extraction_method: str = "llm"
    model: str | None = None
    fallback_used: bool = False
    fallback_reason: str | None = None
    categories: dict[str, int] = Field(default_factory=dict)


class ValidationResult(BaseModel):
    """Output of the validation stage."""

    validated_ingredients: list[ValidatedIngredient] = Field(default_factory=list)
    issues: list[Issue] = Field(default_factory=list)
    duplicates_resolved: list[DuplicateResolution] = Field(default_factory=list)
    confidence: float = 0.0
    fallback_used: bool = False
    fallback_reason: str | None = None


class ExtractionResult(BaseModel):
    """Final, immutable result of one extraction call."""

    model_config = ConfigDict(frozen=True)

    extraction_id: str
    format_type: FormatType = "unknown"
    ingredients: list[ValidatedIngredient] = Field(default_factory=list)
    issues: list[Issue] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    fallbacks_used: list[str] = Field(default_factory=list)
    fallback_reasons: dict[str, str] = Field(default_factory=dict)
    categories: dict[str, int] = Field(default_factory=dict)
    allergens: list[str] = Field(default_factory=list)
    duplicates_resolved: list[DuplicateResolution] = Field(default_factory=list)
    processing_quality: str = "fair"
    shopping_list: list[ShoppingListItem] = Field(default_factory=list)
    pantry_check: list[PantryCheckItem] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-compatible representation."""
        return self.model_dump(mode="json")
