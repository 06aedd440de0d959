"""Multi-stage ingredient extraction pipeline."""

from recipe_lens.pipeline.information_extraction import InformationExtractionStage
from recipe_lens.pipeline.orchestrator import RecipeOrchestrator
from recipe_lens.pipeline.smart_processing import SmartProcessingStage, detect_format
from recipe_lens.pipeline.validation import ValidationStage, deduplicate

__all__ = [
    "InformationExtractionStage",
    "RecipeOrchestrator",
    "SmartProcessingStage",
    "ValidationStage",
    "deduplicate",
    "detect_format",
]
