"""Text segmentation, heuristic line parsing and JSON recovery."""

from recipe_lens.parsing.heuristic import looks_like_ingredient_line, parse_line, parse_text
from recipe_lens.parsing.json_extract import extract_json_object
from recipe_lens.parsing.segmenter import segment

__all__ = ["extract_json_object", "looks_like_ingredient_line", "parse_line", "parse_text", "segment"]
