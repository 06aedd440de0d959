"""Command-line interface for recipe-lens."""

import argparse
import dataclasses
import logging
import os
import sys
from pathlib import Path

from recipe_lens import __version__, extract_ingredients
from recipe_lens.config import PipelineConfig
from recipe_lens.exceptions import AuthenticationError, RecipeLensError


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="recipe-lens",
        description="Extract a structured ingredient list from a recipe text file",
    )
    parser.add_argument("file", help="Path to a recipe text file, or - for stdin")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    parser.add_argument(
        "--provider",
        choices=["openrouter", "gemini", "none"],
        help="Model provider (default: RECIPE_LENS_PROVIDER env var, then openrouter)",
    )
    parser.add_argument(
        "--api-key",
        help="API key for the provider (default: OPENROUTER_API_KEY or GEMINI_API_KEY env var)",
    )
    parser.add_argument("--model", help="Model name override")
    parser.add_argument("--fallback-model", help="Model retried once when the primary model fails")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log pipeline progress to stderr",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"recipe-lens {__version__}",
    )

    args = parser.parse_args(argv)

    level = "INFO" if args.verbose else os.getenv("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        text = sys.stdin.read() if args.file == "-" else Path(args.file).read_text(encoding="utf-8")
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    config = PipelineConfig.from_env()
    if args.fallback_model:
        config = dataclasses.replace(config, fallback_model=args.fallback_model)

    try:
        result = extract_ingredients(
            text,
            api_key=args.api_key,
            provider=args.provider,
            model=args.model,
            config=config,
        )
    except AuthenticationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (RecipeLensError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(result.model_dump_json(indent=2))
    else:
        _print_formatted(result)

    return 0


def _print_formatted(result) -> None:
    """Print result in human-readable format."""
    print()
    print("  recipe-lens")
    print()

    if not result.ingredients:
        print("  No ingredients found.")
    for ingredient in result.ingredients:
        amount = _format_amount(ingredient.quantity, ingredient.unit)
        line = f"  - {amount + ' ' if amount else ''}{ingredient.name}"
        if ingredient.preparation:
            line += f", {ingredient.preparation}"
        print(f"{line:<44} [{ingredient.category}]")

    print()
    fields = [
        ("Format", result.format_type),
        ("Confidence", f"{result.confidence:.2f}"),
        ("Quality", result.processing_quality),
        ("Allergens", _format_list(result.allergens)),
        ("Fallbacks", _format_list(result.fallbacks_used)),
    ]
    for label, value in fields:
        display = value if value else "-"
        print(f"  {label + ':':<12} {display}")

    if result.issues:
        print()
        for issue in result.issues:
            print(f"  ! [{issue.severity}] {issue.description}")
    print()


def _format_amount(quantity: float | None, unit: str | None) -> str:
    """Format quantity and unit as "1.5 teaspoons"."""
    parts = []
    if quantity is not None:
        parts.append(f"{quantity:g}")
    if unit:
        parts.append(unit)
    return " ".join(parts)


def _format_list(items: list[str] | None) -> str | None:
    """Format list as comma-separated string."""
    if not items:
        return None
    return ", ".join(items)


if __name__ == "__main__":
    sys.exit(main())
