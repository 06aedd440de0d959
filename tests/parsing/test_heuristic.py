"""Tests for the heuristic ingredient line parser."""

import string
import time

import pytest

from recipe_lens.parsing.heuristic import (
    is_non_ingredient_name,
    looks_like_ingredient_line,
    parse_line,
    parse_text,
)
from recipe_lens.parsing.segmenter import segment


def test_parse_line_quantity_unit_name():
    mention = parse_line("2 cups flour")

    assert mention is not None
    assert mention.name == "flour"
    assert mention.quantity == "2"
    assert mention.unit == "cups"
    assert mention.confidence == 0.5
    assert mention.raw_text == "2 cups flour"


def test_parse_line_mixed_fraction_and_abbreviation():
    mention = parse_line("1 1/2 tsp salt")

    assert mention.quantity == "1 1/2"
    assert mention.unit == "tsp"
    assert mention.name == "salt"


def test_parse_line_without_unit():
    mention = parse_line("3 eggs, beaten")

    assert mention.quantity == "3"
    assert mention.unit is None
    assert mention.name == "eggs, beaten"
    assert mention.confidence == 0.4


def test_parse_line_package_size_goes_to_context():
    mention = parse_line("1 (14 oz) can diced tomatoes")

    assert mention.quantity == "1"
    assert mention.context == "14 oz"
    assert mention.unit == "can"
    assert mention.name == "diced tomatoes"


def test_parse_line_range_and_bullets():
    mention = parse_line("- 2-3 cloves garlic")

    assert mention.quantity == "2-3"
    assert mention.unit == "cloves"
    assert mention.name == "garlic"


def test_parse_line_leading_about_and_unit_period():
    mention = parse_line("about 2 tbsp. olive oil")

    assert mention.quantity == "2"
    assert mention.unit == "tbsp"
    assert mention.name == "olive oil"


def test_parse_line_does_not_read_large_as_liters():
    mention = parse_line("1 large onion")

    assert mention.unit is None
    assert mention.name == "large onion"


def test_parse_line_short_food_line_without_quantity():
    mention = parse_line("Salt and pepper to taste")

    assert mention is not None
    assert mention.quantity is None
    assert mention.confidence == 0.3


@pytest.mark.parametrize(
    ("line", "unit", "name"),
    [
        ("2 T butter", "T", "butter"),
        ("1 t salt", "t", "salt"),
        ("2 c flour", "c", "flour"),
        ("2 c. flour", "c", "flour"),
    ],
)
def test_parse_line_single_letter_units(line, unit, name):
    mention = parse_line(line)

    assert mention.unit == unit
    assert mention.name == name


def test_parse_line_single_letter_unit_needs_a_following_word():
    mention = parse_line("2 tomatoes")

    assert mention.unit is None
    assert mention.name == "tomatoes"


def test_parse_line_article_before_unit_is_the_quantity():
    mention = parse_line("a pinch of salt")

    assert mention.quantity == "a"
    assert mention.unit == "pinch"
    assert mention.name == "salt"
    assert mention.confidence == 0.5


def test_parse_line_article_without_unit_stays_in_name():
    mention = parse_line("an onion")

    assert mention.quantity is None
    assert mention.name == "an onion"


@pytest.mark.parametrize(
    "line",
    [
        "Step 1: Preheat oven to 350.",
        "Mix flour and salt.",
        "Preheat oven to 350°F",
        "Instructions:",
        "Serves 4",
        "Prep time: 10 minutes",
        "2 tablespoons",
        "!!!",
        "",
        "   ",
        "1. Whisk the eggs",
    ],
)
def test_parse_line_rejects_non_ingredients(line):
    assert parse_line(line) is None


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("2 cups flour", True),
        ("1 1/2 tsp salt", True),
        ("3 eggs, beaten", True),
        ("Salt and pepper to taste", True),
        ("Mix flour and salt.", False),
        ("Step 2", False),
        ("Serves 4", False),
        ("Bake at 350°F", False),
        ("This is a lovely recipe that my grandmother made.", False),
        (None, False),
    ],
)
def test_looks_like_ingredient_line(line, expected):
    assert looks_like_ingredient_line(line) is expected


def test_is_non_ingredient_name():
    assert is_non_ingredient_name("Step 1")
    assert is_non_ingredient_name("...")
    assert is_non_ingredient_name("stir")
    assert is_non_ingredient_name("Preheat oven")
    assert not is_non_ingredient_name("flour")
    assert not is_non_ingredient_name("heavy cream")


def test_parse_text_collects_mentions_and_coverage():
    mentions, coverage = parse_text("2 cups flour\n1 1/2 tsp salt\n3 eggs, beaten")

    assert [mention.name for mention in mentions] == ["flour", "salt", "eggs, beaten"]
    assert coverage == 1.0


def test_parse_text_empty():
    assert parse_text("") == ([], 0.0)
    assert parse_text(None) == ([], 0.0)


def _corpus():
    corpus = [
        "",
        " ",
        "\t\n",
        ".",
        "...",
        "!!!???",
        "-",
        "--",
        "•",
        "[x]",
        "()",
        "(",
        ")",
        "0",
        "00000",
        "1/0",
        "0/0 cups",
        "1/",
        "/2",
        "1 1/",
        "½",
        "¼¼¼",
        "1½ cups",
        "2-",
        "-2",
        "2 to",
        "to 3",
        "10**400",
        "1e309 cups flour",
        "9" * 200,
        "a" * 2000,
        "flour " * 300,
        "cups cups cups",
        "tsp",
        "T",
        "t",
        "g",
        "l",
        "°",
        "350°",
        "Step",
        "step 0",
        "STEP 999999",
        "1.",
        "1.5",
        "1.5.5",
        "Ingredients:",
        "ingredients",
        ":",
        "::::",
        "Serves",
        "null",
        "None",
        "undefined",
        "NaN",
        "inf",
        "-inf",
        "🍅 2 tomatoes",
        "２ cups flour",
        "日本酒 100ml",
        "crème fraîche",
        "1 (",
        "1 (14 oz",
        "1 ) can",
        "((((((",
        "\x00\x01\x02",
        "\\",
        "\"quoted\"",
        "{'json': true}",
        "<b>1 cup</b> sugar",
        "1 cup\r\nsugar",
        "about",
        "about about about",
        "approximately ~ 2",
        "of of of",
        ", , ,",
        "2 cups of",
        "2 cups of flour",
        "and",
        "or",
        "2 or 3 eggs",
        "2–3 eggs",
        "2 — 3 eggs",
        "a pinch",
        "pinch of salt",
        "salt",
        "pepper",
        "Salt & Pepper",
        "Juice of 1 lemon",
        "Zest of 2 limes",
        "1 can (400 g) chickpeas, drained",
        "1 lb. ground beef",
        "12 oz. pasta",
        "3 large eggs, at room temperature",
        "Optional: 1 tsp chili flakes",
        "For the sauce:",
        "1 cup heavy cream, whipped",
    ]
    corpus.extend(string.punctuation)
    corpus.extend(str(number) for number in range(10))
    return corpus


def test_parser_never_raises_on_arbitrary_strings():
    corpus = _corpus()
    assert len(corpus) >= 100

    for line in corpus:
        parse_line(line)
        looks_like_ingredient_line(line)
        is_non_ingredient_name(line)
    parse_text("\n".join(corpus))


@pytest.mark.parametrize("line", ["1 " * 2000, "1" * 2000, "1½ " * 1000])
def test_long_numeric_lines_parse_in_linear_time(line):
    started = time.perf_counter()
    looks_like_ingredient_line(line)
    parse_line(line)
    parse_text(line)
    segment(line)
    assert time.perf_counter() - started < 1.0
