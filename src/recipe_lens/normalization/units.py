"""Quantity and unit normalization."""

from __future__ import annotations

import math
import re

from recipe_lens.normalization.vocabulary import (
    CANONICAL_UNITS,
    INFORMAL_QUANTITIES,
    NUMBER_WORDS,
    UNICODE_FRACTIONS,
    UNIT_SYNONYMS,
)

_NUM = r"\d*\.\d+|\d+"
_FRACTION_CHARS = "".join(UNICODE_FRACTIONS)

_MIXED_RE = re.compile(r"^(\d+)\s+(\d+)\s*/\s*(\d+)$")
_SIMPLE_RE = re.compile(r"^(\d+)\s*/\s*(\d+)$")
_DECIMAL_RE = re.compile(rf"^({_NUM})$")
_RANGE_PART = rf"\d+\s+\d+\s*/\s*\d+|\d+\s*/\s*\d+|{_NUM}"
_RANGE_RE = re.compile(rf"^({_RANGE_PART})\s*(?:-|–|—|to|or)\s*({_RANGE_PART})$")
_QUANTITY = rf"(?:{_RANGE_PART})(?:\s*(?:-|–|—|to)\s*(?:{_RANGE_PART}))?"
_LEADING_RE = re.compile(rf"^(?:about|approximately|approx\.?|roughly|around|~)?\s*({_QUANTITY})(?![\d/])")
_UNICODE_RE = re.compile(rf"(?<!\d)(\d+)?\s*([{_FRACTION_CHARS}])")

# Exact lookup: lowercased spelling -> canonical unit. Case-sensitive "T"/"t"
# are resolved before lowercasing.
_EXACT_UNITS: dict[str, str] = {}
for _canonical, _spellings in UNIT_SYNONYMS.items():
    for _spelling in _spellings:
        if _spelling in ("T", "t"):
            continue
        _EXACT_UNITS.setdefault(_spelling.lower(), _canonical)

# Containment lookup, longest spelling first so "fluid ounces" wins over
# "ounces" and "pinch" wins over "inch". One- and two-letter spellings are too
# ambiguous to search for inside a longer token.
_CONTAINED_UNITS = tuple(
    sorted(
        (
            (re.compile(rf"\b{re.escape(spelling.lower())}(?:s|es|ful|fuls)?\b"), canonical)
            for canonical, spellings in UNIT_SYNONYMS.items()
            for spelling in spellings
            if len(spelling) > 2
        ),
        key=lambda item: len(item[0].pattern),
        reverse=True,
    )
)


def replace_unicode_fractions(text: str) -> str:
    """Rewrite vulgar fractions as decimals: "1½" -> "1.5", "¼" -> "0.25"."""

    def _swap(match: re.Match) -> str:
        whole = int(match.group(1)) if match.group(1) else 0
        value = whole + UNICODE_FRACTIONS[match.group(2)]
        return _format_number(value)

    return _UNICODE_RE.sub(_swap, text)


def normalize_quantity(raw) -> float | None:
    """Convert a quantity expression into a non-negative decimal.

    Numbers are rounded to 2 decimals. Strings are tried as a mixed fraction,
    a simple fraction, a range (mean), a decimal, a leading number, a number
    word and finally an informal amount ("pinch"). Anything else is None.
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, (int, float)):
        try:
            return _finite(round(float(raw), 2))
        except OverflowError:
            return None

    if not isinstance(raw, str):
        return None

    text = replace_unicode_fractions(raw).strip().lower()
    if not text:
        return None

    value = _parse_numeric(text)
    if value is None:
        match = _LEADING_RE.match(text)
        if match:
            value = _parse_numeric(match.group(1).strip())

    if value is None:
        value = _parse_words(text)

    if value is None:
        return None
    return _finite(round(value, 3))


def normalize_unit(raw) -> str | None:
    """Map a unit spelling onto the canonical unit vocabulary, else None."""
    if not isinstance(raw, str):
        return None

    token = raw.strip().rstrip(".")
    if not token:
        return None
    if token == "T":
        return "tablespoons"
    if token == "t":
        return "teaspoons"

    lowered = re.sub(r"\s+", " ", token.lower())
    if lowered in CANONICAL_UNITS:
        return lowered
    exact = _EXACT_UNITS.get(lowered)
    if exact:
        return exact

    for pattern, canonical in _CONTAINED_UNITS:
        if pattern.search(lowered):
            return canonical
    return None


def split_quantity_unit(raw: str) -> tuple[float | None, str | None]:
    """Split a quantity string with a glued unit: "2cups" -> (2.0, "cups")."""
    if not isinstance(raw, str):
        return None, None
    text = replace_unicode_fractions(raw).strip()
    match = re.match(rf"^\s*({_QUANTITY})\s*([A-Za-z][A-Za-z. ]*)$", text)
    if not match:
        return normalize_quantity(text), None
    return normalize_quantity(match.group(1)), normalize_unit(match.group(2))


def _parse_numeric(text: str) -> float | None:
    match = _MIXED_RE.match(text)
    if match:
        whole, numerator, denominator = (int(group) for group in match.groups())
        if denominator == 0:
            return None
        return whole + numerator / denominator

    match = _SIMPLE_RE.match(text)
    if match:
        numerator, denominator = (int(group) for group in match.groups())
        if denominator == 0:
            return None
        return numerator / denominator

    match = _RANGE_RE.match(text)
    if match:
        low = _parse_numeric(match.group(1).strip())
        high = _parse_numeric(match.group(2).strip())
        if low is None or high is None:
            return None
        return (low + high) / 2

    match = _DECIMAL_RE.match(text)
    if match:
        try:
            return float(match.group(1))
        except ValueError:
            return None
    return None


def _parse_words(text: str) -> float | None:
    words = re.findall(r"[a-z]+", text)
    if not words:
        return None
    if all(word in NUMBER_WORDS for word in words):
        # "a dozen" -> 12, "half a dozen" -> 6
        return float(math.prod(NUMBER_WORDS[word] for word in words))
    for word in words:
        singular = word[:-2] if word.endswith("es") and word[:-2] in INFORMAL_QUANTITIES else word
        singular = singular[:-1] if singular.endswith("s") and singular[:-1] in INFORMAL_QUANTITIES else singular
        if singular in INFORMAL_QUANTITIES:
            return float(INFORMAL_QUANTITIES[singular])
    if words[0] in NUMBER_WORDS:
        return float(NUMBER_WORDS[words[0]])
    return None


def _finite(value: float) -> float | None:
    if math.isnan(value) or math.isinf(value) or value < 0:
        return None
    return value


def _format_number(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return text or "0"
