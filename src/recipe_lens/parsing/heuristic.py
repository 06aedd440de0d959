"""Regex-based ingredient line parser used when no model output is usable."""

from __future__ import annotations

import re

from recipe_lens.normalization.units import replace_unicode_fractions
from recipe_lens.normalization.vocabulary import (
    FOOD_KEYWORDS,
    INSTRUCTION_VERBS,
    LINE_UNIT_TOKENS,
    METADATA_MARKERS,
)
from recipe_lens.schema import RawIngredientMention

_BULLET_RE = re.compile(r"^\s*(?:[-*•●◦▪·+>]+|\[\s?[xX]?\s?\]|\d+[.)]\s+|\(\d+\)\s*)\s*")
_LABEL_RE = re.compile(
    r"^(?:ingredients?|ingredient list|you will need|what you need|shopping list)\s*[:\-–]\s*",
    re.IGNORECASE,
)
_LEAD_WORDS_RE = re.compile(r"^(?:about|approximately|approx\.?|roughly|around|~)\s+", re.IGNORECASE)
_CONNECTIVE_RE = re.compile(r"^(?:[\s,.;:\-–)]|of\s+|about\s+|approximately\s+)+", re.IGNORECASE)

_NUMBER = r"\d+\s+\d+/\d+|\d+/\d+|\d*\.\d+|\d+"
_QUANTITY_RE = re.compile(rf"^(?P<qty>(?:{_NUMBER})(?:\s*(?:-|–|to)\s*(?:{_NUMBER}))?)(?![\d/])")
_PAREN_RE = re.compile(r"^\s*\(([^)]*)\)")

_UNIT_PATTERNS = tuple(
    (
        re.compile(rf"^{re.escape(token)}(?=\s|$)", re.IGNORECASE)
        if len(token) == 1
        else re.compile(rf"^{re.escape(token)}\.?(?![A-Za-z])", re.IGNORECASE),
        token,
    )
    for token in LINE_UNIT_TOKENS
) + (
    # Case carries the meaning: "T" is a tablespoon, "t" a teaspoon.
    (re.compile(r"^T\.?(?=\s)"), "T"),
    (re.compile(r"^t\.?(?=\s)"), "t"),
    (re.compile(r"^[cC]\.?(?=\s)"), "c"),
)
_ARTICLE_RE = re.compile(r"^(a|an|one)\s+", re.IGNORECASE)

_UNIT_WORDS = "|".join(re.escape(token) for token in LINE_UNIT_TOKENS if len(token) > 2 and token != "can")
# Bounded gap between the number and the unit keeps the search linear on long numeric lines.
_QUANTITY_UNIT_RE = re.compile(rf"\d[\d/.\s-]{{0,20}}(?:{_UNIT_WORDS}|g|kg|ml|l|oz|lb)\b", re.IGNORECASE)
_UNIT_TOKEN_RE = re.compile(rf"\b(?:{_UNIT_WORDS})\b", re.IGNORECASE)
_FOOD_RE = re.compile(rf"\b(?:{'|'.join(re.escape(word) for word in FOOD_KEYWORDS)})(?:s|es)?\b", re.IGNORECASE)
_FIRST_WORD_RE = re.compile(r"^[^\w]*([a-zé]+)", re.IGNORECASE)
_SENTENCE_RE = re.compile(r"[.!?](?:\s+\S|$)")

_BLOCKLIST = (
    re.compile(r"^step\s*\d+", re.IGNORECASE),
    re.compile(r"^\d+\.(?!\d)"),
    re.compile(r"^(?:instructions?|directions?|method|steps?|preparation|procedure|notes?|tips?)\b\s*:?", re.IGNORECASE),
    re.compile(rf"^(?:{'|'.join(re.escape(marker) for marker in METADATA_MARKERS)})\b", re.IGNORECASE),
    re.compile(r"^(?:recipe|description|title|source|author|category|cuisine)\s*:", re.IGNORECASE),
    re.compile(r"\d\s*°|\bdegrees?\b", re.IGNORECASE),
    re.compile(r"^\d+\s*(?:minutes?|mins?|hours?|hrs?|seconds?|secs?)\b", re.IGNORECASE),
    re.compile(r":\s*$"),
    re.compile(r"^[\W_]+$"),
)

_MAX_SHORT_LINE_WORDS = 5


def clean_line(line) -> str:
    """Strip bullets, numbering and "Ingredients:" labels from a line."""
    if line is None:
        return ""
    text = replace_unicode_fractions(str(line)).strip()
    text = _BULLET_RE.sub("", text, count=1).strip()
    text = _LABEL_RE.sub("", text, count=1).strip()
    return text


def is_blocklisted(line: str) -> bool:
    """True for step markers, metadata labels, temperatures and headers."""
    text = (line or "").strip()
    return any(pattern.search(text) for pattern in _BLOCKLIST)


def starts_with_instruction(line: str) -> bool:
    match = _FIRST_WORD_RE.match(line or "")
    return bool(match) and match.group(1).lower() in INSTRUCTION_VERBS


def is_non_ingredient_name(name) -> bool:
    """True when a model-supplied name is a step, punctuation or a bare verb."""
    text = str(name or "").strip()
    if not text or not re.search(r"[A-Za-z]", text):
        return True
    if is_blocklisted(text):
        return True
    lowered = text.lower().strip(" .!:")
    if lowered in INSTRUCTION_VERBS:
        return True
    return starts_with_instruction(text) and not _FOOD_RE.search(text)


def looks_like_ingredient_line(line) -> bool:
    """Recall-oriented test for "this line names an ingredient"."""
    if line is None:
        return False
    text = clean_line(line)
    if not text or is_blocklisted(text) or starts_with_instruction(text):
        return False

    if _QUANTITY_UNIT_RE.search(text):
        return True

    has_food = _FOOD_RE.search(text) is not None
    if not has_food:
        return False
    if re.search(r"\d", text):
        return True
    if _UNIT_TOKEN_RE.search(text):
        return True
    return len(text.split()) <= _MAX_SHORT_LINE_WORDS and not _SENTENCE_RE.search(text)


def _match_unit(text: str) -> tuple[str, int] | None:
    for pattern, token in _UNIT_PATTERNS:
        match = pattern.match(text)
        if match:
            return token, match.end()
    return None


def parse_line(line) -> RawIngredientMention | None:
    """Parse one line into a mention; None when it is not an ingredient."""
    if line is None:
        return None
    raw_text = str(line).strip()
    text = clean_line(raw_text)
    if not text or is_blocklisted(text) or starts_with_instruction(text):
        return None

    remaining = _LEAD_WORDS_RE.sub("", text, count=1)
    quantity: str | None = None
    unit: str | None = None
    context = ""

    match = _QUANTITY_RE.match(remaining)
    if match:
        quantity = re.sub(r"\s+", " ", match.group("qty")).strip()
        remaining = remaining[match.end():].lstrip()
    else:
        # "a pinch of salt": the article only counts as a quantity when a unit follows it.
        article = _ARTICLE_RE.match(remaining)
        if article and _match_unit(remaining[article.end():]):
            quantity = article.group(1).lower()
            remaining = remaining[article.end():]

    paren = _PAREN_RE.match(remaining)
    if paren and quantity:
        context = paren.group(1).strip()
        remaining = remaining[paren.end():].lstrip()

    unit_match = _match_unit(remaining)
    if unit_match:
        unit, end = unit_match
        remaining = remaining[end:]

    name = _CONNECTIVE_RE.sub("", remaining).strip().rstrip(".;")
    if not name:
        return None

    if quantity is None and unit is None:
        if not looks_like_ingredient_line(name):
            return None
        confidence = 0.3
    else:
        confidence = 0.3 + (0.1 if quantity else 0.0) + (0.1 if unit else 0.0)

    return RawIngredientMention(
        name=name,
        quantity=quantity,
        unit=unit,
        context=context,
        confidence=round(confidence, 2),
        raw_text=raw_text,
    )


def parse_text(text: str | None) -> tuple[list[RawIngredientMention], float]:
    """Parse every line of ``text``; returns mentions and line coverage."""
    mentions: list[RawIngredientMention] = []
    candidates = 0
    lines = [line for line in (text or "").splitlines() if line.strip()]
    for line in lines:
        looks = looks_like_ingredient_line(line)
        if looks:
            candidates += 1
        mention = parse_line(line)
        if mention:
            mentions.append(mention)
            if not looks:
                candidates += 1

    denominator = candidates or len(lines) or 1
    return mentions, min(1.0, len(mentions) / denominator)
