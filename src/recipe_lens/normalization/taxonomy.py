"""Keyword taxonomy: categories, subcategories, allergens and name keys."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable
from functools import lru_cache

from recipe_lens.normalization.vocabulary import (
    ALLERGEN_EXCLUSIONS,
    ALLERGEN_KEYWORDS,
    CATEGORY_TAXONOMY,
    NAME_DESCRIPTORS,
    PREPARATION_ADVERBS,
    PREPARATION_WORDS,
    SUBCATEGORY_KEYWORDS,
)

_PREPARATION_RE = re.compile(
    rf"\b(?:(?:{'|'.join(PREPARATION_ADVERBS)})\s+)?({'|'.join(PREPARATION_WORDS)})\b",
    re.IGNORECASE,
)
_DESCRIPTOR_RE = re.compile(rf"\b(?:{'|'.join(NAME_DESCRIPTORS)})\b")


@lru_cache(maxsize=512)
def _keyword_pattern(keyword: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(keyword)}(?:s|es)?\b")


def _contains(text: str, keyword: str) -> bool:
    return _keyword_pattern(keyword).search(text) is not None


def normalize_text(value: str) -> str:
    text = unicodedata.normalize("NFKC", value).lower().strip()
    text = re.sub(r"[^\w\s'-]", " ", text)
    text = re.sub(r"\s+", " ", text)
    return text.strip()


def clean_name(name: str | None) -> str:
    """Lowercase a display name and strip stray punctuation around it."""
    if not name:
        return ""
    text = unicodedata.normalize("NFKC", str(name)).strip().lower()
    text = re.sub(r"\s+", " ", text)
    text = re.sub(r"\(\s*\)", "", text)
    return text.strip(" ,;:-.*•").strip()


def name_key(name: str | None) -> str:
    """Dedup key for an ingredient name: "Fresh Onions" and "onion" collide."""
    text = normalize_text(name or "")
    text = _DESCRIPTOR_RE.sub(" ", text)
    words = [_singular(word) for word in text.split()]
    return " ".join(word for word in words if word)


def _singular(word: str) -> str:
    if len(word) <= 3 or word.endswith("ss"):
        return word
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith(("oes", "ches", "shes", "xes")):
        return word[:-2]
    if word.endswith("s"):
        return word[:-1]
    return word


def extract_preparation(name: str) -> tuple[str, str | None]:
    """Move an embedded preparation word out of a name.

    "eggs, beaten" -> ("eggs", "beaten"); "finely chopped onion" ->
    ("onion", "finely chopped").
    """
    if not name:
        return name, None
    match = _PREPARATION_RE.search(name)
    if not match:
        return name, None

    preparation = match.group(0).lower().strip()
    remainder = (name[: match.start()] + " " + name[match.end():]).strip()
    remainder = re.sub(r"\s*,\s*(,\s*)*", ", ", remainder)
    remainder = re.sub(r"\s+", " ", remainder).strip(" ,;:-")
    if not remainder:
        return name, None
    return remainder, preparation


def categorize(name: str | None) -> str:
    """Resolve a category by the longest keyword found in the name."""
    text = normalize_text(name or "")
    if not text:
        return "other"

    best_category = "other"
    best_length = 0
    for category, (keywords, _) in CATEGORY_TAXONOMY.items():
        for keyword in keywords:
            if len(keyword) > best_length and _contains(text, keyword):
                best_category = category
                best_length = len(keyword)
    return best_category


def subcategory(name: str | None, category: str, suggested: str | None = None) -> str | None:
    """Pick a subcategory of ``category`` for the name.

    Falls back to ``suggested`` when it is a valid subcategory of the category.
    """
    if category not in CATEGORY_TAXONOMY:
        return None
    _, subcategories = CATEGORY_TAXONOMY[category]
    text = normalize_text(name or "")

    best: str | None = None
    best_length = 0
    for candidate in subcategories:
        for keyword in SUBCATEGORY_KEYWORDS.get(candidate, ()):
            if len(keyword) > best_length and _contains(text, keyword):
                best = candidate
                best_length = len(keyword)
    if best:
        return best

    if suggested:
        normalized = normalize_text(suggested).replace(" ", "_")
        if normalized in subcategories:
            return normalized
    return None


def detect_allergens(name: str | None, existing: Iterable[str] = ()) -> list[str]:
    """Union of ``existing`` allergens and those detected from the name.

    Detection only adds tags; nothing in ``existing`` is ever removed.
    """
    allergens: list[str] = []
    for tag in existing or ():
        value = str(tag).strip().lower()
        if value and value not in allergens:
            allergens.append(value)

    text = normalize_text(name or "")
    if not text:
        return allergens

    for allergen, keywords in ALLERGEN_KEYWORDS.items():
        if allergen in allergens:
            continue
        candidate = text
        for phrase in ALLERGEN_EXCLUSIONS.get(allergen, ()):
            candidate = candidate.replace(phrase, " ")
        if any(_contains(candidate, keyword) for keyword in keywords):
            allergens.append(allergen)
    return allergens

