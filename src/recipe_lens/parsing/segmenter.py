"""Isolate the ingredients section of free-form recipe text."""

from __future__ import annotations

import re

from recipe_lens.normalization.vocabulary import (
    INSTRUCTION_MARKERS,
    METADATA_MARKERS,
    SECTION_MARKERS,
    STEP_VERBS,
)
from recipe_lens.parsing.heuristic import looks_like_ingredient_line

_SECTION_RE = re.compile(
    rf"^[#*\s]*(?:{'|'.join(re.escape(marker) for marker in SECTION_MARKERS)})\b[^:\-–]{{0,30}}?\s*(?:[:\-–]\s*(?P<rest>.*))?$",
    re.IGNORECASE,
)
_INSTRUCTION_RE = re.compile(
    rf"^[#*\s]*(?:{'|'.join(re.escape(marker) for marker in INSTRUCTION_MARKERS)})\s*(?:[:\-–].*)?$",
    re.IGNORECASE,
)
_METADATA_RE = re.compile(
    rf"^[#*\s]*(?:{'|'.join(re.escape(marker) for marker in METADATA_MARKERS)})\b\s*(?::|\d|$)",
    re.IGNORECASE,
)
_STEP_RES = (
    re.compile(r"^step\s*\d+", re.IGNORECASE),
    re.compile(r"^\d+\.(?!\d)"),
    re.compile(rf"^(?:{'|'.join(STEP_VERBS)})\b", re.IGNORECASE),
)


def _is_step(line: str) -> bool:
    return any(pattern.search(line) for pattern in _STEP_RES)


def _is_metadata(line: str) -> bool:
    return _METADATA_RE.search(line) is not None


def _is_section_end(line: str) -> bool:
    return _INSTRUCTION_RE.search(line) is not None or _is_metadata(line) or _is_step(line)


def _keep(line: str) -> bool:
    return not (_is_step(line) or _is_metadata(line) or _INSTRUCTION_RE.search(line))


def segment(full_text: str | None) -> str:
    """Return only the ingredient lines of ``full_text``.

    Looks for an explicit section marker first, then for the first line that
    looks like an ingredient. Without either, returns the whole text minus
    step, instruction and metadata lines.
    """
    if not full_text:
        return ""
    lines = [line.strip() for line in str(full_text).splitlines() if line.strip()]
    if not lines:
        return ""

    start: int | None = None
    inline: str | None = None
    for index, line in enumerate(lines):
        match = _SECTION_RE.match(line)
        if match:
            start = index + 1
            rest = (match.group("rest") or "").strip()
            inline = rest or None
            break

    if start is None:
        for index, line in enumerate(lines):
            if looks_like_ingredient_line(line):
                start = index
                break

    if start is None:
        return "\n".join(line for line in lines if _keep(line))

    end = len(lines)
    for index in range(start, len(lines)):
        if _is_section_end(lines[index]):
            end = index
            break

    section = ([inline] if inline else []) + lines[start:end]
    return "\n".join(line for line in section if _keep(line))
