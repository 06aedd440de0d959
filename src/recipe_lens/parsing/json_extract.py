"""Pull a JSON object out of a model response that may carry extra text."""

from __future__ import annotations

import json
import re
from typing import Any

from recipe_lens.exceptions import ParseError

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def extract_json_object(text: str | None) -> dict[str, Any]:
    """Return the first usable JSON object found in ``text``.

    Tries, in order: fenced code blocks, the outermost ``{...}`` span, every
    balanced ``{...}`` span, and the same spans with trailing commas removed.

    Raises:
        ParseError: No JSON object could be recovered.
    """
    if not text or not str(text).strip():
        raise ParseError("Empty model response")
    raw = str(text).strip()

    candidates: list[str] = []
    for match in _FENCE_RE.finditer(raw):
        candidates.append(match.group(1).strip())
    candidates.append(raw)

    first = raw.find("{")
    last = raw.rfind("}")
    if first != -1 and last > first:
        candidates.append(raw[first : last + 1])
    candidates.extend(_balanced_objects(raw))

    for candidate in candidates:
        parsed = _loads(candidate)
        if parsed is None:
            parsed = _loads(_TRAILING_COMMA_RE.sub(r"\1", candidate))
        if isinstance(parsed, dict):
            return parsed

    raise ParseError(f"No JSON object in model response: {raw[:120]!r}")


def _loads(candidate: str) -> Any:
    try:
        return json.loads(candidate)
    except (json.JSONDecodeError, ValueError):
        return None


def _balanced_objects(text: str) -> list[str]:
    """Top-level ``{...}`` spans found by brace-depth scanning, strings aware."""
    spans: list[str] = []
    depth = 0
    start = -1
    in_string = False
    escaped = False
    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"' and depth > 0:
            in_string = True
        elif char == "{":
            if depth == 0:
                start = index
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                spans.append(text[start : index + 1])
    return spans
