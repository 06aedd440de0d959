"""Stage abstraction and the shared LLM-with-fallback-model call."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from recipe_lens.exceptions import LLMError, ParseError, RecipeLensError
from recipe_lens.parsing.json_extract import extract_json_object
from recipe_lens.providers.base import BaseProvider

logger = logging.getLogger(__name__)

In = TypeVar("In")
Out = TypeVar("Out")


@dataclass(frozen=True)
class Stage(Generic[In, Out]):
    """A named pipeline step paired with its deterministic substitute."""

    name: str
    run: Callable[[In], Out]
    fallback: Callable[[In, Exception], Out]


@dataclass(frozen=True)
class LLMResponse:
    payload: dict[str, Any]
    model: str | None
    used_fallback_model: bool
    primary_error: str | None = None


def invoke_json_with_fallback(
    provider: BaseProvider,
    prompt: str,
    *,
    max_tokens: int,
    temperature: float,
    fallback_model: str | None = None,
    validate: Callable[[dict[str, Any]], None] | None = None,
) -> LLMResponse:
    """Call the provider and parse a JSON object out of its response.

    A failed call, an unparseable response or a payload rejected by
    ``validate`` is retried once against ``fallback_model`` when one is set.

    Raises:
        RecipeLensError: Both attempts failed; the last error is raised.
            Provider exceptions outside the hierarchy surface as LLMError.
    """
    try:
        payload = _call(provider, prompt, max_tokens, temperature, None, validate)
        return LLMResponse(payload=payload, model=provider.model, used_fallback_model=False)
    except Exception as exc:
        if not fallback_model:
            raise
        logger.warning("Primary model failed (%s); retrying with %s", exc, fallback_model)
        primary_error = str(exc)

    payload = _call(provider, prompt, max_tokens, temperature, fallback_model, validate)
    return LLMResponse(
        payload=payload,
        model=fallback_model,
        used_fallback_model=True,
        primary_error=primary_error,
    )


def _call(
    provider: BaseProvider,
    prompt: str,
    max_tokens: int,
    temperature: float,
    model_override: str | None,
    validate: Callable[[dict[str, Any]], None] | None,
) -> dict[str, Any]:
    try:
        text = provider.invoke(
            prompt,
            max_tokens=max_tokens,
            temperature=temperature,
            model_override=model_override,
        )
    except RecipeLensError:
        raise
    except Exception as exc:
        raise LLMError(f"{type(exc).__name__}: {exc}") from exc
    payload = extract_json_object(text)
    if validate is not None:
        validate(payload)
    return payload


def require_ingredient_list(payload: dict[str, Any]) -> None:
    """Reject payloads without a non-empty ``ingredients`` list."""
    ingredients = payload.get("ingredients")
    if not isinstance(ingredients, list) or not ingredients:
        raise ParseError("Response has no ingredients list")


def mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))
