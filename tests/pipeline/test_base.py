"""Tests for the shared model-call helper."""

import pytest

from recipe_lens.exceptions import LLMError, ParseError
from recipe_lens.pipeline.base import invoke_json_with_fallback, require_ingredient_list


def test_primary_success(scripted_provider):
    provider = scripted_provider(['```json\n{"ingredients": [{"name": "salt"}]}\n```'])

    response = invoke_json_with_fallback(provider, "p", max_tokens=10, temperature=0.0)

    assert response.payload == {"ingredients": [{"name": "salt"}]}
    assert response.model == "stub-model"
    assert response.used_fallback_model is False


def test_non_library_errors_surface_as_llm_error(failing_provider):
    with pytest.raises(LLMError, match="ConnectionError"):
        invoke_json_with_fallback(failing_provider, "p", max_tokens=10, temperature=0.0)


def test_rejected_payload_retried_once_on_fallback_model(scripted_provider):
    provider = scripted_provider([{"ingredients": []}, {"ingredients": [{"name": "salt"}]}])

    response = invoke_json_with_fallback(
        provider,
        "p",
        max_tokens=10,
        temperature=0.0,
        fallback_model="backup/model",
        validate=require_ingredient_list,
    )

    assert response.used_fallback_model is True
    assert response.model == "backup/model"
    assert "ingredients" in response.primary_error
    assert [call["model_override"] for call in provider.calls] == [None, "backup/model"]


def test_both_attempts_failing_raises_last_error(scripted_provider):
    provider = scripted_provider(["nope", "still nope"])

    with pytest.raises(ParseError):
        invoke_json_with_fallback(provider, "p", max_tokens=10, temperature=0.0, fallback_model="backup/model")
    assert len(provider.calls) == 2
