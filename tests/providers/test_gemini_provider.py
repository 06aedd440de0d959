"""Tests for the Gemini provider."""

from types import SimpleNamespace

import pytest
from google.genai import errors

from recipe_lens.exceptions import AuthenticationError, LLMError, RateLimitError
from recipe_lens.providers.gemini import DEFAULT_GEMINI_MODEL, GeminiProvider


def test_requires_api_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    with pytest.raises(AuthenticationError):
        GeminiProvider()


def test_invoke_requests_json_output(mocker, monkeypatch):
    monkeypatch.delenv("GEMINI_MODEL", raising=False)
    client_cls = mocker.patch("recipe_lens.providers.gemini.genai.Client")
    generate = client_cls.return_value.models.generate_content
    generate.return_value = SimpleNamespace(text='{"ingredients": []}')

    provider = GeminiProvider(api_key="test-key")
    result = provider.invoke("prompt text", max_tokens=500, temperature=0.1)

    assert result == '{"ingredients": []}'
    client_cls.assert_called_once_with(api_key="test-key")
    kwargs = generate.call_args.kwargs
    assert kwargs["model"] == DEFAULT_GEMINI_MODEL
    assert kwargs["contents"] == "prompt text"
    assert kwargs["config"].response_mime_type == "application/json"
    assert kwargs["config"].max_output_tokens == 500


def test_invoke_uses_model_override(mocker):
    client_cls = mocker.patch("recipe_lens.providers.gemini.genai.Client")
    generate = client_cls.return_value.models.generate_content
    generate.return_value = SimpleNamespace(text="{}")

    GeminiProvider(api_key="test-key", model="gemini-a").invoke("x", model_override="gemini-b")

    assert generate.call_args.kwargs["model"] == "gemini-b"


def test_empty_response_raises(mocker):
    client_cls = mocker.patch("recipe_lens.providers.gemini.genai.Client")
    client_cls.return_value.models.generate_content.return_value = SimpleNamespace(text="")

    with pytest.raises(LLMError):
        GeminiProvider(api_key="test-key").invoke("x")


def test_unexpected_failure_wrapped(mocker):
    client_cls = mocker.patch("recipe_lens.providers.gemini.genai.Client")
    client_cls.return_value.models.generate_content.side_effect = RuntimeError("socket closed")

    with pytest.raises(LLMError, match="socket closed"):
        GeminiProvider(api_key="test-key").invoke("x")


def test_quota_error_maps_to_rate_limit(mocker):
    client_cls = mocker.patch("recipe_lens.providers.gemini.genai.Client")
    client_cls.return_value.models.generate_content.side_effect = errors.ClientError(
        429,
        {"error": {"code": 429, "message": "Quota exceeded", "status": "RESOURCE_EXHAUSTED"}},
    )

    with pytest.raises(RateLimitError):
        GeminiProvider(api_key="test-key").invoke("x")
