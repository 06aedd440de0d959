"""Shared fixtures: deterministic stand-ins for the model provider."""

import json

import pytest

from recipe_lens.exceptions import LLMError
from recipe_lens.providers.base import BaseProvider

E2E_RECIPE = """Ingredients:
2 cups flour
1 1/2 tsp salt
3 eggs, beaten
Instructions:
Step 1: Preheat oven to 350.
Mix flour and salt.
"""


class ScriptedProvider(BaseProvider):
    """Returns queued responses in order; Exception instances are raised."""

    def __init__(self, responses, model="stub-model"):
        self.responses = list(responses)
        self.model = model
        self.calls = []

    def invoke(self, prompt, *, max_tokens=2000, temperature=0.2, model_override=None):
        self.calls.append(
            {
                "prompt": prompt,
                "max_tokens": max_tokens,
                "temperature": temperature,
                "model_override": model_override,
            }
        )
        if not self.responses:
            raise LLMError("No scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, dict):
            return json.dumps(response)
        return response


class FailingProvider(BaseProvider):
    model = "broken-model"

    def __init__(self):
        self.calls = 0

    def invoke(self, prompt, *, max_tokens=2000, temperature=0.2, model_override=None):
        self.calls += 1
        raise ConnectionError("upstream unavailable")


@pytest.fixture
def e2e_recipe():
    return E2E_RECIPE


@pytest.fixture
def scripted_provider():
    return ScriptedProvider


@pytest.fixture
def failing_provider():
    return FailingProvider()
