"""Tests for recovering JSON objects from model responses."""

import pytest

from recipe_lens.exceptions import ParseError
from recipe_lens.parsing.json_extract import extract_json_object


def test_plain_json():
    assert extract_json_object('{"ingredients": []}') == {"ingredients": []}


def test_fenced_json_block():
    text = 'Sure! Here it is:\n```json\n{"ingredients": [{"name": "flour"}]}\n```\nEnjoy.'

    assert extract_json_object(text) == {"ingredients": [{"name": "flour"}]}


def test_object_surrounded_by_prose():
    text = 'The result is {"confidence": 0.9, "nested": {"a": [1, 2]}} as requested.'

    assert extract_json_object(text) == {"confidence": 0.9, "nested": {"a": [1, 2]}}


def test_trailing_commas_are_tolerated():
    text = '{"ingredients": [{"name": "salt",},],}'

    assert extract_json_object(text) == {"ingredients": [{"name": "salt"}]}


def test_first_of_several_objects_wins():
    text = 'one {"a": 1} and two {"b": 2}'

    assert extract_json_object(text) == {"a": 1}


def test_braces_inside_strings_do_not_confuse_scan():
    text = 'note: {"name": "odd } name", "quantity": 1} trailing }'

    assert extract_json_object(text) == {"name": "odd } name", "quantity": 1}


@pytest.mark.parametrize("text", [None, "", "   ", "no json here", "[1, 2, 3]", "{not: valid}"])
def test_unrecoverable_responses_raise_parse_error(text):
    with pytest.raises(ParseError):
        extract_json_object(text)
