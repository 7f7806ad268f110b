import pytest

from app.core.errors import MalformedAIResponse
from app.core.json_extraction import extract_json_object, find_json_span


def test_extracts_object_wrapped_in_prose_and_fences():
    reply = 'Sure! Here you go:\n```json\n{"option1": "A", "option2": "B"}\n```\nEnjoy.'

    assert extract_json_object(reply) == {"option1": "A", "option2": "B"}


def test_nested_objects_survive_greedy_span():
    reply = '{"questions": [{"id": "1", "question": "Who?"}, {"id": "2", "question": "Why?"}]}'

    assert extract_json_object(reply)["questions"][1] == {"id": "2", "question": "Why?"}


def test_span_runs_from_first_open_to_last_close_brace():
    assert find_json_span("a {x} b {y} c") == "{x} b {y}"


@pytest.mark.parametrize("reply", ["", "Plain prose with no braces at all.", "only an opening {"])
def test_missing_span_is_malformed(reply):
    with pytest.raises(MalformedAIResponse):
        extract_json_object(reply)


def test_two_objects_in_one_reply_are_malformed():
    with pytest.raises(MalformedAIResponse):
        extract_json_object('{"option1": "A"} and also {"option2": "B"}')


def test_excessive_nesting_is_malformed():
    reply = '{"a": ' + "[" * 100000 + "]" * 100000 + "}"

    with pytest.raises(MalformedAIResponse):
        extract_json_object(reply)
