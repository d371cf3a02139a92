"""
Tests for JSON repair functionality
"""
import pytest

from utils.parsing.json import extract_json_block, repair_and_parse_json


@pytest.mark.parametrize(
    "name, text",
    [
        ("Valid JSON", '{"tasks": [{"id": "t1", "title": "Reply"}]}'),
        ("Trailing comma", '{"tasks": [{"id": "t1", "title": "Reply",}]}'),
        ("Single-line comment", '{"tasks": [{"id": "t1", // comment\n"title": "Reply"}]}'),
        ("Multi-line comment", '{"tasks": [{"id": "t1", /* comment */ "title": "Reply"}]}'),
        ("Markdown code block", '```json\n{"tasks": [{"id": "t1", "title": "Reply"}]}\n```'),
        ("Prose around object", 'Here is the analysis:\n{"tasks": [{"id": "t1", "title": "Reply"}]}\nHope it helps.'),
        ("Single quotes", "{'tasks': [{'id': 't1', 'title': 'Reply'}]}"),
    ],
)
def test_repairs_common_llm_mistakes(name, text):
    result = repair_and_parse_json(text)
    assert result["tasks"][0]["id"] == "t1", name


def test_extract_json_block_strips_fences():
    assert extract_json_block('```\n{"a": 1}\n```') == '{"a": 1}'


def test_top_level_array_is_rejected():
    with pytest.raises(ValueError):
        repair_and_parse_json("[1, 2, 3]")


def test_empty_response_is_rejected():
    with pytest.raises(ValueError):
        repair_and_parse_json("")
