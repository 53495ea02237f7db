"""Tests for model-output normalization."""

import pytest

from basedlink.text_utils import (
    EMPTY_RESULT_FALLBACK,
    clip_text,
    normalize_list_response,
    normalize_whitespace,
    strip_code_fences,
)


def test_fenced_json_array():
    text = '```json\n["Topic one", "Topic two"]\n```'
    assert normalize_list_response(text) == ["Topic one", "Topic two"]


def test_array_after_intro_text():
    text = 'Here are your topics:\n["AI di kantor", "Belajar coding"]\nSemoga membantu!'
    assert normalize_list_response(text) == ["AI di kantor", "Belajar coding"]


def test_array_items_are_stringified_and_empties_dropped():
    text = '["  first  ", 42, {"a": 1}, "", null]'
    assert normalize_list_response(text) == ["first", "42", '{"a": 1}']


def test_json_object_is_not_accepted_as_list():
    result = normalize_list_response('{"topics": "nope"}')
    assert result == ['{"topics": "nope"}']


def test_bare_newlines_inside_strings_are_repaired():
    text = '["Line one\nline two", "Second item"]'
    assert normalize_list_response(text) == ["Line one\nline two", "Second item"]


def test_quoted_split_when_brackets_missing():
    text = '"First hook here", "Second hook here", "Third hook here"'
    assert normalize_list_response(text) == ["First hook here", "Second hook here", "Third hook here"]


def test_numbered_list():
    text = "1. First idea here\n2. Second idea here\n3) Third idea here"
    assert normalize_list_response(text) == ["First idea here", "Second idea here", "Third idea here"]


def test_bullets_and_option_labels():
    text = "Option 1: Alpha post text\nOption 2: Beta post text"
    assert normalize_list_response(text) == ["Alpha post text", "Beta post text"]

    text = "- Satu dua tiga\n* Empat lima enam\n• Tujuh delapan"
    assert normalize_list_response(text) == ["Satu dua tiga", "Empat lima enam", "Tujuh delapan"]


def test_preamble_items_are_dropped():
    text = "Here are some ideas:\n1. First idea here\n2. Second idea here"
    assert normalize_list_response(text) == ["First idea here", "Second idea here"]

    text = "Berikut adalah ide:\n- Ide pertama yang bagus\n- Ide kedua yang bagus"
    assert normalize_list_response(text) == ["Ide pertama yang bagus", "Ide kedua yang bagus"]


@pytest.mark.parametrize(
    "text, expected",
    [
        ('["a", "b", "c"]', ["a", "b", "c"]),
        ("Here are some options:\n1. First option text\n2. Second option text", ["First option text", "Second option text"]),
        ("Sure! Here is a LinkedIn post for you:\n1. First item\n2. Second item", ["First item", "Second item"]),
        ("Sure! Happy to help\n- Alpha bullet\n- Beta bullet", ["Alpha bullet", "Beta bullet"]),
        ("Your LinkedIn post drafts\n- Alpha bullet\n- Beta bullet", ["Alpha bullet", "Beta bullet"]),
        ("Variation 1: Alpha text\nVariation 2: Beta text", ["Alpha text", "Beta text"]),
        ("variation 1) Alpha text\nVARIATION 2. Beta text", ["Alpha text", "Beta text"]),
    ],
)
def test_list_marker_and_preamble_rules(text, expected):
    assert normalize_list_response(text) == expected


def test_blank_line_paragraphs():
    text = "First paragraph is long enough to count.\n\nSecond paragraph is also long enough."
    assert normalize_list_response(text) == [
        "First paragraph is long enough to count.",
        "Second paragraph is also long enough.",
    ]


def test_short_paragraphs_fall_back_to_whole_text():
    text = "Too short.\n\nAlso short."
    assert normalize_list_response(text) == [text]


def test_single_plain_answer():
    assert normalize_list_response("  Just one plain answer  ") == ["Just one plain answer"]


@pytest.mark.parametrize("text", ["", "   ", "\n\n", None])
def test_blank_input_uses_fallback(text):
    assert normalize_list_response(text) == [EMPTY_RESULT_FALLBACK]
    assert normalize_list_response(text, fallback="Thoughts?") == ["Thoughts?"]


@pytest.mark.parametrize(
    "text",
    [
        "[]",
        "[[[",
        "]]] [",
        '["", "  "]',
        "```",
        "1.\n2.\n3.",
        '"',
    ],
)
def test_never_returns_empty(text):
    result = normalize_list_response(text)
    assert result
    assert all(isinstance(item, str) and item for item in result)


def test_strip_code_fences():
    assert strip_code_fences("```JSON\n[1]\n```") == "[1]"
    assert strip_code_fences("") == ""


def test_whitespace_and_clip():
    assert normalize_whitespace("  a \n b\t c ") == "a b c"
    assert clip_text("short") == "short"
    clipped = clip_text("word " * 40, limit=20)
    assert clipped.endswith("...")
    assert len(clipped) <= 20
