"""Tests for highlighted expression parsing."""
from __future__ import annotations

from english_chat.core.conversation import extract_expressions, split_highlighted


def test_single_expression():
    assert extract_expressions("Try to say 【good morning】 when you arrive.") == ["good morning"]


def test_multiple_expressions_keep_order():
    assert extract_expressions("【hello】 and 【goodbye】") == ["hello", "goodbye"]


def test_empty_text_has_no_expressions():
    assert extract_expressions("") == []


def test_unterminated_bracket_is_ignored():
    assert extract_expressions("Say 【see you later without closing") == []
    # A span never contains another opening bracket, so only the closed span counts.
    assert extract_expressions("【open and 【closed】") == ["closed"]


def test_empty_brackets_are_ignored():
    assert extract_expressions("Nothing here: 【】") == []


def test_split_highlighted_marks_expression_segments():
    segments = split_highlighted("Say 【get up】 early.")

    assert [(segment.text, segment.is_expression) for segment in segments] == [
        ("Say ", False),
        ("get up", True),
        (" early.", False),
    ]


def test_split_highlighted_plain_text():
    assert [tuple(segment) for segment in split_highlighted("No markers")] == [("No markers", False)]
    assert split_highlighted("") == []
