"""Parsing of ``【...】`` vocabulary markers in assistant replies."""
from __future__ import annotations

import re
from typing import List, NamedTuple

from english_chat.core.conversation.prompts import EXPRESSION_CLOSE, EXPRESSION_OPEN

# The inner text may not contain another opening marker, so an unterminated
# opener never swallows the span that follows it.
_EXPRESSION_PATTERN = re.compile(
    f"{re.escape(EXPRESSION_OPEN)}([^{EXPRESSION_OPEN}{EXPRESSION_CLOSE}]+){re.escape(EXPRESSION_CLOSE)}"
)


class TextSegment(NamedTuple):
    """A run of message text, flagged when it is a highlighted expression."""

    text: str
    is_expression: bool


def extract_expressions(text: str) -> List[str]:
    """Return the inner text of every marked expression, left to right."""

    if not text:
        return []
    return [match.group(1) for match in _EXPRESSION_PATTERN.finditer(text)]


def split_highlighted(text: str) -> List[TextSegment]:
    """Split ``text`` into plain and expression segments for display."""

    segments: List[TextSegment] = []
    cursor = 0
    for match in _EXPRESSION_PATTERN.finditer(text or ""):
        if match.start() > cursor:
            segments.append(TextSegment(text[cursor : match.start()], False))
        segments.append(TextSegment(match.group(1), True))
        cursor = match.end()
    if text and cursor < len(text):
        segments.append(TextSegment(text[cursor:], False))
    return segments
