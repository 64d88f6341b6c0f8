"""
core.parsing.mood_parser

Parse the mood marker the companion model embeds in its reply text.

Grammar (case-insensitive, may appear anywhere, may repeat):

    [MOOD: <word>]      where <word> matches \\w+

The last marker in the text wins. Markers are removed from the display text,
which is then trimmed. A reply without a marker gets DEFAULT_MOOD.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional


MOOD_PATTERN = re.compile(r"\[MOOD:\s*(\w+)\]", re.IGNORECASE)

DEFAULT_MOOD = "happy"


@dataclass(frozen=True)
class ParsedReply:
    """Display text + mood extracted from one raw model reply."""

    text: str
    mood: str
    has_marker: bool = False


def extract_mood(raw: Optional[str]) -> Optional[str]:
    """Return the lower-cased mood of the last marker, or None."""
    if not raw:
        return None
    matches = MOOD_PATTERN.findall(raw)
    if not matches:
        return None
    return matches[-1].lower()


def strip_mood_markers(raw: Optional[str]) -> str:
    """
    Remove every mood marker and trim surrounding whitespace.

    Substitution is repeated until nothing matches, so text like
    "[MO[MOOD: a]OD: b]" cannot leave a new marker behind and a second
    call is always a no-op.
    """
    text = raw or ""
    while True:
        stripped = MOOD_PATTERN.sub("", text)
        if stripped == text:
            break
        text = stripped
    return text.strip()


def parse_reply(raw: Optional[str], default_mood: str = DEFAULT_MOOD) -> ParsedReply:
    mood = extract_mood(raw)
    return ParsedReply(
        text=strip_mood_markers(raw),
        mood=mood or default_mood,
        has_marker=mood is not None,
    )
