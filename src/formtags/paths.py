"""
Property path guard.

Paths handed to a binding context are restricted to plain property access so
a template can never smuggle arbitrary expressions into the lookup. The
accepted grammar mirrors the parameter-name allow-list of the form binding
layer:

    path    := WORD suffix*
    suffix  := .WORD | [DIGITS] | (DIGITS) | ['WORDISH'] | ('WORDISH')

Usage:
    from formtags.paths import validate_path, parse_path

    validate_path("user.addresses[0].city")
    parse_path("prefs['colour-scheme']")
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from .errors import InvalidPath

# Word characters plus CJK ideographs, each optionally followed by one hyphen
_WORDISH = r"(?:\w-?|[\u4e00-\u9fa5]-?)+"
_HEAD = r"\w+"


class SegmentKind(Enum):
    ATTRIBUTE = "attribute"
    INDEX = "index"
    CALL_INDEX = "call_index"
    KEY = "key"
    CALL_KEY = "call_key"


@dataclass(frozen=True, slots=True)
class SegmentRule:
    """One suffix variant of the grammar. ``pattern`` captures the operand."""

    kind: SegmentKind
    pattern: str
    regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "regex", re.compile(self.pattern, re.ASCII))


@dataclass(frozen=True, slots=True)
class Segment:
    kind: SegmentKind
    operand: str | int


GRAMMAR: tuple[SegmentRule, ...] = (
    SegmentRule(SegmentKind.ATTRIBUTE, r"\.(\w+)"),
    SegmentRule(SegmentKind.INDEX, r"\[(\d+)]"),
    SegmentRule(SegmentKind.CALL_INDEX, r"\((\d+)\)"),
    SegmentRule(SegmentKind.KEY, rf"\['({_WORDISH})']"),
    SegmentRule(SegmentKind.CALL_KEY, rf"\('({_WORDISH})'\)"),
)

ACCEPTED_PATTERN = re.compile(
    _HEAD + "(?:" + "|".join(f"(?:{rule.pattern})" for rule in GRAMMAR) + ")*",
    re.ASCII,
)

_HEAD_REGEX = re.compile(_HEAD, re.ASCII)


def is_valid_path(path: object) -> bool:
    """Check a path against the allow-list without raising."""
    return isinstance(path, str) and ACCEPTED_PATTERN.fullmatch(path) is not None


def validate_path(path: object) -> str:
    """Return ``path`` unchanged if it is allowed, raise InvalidPath otherwise."""
    if not is_valid_path(path):
        raise InvalidPath(path)
    return path  # type: ignore[return-value]


def parse_path(path: object) -> tuple[Segment, ...]:
    """
    Validate a path and split it into typed segments.

    The head word is returned as an ATTRIBUTE segment. Index operands are
    converted to int.
    """
    text = validate_path(path)

    head = _HEAD_REGEX.match(text)
    segments = [Segment(SegmentKind.ATTRIBUTE, head.group())]  # type: ignore[union-attr]
    pos = head.end()  # type: ignore[union-attr]

    while pos < len(text):
        for rule in GRAMMAR:
            m = rule.regex.match(text, pos)
            if m:
                break
        else:
            raise InvalidPath(path)

        operand: str | int = m.group(1)
        if rule.kind in (SegmentKind.INDEX, SegmentKind.CALL_INDEX):
            operand = int(operand)
        segments.append(Segment(rule.kind, operand))
        pos = m.end()

    return tuple(segments)
