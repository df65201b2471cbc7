"""
Markup primitives shared by the tag renderers.
"""

from __future__ import annotations

from dataclasses import dataclass

_ENTITIES = {
    "<": "&lt;",
    ">": "&gt;",
    "&": "&amp;",
    '"': "&quot;",
}


@dataclass(frozen=True, slots=True)
class SafeHTML:
    """
    Marks content as already escaped/safe.
    Immutable and hashable for use as cache keys.
    """

    content: str

    def __html__(self) -> str:
        return self.content

    def __str__(self) -> str:
        return self.content

    def __bool__(self) -> bool:
        return bool(self.content)


def escape_entities(text: str) -> str:
    """
    Escape the characters that need entities in markup: <, >, & and ".

    Single quotes are left alone. Text without any of the four characters is
    returned as is.
    """
    if not any(c in text for c in _ENTITIES):
        return text
    return "".join(_ENTITIES.get(c, c) for c in text)


def flag(value: str | bool | None, word: str) -> bool:
    """
    Interpret a boolean-like attribute.

    True for the literal strings "true" or ``word`` (case-insensitive) and
    for ``True``; anything else, including None, is false.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return value.lower() in ("true", word)
