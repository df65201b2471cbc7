"""
Tag factories for pure-Python composition.

Declared attributes go to the tag's own fields; every other keyword becomes
a dynamic attribute, in the order given.

Usage:
    from formtags.elements import input_, select, option, textarea

    input_(type="email", name="email", class_="wide", data_role="contact")
    select(
        option("Red", value="red"),
        option("Blue", value="blue"),
        name="colour",
    )
"""

from __future__ import annotations

from typing import Any, TypeVar

from .tags import InputTag, OptionTag, SelectTag, Tag, TextareaTag

T = TypeVar("T", bound=Tag)

# Fields filled in by composition rather than by keyword
_STRUCTURAL = {"attrs", "options", "select"}


def _attr_name(key: str) -> str:
    """class_ -> class, data_role -> data-role"""
    if key.endswith("_"):
        key = key[:-1]
    return key.replace("_", "-")


def _build(model: type[T], kwargs: dict[str, Any]) -> T:
    declared = set(model.model_fields) - _STRUCTURAL
    fields = {}
    dynamic = {}
    for key, value in kwargs.items():
        if key in declared:
            fields[key] = value
        else:
            dynamic[_attr_name(key)] = value

    tag = model(**fields)
    for key, value in dynamic.items():
        tag.set_dynamic_attribute(key, value)
    return tag


def _make_tag(model: type[T]):
    """Factory for creating tag functions."""

    def factory(**attrs: Any) -> T:
        return _build(model, attrs)

    factory.__name__ = model.tag_name
    factory.__doc__ = f"Create a <{model.tag_name}> tag."
    return factory


input_ = _make_tag(InputTag)
textarea = _make_tag(TextareaTag)


def option(body: Any = "", **attrs: Any) -> OptionTag:
    """Create an <option> tag; it renders once added to a select."""
    return _build(OptionTag, {"body": body, **attrs})


def select(*options: OptionTag, **attrs: Any) -> SelectTag:
    """Create a <select> tag holding ``options``."""
    tag = _build(SelectTag, attrs)
    for opt in options:
        tag.add_option(opt)
    return tag
