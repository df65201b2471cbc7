"""
Value binding for form tags.

A binding context evaluates validated property paths against the objects
bound to the current request. ``ValueStack`` is the implementation used by
the FastAPI integration: a stack of root objects searched from the top down.

Usage:
    stack = ValueStack(SignupForm.model_construct(email="a@example.com"))
    resolve_string(stack, "email")
    is_selected(stack, "roles", "admin")
"""

from __future__ import annotations

import logging
from collections import abc
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, TypeAlias, runtime_checkable

from .errors import FieldErrorsError, InvalidPath, PropertyAccessError
from .paths import Segment, SegmentKind, parse_path, validate_path

logger = logging.getLogger(__name__)

_MISSING = object()


# --- Protocols ---


@runtime_checkable
class BindingContext(Protocol):
    """Per-request evaluation scope for property paths."""

    def find_value(self, path: str) -> Any: ...

    def peek(self) -> Any: ...


@runtime_checkable
class FieldErrorsAware(Protocol):
    """Objects that report validation errors keyed by field name."""

    def get_field_errors(self) -> dict[str, list[str]]: ...


# --- Resolved values ---


@dataclass(frozen=True, slots=True)
class Absent:
    pass


@dataclass(frozen=True, slots=True)
class Scalar:
    value: Any


@dataclass(frozen=True, slots=True)
class Sequence:
    raw: Any
    items: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class Mapping:
    raw: Any
    values: tuple[Any, ...]


ResolvedValue: TypeAlias = Absent | Scalar | Sequence | Mapping

ABSENT = Absent()


def classify(value: Any) -> ResolvedValue:
    """Tag a raw value as absent, scalar, sequence or mapping."""
    match value:
        case None:
            return ABSENT
        case str() | bytes() | bytearray():
            return Scalar(value)
        case abc.Mapping():
            return Mapping(value, tuple(value.values()))
        case abc.Sequence() | abc.Set():
            return Sequence(value, tuple(value))
        case _:
            return Scalar(value)


def display_string(value: Any) -> str:
    """String form of a bound value as it appears in markup."""
    match value:
        case None:
            return ""
        case bool():
            return "true" if value else "false"
        case Enum():
            return display_string(value.value)
        case _:
            return str(value)


# --- Value stack ---


class ValueStack:
    """
    Stack of root objects searched from the top down.

    Named values set with ``set_value`` live in a context map that is
    searched after every root.
    """

    def __init__(self, *roots: Any, context: dict[str, Any] | None = None):
        self._roots: list[Any] = list(roots)
        self.context: dict[str, Any] = dict(context or {})

    def __len__(self) -> int:
        return len(self._roots)

    def __repr__(self) -> str:
        return f"ValueStack(depth={len(self._roots)}, context={list(self.context)})"

    def push(self, obj: Any) -> None:
        self._roots.append(obj)

    def pop(self) -> Any:
        return self._roots.pop()

    def peek(self) -> Any:
        """Return the top object, or None for an empty stack."""
        return self._roots[-1] if self._roots else None

    def set_value(self, name: str, value: Any) -> None:
        self.context[validate_path(name)] = value

    def find_value(self, path: str) -> Any:
        """
        Evaluate ``path`` against the stack.

        Raises LookupError when no root has the first segment, and lets
        attribute, key, index and type errors from the walk propagate.
        """
        head, *rest = parse_path(path)
        name = str(head.operand)

        value = _MISSING
        for root in reversed(self._roots):
            value = _lookup(root, name)
            if value is not _MISSING:
                break
        else:
            value = self.context.get(name, _MISSING)

        if value is _MISSING:
            raise LookupError(f"No object on the stack has a property named {name!r}")

        for segment in rest:
            if value is None:
                return None
            value = _step(value, segment)
        return value


def _lookup(root: Any, name: str) -> Any:
    if isinstance(root, abc.Mapping):
        return root.get(name, _MISSING)
    if name.startswith("_"):
        return _MISSING
    return getattr(root, name, _MISSING)


def _attribute(obj: Any, name: str) -> Any:
    if name.startswith("_"):
        raise AttributeError(f"Private attribute {name!r} is not accessible")
    return getattr(obj, name)


def _step(value: Any, segment: Segment) -> Any:
    match segment.kind:
        case SegmentKind.ATTRIBUTE | SegmentKind.KEY | SegmentKind.CALL_KEY:
            if isinstance(value, abc.Mapping):
                return value[segment.operand]
            return _attribute(value, str(segment.operand))
        case SegmentKind.INDEX | SegmentKind.CALL_INDEX:
            return value[segment.operand]


# --- Resolution ---


def resolve(context: BindingContext, name: str) -> ResolvedValue:
    """Validate ``name`` and evaluate it against the binding context."""
    try:
        validate_path(name)
    except InvalidPath:
        logger.warning(f"Rejected property path {name!r}")
        raise

    try:
        value = context.find_value(name)
    except Exception as exc:
        logger.warning(f"Unable to access property {name!r}: {exc}")
        raise PropertyAccessError(name) from exc

    return classify(value)


def resolve_string(context: BindingContext, name: str) -> str:
    """Resolve ``name`` as a display string; absent values give ''."""
    match resolve(context, name):
        case Absent():
            return ""
        case Scalar(value=value):
            return display_string(value)
        case Sequence(raw=raw) | Mapping(raw=raw):
            return str(raw)


def is_selected(context: BindingContext, name: str, candidate: str) -> bool:
    """
    Determine whether a checkbox, radio button or option is selected.

    Sequences match when any item equals ``candidate``, mappings when any
    value does, scalars when the value itself does.
    """
    match resolve(context, name):
        case Absent():
            return False
        case Sequence(items=items) | Mapping(values=items):
            return any(item is not None and display_string(item) == candidate for item in items)
        case Scalar(value=value):
            return display_string(value) == candidate


def field_errors(context: BindingContext) -> dict[str, list[str]] | None:
    """Field errors of the top object, or None if it does not report any."""
    try:
        action = context.peek()
        if not isinstance(action, FieldErrorsAware):
            return None
        return action.get_field_errors()
    except Exception as exc:
        raise FieldErrorsError("Unable to retrieve field errors from action") from exc
