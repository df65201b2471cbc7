"""
Tests for value binding: the value stack, resolution, selection and field errors.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

import pytest

from formtags.binding import (
    Absent,
    BindingContext,
    FieldErrorsAware,
    Mapping,
    Scalar,
    Sequence,
    ValueStack,
    classify,
    display_string,
    field_errors,
    is_selected,
    resolve,
    resolve_string,
)
from formtags.errors import FieldErrorsError, InvalidPath, PropertyAccessError


class Colour(Enum):
    RED = "red"
    BLUE = "blue"


@dataclass
class Address:
    city: str
    lines: list[str] = field(default_factory=list)


@dataclass
class User:
    name: str
    address: Address | None = None
    tags: list[str] = field(default_factory=list)
    prefs: dict[str, str] = field(default_factory=dict)
    _secret: str = "hidden"

    @property
    def broken(self):
        raise RuntimeError("boom")


class ValidatingAction:
    def __init__(self, errors):
        self.errors = errors

    def get_field_errors(self):
        return self.errors


class BrokenAction:
    def get_field_errors(self):
        raise RuntimeError("no errors for you")


class RecordingContext:
    """Binding context that records every path it is asked for."""

    def __init__(self, value=None):
        self.value = value
        self.paths = []

    def find_value(self, path):
        self.paths.append(path)
        return self.value

    def peek(self):
        return None


@pytest.fixture
def user():
    return User(
        name="Ada",
        address=Address(city="London", lines=["1 Main St", "Flat 2"]),
        tags=["a", "b", "c"],
        prefs={"colour-scheme": "dark", "lang": "en"},
    )


class TestClassify:
    def test_none_is_absent(self):
        assert classify(None) == Absent()

    def test_strings_are_scalar(self):
        assert classify("abc") == Scalar("abc")

    def test_numbers_are_scalar(self):
        assert classify(3) == Scalar(3)

    def test_lists_tuples_sets_are_sequences(self):
        assert isinstance(classify([1, 2]), Sequence)
        assert isinstance(classify((1, 2)), Sequence)
        assert isinstance(classify({1, 2}), Sequence)

    def test_dict_is_mapping(self):
        result = classify({"k": "v"})
        assert isinstance(result, Mapping)
        assert result.values == ("v",)

    def test_object_is_scalar(self, user):
        assert classify(user) == Scalar(user)


class TestDisplayString:
    def test_values(self):
        assert display_string(None) == ""
        assert display_string(True) == "true"
        assert display_string(False) == "false"
        assert display_string(42) == "42"
        assert display_string(Colour.RED) == "red"
        assert display_string("x") == "x"


class TestValueStack:
    def test_is_binding_context(self):
        assert isinstance(ValueStack(), BindingContext)

    def test_push_pop_peek(self, user):
        stack = ValueStack()
        assert stack.peek() is None
        stack.push(user)
        assert stack.peek() is user
        assert len(stack) == 1
        assert stack.pop() is user
        assert len(stack) == 0

    def test_attribute_path(self, user):
        stack = ValueStack(user)
        assert stack.find_value("name") == "Ada"
        assert stack.find_value("address.city") == "London"

    def test_index_paths(self, user):
        stack = ValueStack(user)
        assert stack.find_value("tags[1]") == "b"
        assert stack.find_value("address.lines(0)") == "1 Main St"

    def test_key_paths(self, user):
        stack = ValueStack(user)
        assert stack.find_value("prefs['colour-scheme']") == "dark"
        assert stack.find_value("prefs('lang')") == "en"
        assert stack.find_value("prefs.lang") == "en"

    def test_key_on_object_reads_attribute(self, user):
        stack = ValueStack(user)
        assert stack.find_value("address['city']") == "London"

    def test_mapping_root(self):
        stack = ValueStack({"email": "a@example.com", "counts": {1: "one"}})
        assert stack.find_value("email") == "a@example.com"
        assert stack.find_value("counts[1]") == "one"

    def test_top_of_stack_wins(self, user):
        stack = ValueStack(user, {"name": "Grace"})
        assert stack.find_value("name") == "Grace"
        assert stack.find_value("tags[0]") == "a"

    def test_context_searched_last(self, user):
        stack = ValueStack(user)
        stack.set_value("name", "Context")
        stack.set_value("locale", "en-GB")
        assert stack.find_value("name") == "Ada"
        assert stack.find_value("locale") == "en-GB"

    def test_none_part_way_is_none(self):
        stack = ValueStack(User(name="Ada"))
        assert stack.find_value("address.city") is None

    def test_missing_head_raises(self, user):
        with pytest.raises(LookupError):
            ValueStack(user).find_value("missing")

    def test_missing_attribute_raises(self, user):
        with pytest.raises(AttributeError):
            ValueStack(user).find_value("address.zip")

    def test_out_of_range_raises(self, user):
        with pytest.raises(IndexError):
            ValueStack(user).find_value("tags[9]")

    def test_private_attributes_hidden(self, user):
        stack = ValueStack(user)
        with pytest.raises(LookupError):
            stack.find_value("_secret")
        with pytest.raises(AttributeError):
            stack.find_value("address.__class__")

    def test_invalid_path(self, user):
        with pytest.raises(InvalidPath):
            ValueStack(user).find_value("name; drop")


class TestResolve:
    def test_rejects_before_evaluating(self, caplog):
        context = RecordingContext("x")
        with caplog.at_level(logging.WARNING, logger="formtags.binding"):
            with pytest.raises(InvalidPath):
                resolve(context, "user; drop")
        assert context.paths == []
        assert "Rejected property path" in caplog.text

    def test_passes_validated_path(self):
        context = RecordingContext("x")
        assert resolve(context, "user.name") == Scalar("x")
        assert context.paths == ["user.name"]

    def test_wraps_access_errors(self, user):
        with pytest.raises(PropertyAccessError) as excinfo:
            resolve(ValueStack(user), "broken")
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert "broken" in str(excinfo.value)

    def test_missing_property_is_access_error(self, user):
        with pytest.raises(PropertyAccessError):
            resolve(ValueStack(user), "nope")

    def test_resolve_string(self, user):
        stack = ValueStack(user)
        assert resolve_string(stack, "name") == "Ada"
        assert resolve_string(stack, "tags") == "['a', 'b', 'c']"

    def test_resolve_string_absent_is_empty(self):
        assert resolve_string(ValueStack({"name": None}), "name") == ""

    def test_resolve_string_booleans(self):
        assert resolve_string(ValueStack({"agree": True}), "agree") == "true"


class TestIsSelected:
    def test_sequence(self):
        stack = ValueStack({"letters": ["a", "b", "c"]})
        assert is_selected(stack, "letters", "b") is True
        assert is_selected(stack, "letters", "z") is False

    def test_absent(self):
        stack = ValueStack({"letters": None})
        assert is_selected(stack, "letters", "") is False
        assert is_selected(stack, "letters", "a") is False

    def test_sequence_skips_none(self):
        stack = ValueStack({"letters": [None, "a"]})
        assert is_selected(stack, "letters", "") is False
        assert is_selected(stack, "letters", "a") is True

    def test_mapping_checks_values(self):
        stack = ValueStack({"chosen": {"first": "red", "second": "blue"}})
        assert is_selected(stack, "chosen", "blue") is True
        assert is_selected(stack, "chosen", "first") is False

    def test_scalar_exact(self):
        stack = ValueStack({"colour": "Red"})
        assert is_selected(stack, "colour", "Red") is True
        assert is_selected(stack, "colour", "red") is False

    def test_scalar_number_and_bool(self):
        stack = ValueStack({"count": 3, "agree": True})
        assert is_selected(stack, "count", "3") is True
        assert is_selected(stack, "agree", "true") is True

    def test_enum_values(self):
        stack = ValueStack({"colours": [Colour.BLUE]})
        assert is_selected(stack, "colours", "blue") is True

    def test_sets(self):
        stack = ValueStack({"colours": {"red", "blue"}})
        assert is_selected(stack, "colours", "red") is True


class TestFieldErrors:
    def test_capability(self):
        assert isinstance(ValidatingAction({}), FieldErrorsAware)
        assert not isinstance(object(), FieldErrorsAware)

    def test_returns_errors(self):
        errors = {"email": ["Required"]}
        assert field_errors(ValueStack(ValidatingAction(errors))) == errors

    def test_empty_errors(self):
        assert field_errors(ValueStack(ValidatingAction({}))) == {}

    def test_not_validation_aware(self, user):
        assert field_errors(ValueStack(user)) is None

    def test_empty_stack(self):
        assert field_errors(ValueStack()) is None

    def test_top_object_only(self):
        stack = ValueStack(ValidatingAction({"email": ["Required"]}), {"other": 1})
        assert field_errors(stack) is None

    def test_failure_wrapped(self):
        with pytest.raises(FieldErrorsError) as excinfo:
            field_errors(ValueStack(BrokenAction()))
        assert isinstance(excinfo.value.__cause__, RuntimeError)
