"""
Pydantic forms that report field errors to the form tags.

Usage:
    from pydantic import Field
    from formtags.forms import BaseForm

    class SignupForm(BaseForm):
        username: str = Field(min_length=3)
        email: str
        colours: list[str] = []

    try:
        form = SignupForm(**values)
    except ValidationError as e:
        form = SignupForm.from_invalid(values, e)

    form.get_field_errors()  # {"username": ["String should have at least 3 characters"]}
"""

from __future__ import annotations

from typing import Any, Self

from pydantic import BaseModel, PrivateAttr, ValidationError


class BaseForm(BaseModel):
    """
    Base class for forms bound to the value stack.

    Field errors are kept beside the model data so a form that failed
    validation can be re-rendered with the submitted values and the error
    class applied to the offending fields.
    """

    _field_errors: dict[str, list[str]] = PrivateAttr(default_factory=dict)

    def get_field_errors(self) -> dict[str, list[str]]:
        return self._field_errors

    def add_field_error(self, name: str, message: str) -> None:
        self._field_errors.setdefault(name, []).append(message)

    @classmethod
    def from_invalid(cls, values: dict[str, Any], error: ValidationError) -> Self:
        """
        Build an unvalidated instance holding the submitted values.

        Required fields that were not submitted are set to None so tags
        bound to them render empty.
        """
        data = {
            name: None
            for name, field_info in cls.model_fields.items()
            if field_info.is_required()
        }
        data.update({k: v for k, v in values.items() if k in cls.model_fields})

        form = cls.model_construct(**data)
        for name, messages in parse_form_errors(error).items():
            for message in messages:
                form.add_field_error(name, message)
        return form


def _field_name(loc: tuple[int | str, ...]) -> str:
    """("address", "city") -> address.city, ("tags", 0) -> tags[0]"""
    name = str(loc[0])
    for part in loc[1:]:
        if isinstance(part, int):
            name += f"[{part}]"
        else:
            name += f".{part}"
    return name


def parse_form_errors(error: ValidationError) -> dict[str, list[str]]:
    """Convert Pydantic ValidationError to field -> messages dict."""
    errors: dict[str, list[str]] = {}
    for err in error.errors():
        loc = err["loc"]
        if loc:
            errors.setdefault(_field_name(loc), []).append(err["msg"])
    return errors
