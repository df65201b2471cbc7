"""
Form control tags populated from a binding context.

Each tag holds its declared attributes plus ``attrs``, the dynamic
attributes passed straight through to the markup. Rendering is a pure
function of the tag and the context: the whole element is built before
anything is written.

Usage:
    from formtags.tags import InputTag, SelectTag

    stack = ValueStack(action)
    InputTag(type="text", name="email", error_class="error").render(stack)

    colour = SelectTag(name="colour")
    colour.option(body="Red", value="red")
    colour.write(stack, out)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import config
from .binding import BindingContext, display_string, field_errors, is_selected, resolve_string
from .core import SafeHTML, escape_entities, flag
from .errors import ConfigurationError, OutputError


class Writer(Protocol):
    def write(self, text: str, /) -> Any: ...


@dataclass(frozen=True, slots=True)
class BoundTag:
    """A tag paired with the context it renders against."""

    tag: Tag
    context: BindingContext

    def __html__(self) -> str:
        return self.tag.render(self.context).content

    def __str__(self) -> str:
        return self.__html__()


class Tag(BaseModel):
    """Base for the form control tags."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    tag_name: ClassVar[str] = ""
    has_class: ClassVar[bool] = False

    attrs: dict[str, Any] = Field(default_factory=dict)

    @field_validator("value", "body", mode="before", check_fields=False)
    @classmethod
    def coerce_literals(cls, value: Any) -> Any:
        # Numbers, booleans and enums are accepted as literals in their markup form
        if value is None or isinstance(value, str):
            return value
        return display_string(value)

    def render(self, context: BindingContext) -> SafeHTML:
        """Build the element against ``context``. Each tag class provides its own markup."""
        raise NotImplementedError

    def write(self, context: BindingContext, out: Writer) -> None:
        """Render against ``context`` and write the element to ``out``."""
        content = self.render(context)
        try:
            out.write(content.content)
        except (OSError, ValueError) as exc:
            raise OutputError(f"Unable to write <{self.tag_name}> tag") from exc

    def bind(self, context: BindingContext) -> BoundTag:
        return BoundTag(self, context)

    def set_dynamic_attribute(self, name: str, value: Any) -> None:
        if name == "class" and self.has_class:
            self.class_ = value  # type: ignore[attr-defined]
        else:
            self.attrs[name] = value

    def _state_attrs(self, required: str | bool | None, disabled: str | bool | None) -> str:
        parts = []
        if flag(required, "required"):
            parts.append(' required="required"')
        if flag(disabled, "disabled"):
            parts.append(' disabled="disabled"')
        return "".join(parts)

    def _class_attr(
        self,
        context: BindingContext,
        name: str,
        class_: str | None,
        error_class: str | None,
    ) -> str:
        """Swap to the error class when the field has errors."""
        if error_class is None:
            error_class = config.settings.error_class

        if error_class is not None:
            errors = field_errors(context)
            if errors is not None and name in errors:
                return f' class="{error_class}"'

        if class_ is not None:
            return f' class="{class_}"'
        return ""

    def _dynamic_attrs(self) -> str:
        return "".join(f' {key}="{value}"' for key, value in self.attrs.items())


class InputTag(Tag):
    """Creates an <input> tag populated from the binding context."""

    tag_name: ClassVar[str] = "input"
    has_class: ClassVar[bool] = True

    type: str | None = None
    name: str | None = None
    value: str | None = None
    checked: str | bool | None = None
    disabled: str | bool | None = None
    required: str | bool | None = None
    class_: str | None = Field(default=None, alias="class")
    error_class: str | None = None

    def render(self, context: BindingContext) -> SafeHTML:
        if self.type is None:
            raise ConfigurationError("No type attribute supplied")
        if self.name is None:
            raise ConfigurationError("No name attribute supplied")

        parts = [f'<input type="{self.type}" name="{escape_entities(self.name)}"']

        if self.type in ("checkbox", "radio"):
            # A checkbox without a value submits "true"
            value = self.value if self.value is not None else "true"
            if self.checked is not None:
                checked = flag(self.checked, "checked")
            else:
                checked = is_selected(context, self.name, value)
            if checked:
                parts.append(' checked="checked"')
            parts.append(f' value="{value}"')
        elif self.type != "file":
            if self.value is not None:
                value = self.value
            else:
                value = escape_entities(resolve_string(context, self.name))
            parts.append(f' value="{value}"')

        parts.append(self._state_attrs(self.required, self.disabled))
        parts.append(self._class_attr(context, self.name, self.class_, self.error_class))
        parts.append(self._dynamic_attrs())
        parts.append(" />")

        return SafeHTML("".join(parts))


class TextareaTag(Tag):
    """Creates a <textarea> tag populated from the binding context."""

    tag_name: ClassVar[str] = "textarea"
    has_class: ClassVar[bool] = True

    name: str | None = None
    value: str | None = None
    disabled: str | bool | None = None
    required: str | bool | None = None
    class_: str | None = Field(default=None, alias="class")
    error_class: str | None = None

    def render(self, context: BindingContext) -> SafeHTML:
        if self.name is None:
            raise ConfigurationError("No name attribute supplied")

        if self.value is not None:
            content = self.value
        else:
            content = escape_entities(resolve_string(context, self.name))

        return SafeHTML(
            f'<textarea name="{escape_entities(self.name)}"'
            f"{self._state_attrs(self.required, self.disabled)}"
            f"{self._class_attr(context, self.name, self.class_, self.error_class)}"
            f"{self._dynamic_attrs()}"
            f">{content}</textarea>"
        )


class SelectTag(Tag):
    """Creates a <select> tag whose options are selected from the binding context."""

    tag_name: ClassVar[str] = "select"
    has_class: ClassVar[bool] = True

    name: str | None = None
    disabled: str | bool | None = None
    required: str | bool | None = None
    class_: str | None = Field(default=None, alias="class")
    error_class: str | None = None
    options: list[OptionTag] = Field(default_factory=list, repr=False)

    def option(self, **kwargs: Any) -> OptionTag:
        """Create an option inside this select."""
        return self.add_option(OptionTag(**kwargs))

    def add_option(self, option: OptionTag) -> OptionTag:
        option.select = self
        self.options.append(option)
        return option

    def render(self, context: BindingContext) -> SafeHTML:
        if self.name is None:
            raise ConfigurationError("No name attribute supplied")

        body = "".join(option.render(context).content for option in self.options)

        return SafeHTML(
            f'<select name="{escape_entities(self.name)}"'
            f"{self._state_attrs(self.required, self.disabled)}"
            f"{self._class_attr(context, self.name, self.class_, self.error_class)}"
            f"{self._dynamic_attrs()}"
            f">{body}</select>"
        )


class OptionTag(Tag):
    """Creates an <option> tag selected from the enclosing select's property."""

    tag_name: ClassVar[str] = "option"

    value: str | None = None
    disabled: str | bool | None = None
    body: str = ""
    select: SelectTag | None = Field(default=None, exclude=True, repr=False)

    def __eq__(self, other: object) -> bool:
        # The enclosing select is left out; it refers back to this option
        if not isinstance(other, OptionTag):
            return NotImplemented
        return type(self) is type(other) and self.model_dump() == other.model_dump()

    def render(self, context: BindingContext) -> SafeHTML:
        if self.select is None:
            raise ConfigurationError("Can only be used inside select tag")
        name = self.select.name
        if name is None:
            raise ConfigurationError("No name attribute supplied")

        parts = ["<option"]

        if self.value is not None:
            parts.append(f' value="{escape_entities(self.value)}"')

        candidate = self.value if self.value is not None else self.body
        if is_selected(context, name, candidate):
            parts.append(' selected="selected"')

        parts.append(self._state_attrs(None, self.disabled))
        parts.append(self._dynamic_attrs())
        parts.append(f">{self.body}</option>")

        return SafeHTML("".join(parts))


SelectTag.model_rebuild()
