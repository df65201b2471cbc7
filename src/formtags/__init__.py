"""
formtags - HTML form controls populated from a per-request value stack

Renders <input>, <select>/<option> and <textarea> tags whose values come
from the objects bound to the current request, with validation-error
styling for fields that failed validation.
"""

from .core import SafeHTML, escape_entities
from .errors import (
    ConfigurationError,
    FieldErrorsError,
    InvalidPath,
    OutputError,
    PropertyAccessError,
    TagError,
)
from .paths import is_valid_path, parse_path, validate_path
from .binding import (
    BindingContext,
    FieldErrorsAware,
    ValueStack,
    field_errors,
    is_selected,
    resolve,
    resolve_string,
)
from .tags import InputTag, OptionTag, SelectTag, TextareaTag
from .elements import input_, option, select, textarea
from .forms import BaseForm, parse_form_errors
from .fastapi import ActionForm, ValueStackDep, add_tag_error_handler, push_action, use_value_stack

__version__ = "0.1.0"
__all__ = [
    # Core
    "SafeHTML",
    "escape_entities",
    # Errors
    "TagError",
    "InvalidPath",
    "PropertyAccessError",
    "FieldErrorsError",
    "ConfigurationError",
    "OutputError",
    # Paths
    "validate_path",
    "is_valid_path",
    "parse_path",
    # Binding
    "BindingContext",
    "FieldErrorsAware",
    "ValueStack",
    "resolve",
    "resolve_string",
    "is_selected",
    "field_errors",
    # Tags
    "InputTag",
    "OptionTag",
    "SelectTag",
    "TextareaTag",
    "input_",
    "option",
    "select",
    "textarea",
    # Forms
    "BaseForm",
    "parse_form_errors",
    # FastAPI
    "ActionForm",
    "ValueStackDep",
    "add_tag_error_handler",
    "push_action",
    "use_value_stack",
]
