"""
Exceptions raised while rendering form tags.

Every error aborts the render of the single tag that raised it; nothing is
written to the output for that tag.
"""


class TagError(Exception):
    """Base class for all form tag errors."""


class InvalidPath(TagError):
    """A property path was rejected by the expression guard."""

    def __init__(self, path: object):
        super().__init__(f"Invalid name for a property: {path}")
        self.path = path


class PropertyAccessError(TagError):
    """The binding context failed to evaluate a validated path."""

    def __init__(self, path: str):
        super().__init__(f"Unable to access the specified property: {path}")
        self.path = path


class FieldErrorsError(TagError):
    """The field errors could not be read from the bound object."""


class ConfigurationError(TagError):
    """A tag was declared without what it needs to render."""


class OutputError(TagError):
    """The output sink failed while a rendered tag was written to it."""
