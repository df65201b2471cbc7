"""FastAPI integration: a value stack per request and form validation."""

import logging
from inspect import isawaitable
from types import NoneType, UnionType
from typing import Annotated, Any, Awaitable, Callable, Generic, TypeVar, Union, get_args, get_origin

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse
from pydantic import ValidationError

from . import config
from .binding import ValueStack
from .core import SafeHTML
from .errors import ConfigurationError, TagError
from .forms import BaseForm

logger = logging.getLogger(__name__)


# --- Value stack ---


def get_value_stack(request: Request) -> ValueStack:
    """Get the value stack bound to this request."""
    attribute = config.settings.value_stack_attribute
    stack = getattr(request.state, attribute, None)
    if stack is None:
        raise ConfigurationError(f"The request attribute {attribute} was not found")
    return stack


def use_value_stack(request: Request) -> ValueStack:
    """Get or create the value stack for this request."""
    attribute = config.settings.value_stack_attribute
    stack = getattr(request.state, attribute, None)
    if stack is None:
        stack = ValueStack()
        setattr(request.state, attribute, stack)
    return stack


ValueStackDep = Annotated[ValueStack, Depends(use_value_stack)]


def push_action(request: Request, action: Any) -> ValueStack:
    """Push ``action`` onto the request's value stack."""
    stack = use_value_stack(request)
    stack.push(action)
    return stack


# --- Forms ---


class FormValidationError(HTTPException):
    """Raised when form validation fails - contains the rendered HTML response."""

    def __init__(self, content: SafeHTML | str):
        super().__init__(status_code=200, detail="Form validation failed")
        self.response = HTMLResponse(content=str(content), status_code=200)


async def form_validation_error_handler(request: Request, exc: FormValidationError):
    return exc.response


async def tag_error_handler(request: Request, exc: TagError) -> HTMLResponse:
    logger.error(f"Unable to render form tag for {request.url.path}: {exc}", exc_info=exc)
    return HTMLResponse("<p>Unable to render form</p>", status_code=500)


def add_tag_error_handler(app: FastAPI) -> None:
    """Register the form validation and tag error handlers on ``app``."""
    app.add_exception_handler(FormValidationError, form_validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(TagError, tag_error_handler)  # type: ignore[arg-type]


T = TypeVar("T", bound=BaseForm)

Template = Callable[[ValueStack], SafeHTML | str | Awaitable[SafeHTML | str]]


class ActionForm(Generic[T]):
    """
    Dependency that validates form data and re-renders the template on errors.

    The validated form is pushed onto the request's value stack. On errors an
    unvalidated instance carrying the submitted values and field errors is
    pushed instead, so the tags in the template show what the user typed.

    Usage:
        def signup_page(stack: ValueStack) -> SafeHTML:
            return SafeHTML(
                InputTag(type="text", name="username", error_class="error").render(stack).content
            )

        @app.post("/signup")
        async def signup(form: SignupForm = Depends(ActionForm(SignupForm, signup_page))):
            # Only reached if validation succeeds
            ...
    """

    def __init__(self, model: type[T], template: Template):
        self.model = model
        self.template = template

    async def __call__(self, request: Request) -> T:
        """Validate form data or raise FormValidationError with rendered template."""
        form_data = await request.form()
        values: dict[str, Any] = {}
        for key in form_data.keys():
            items = form_data.getlist(key)
            values[key] = items if _is_multi(self.model, key) or len(items) > 1 else items[0]

        stack = use_value_stack(request)

        try:
            action = self.model(**values)
        except ValidationError as e:
            action = self.model.from_invalid(values, e)
            stack.push(action)
            logger.info(
                f"Form {self.model.__name__} failed validation: {sorted(action.get_field_errors())}"
            )

            content = self.template(stack)
            if isawaitable(content):
                content = await content
            raise FormValidationError(content)

        stack.push(action)
        return action


def _is_multi(model: type[BaseForm], name: str) -> bool:
    """Whether a form field collects every submitted value."""
    field_info = model.model_fields.get(name)
    if field_info is None:
        return False
    annotation = field_info.annotation
    if get_origin(annotation) in (Union, UnionType):
        # Optional[list[str]] and list[str] | None collect like list[str]
        return any(_is_collection(arg) for arg in get_args(annotation) if arg is not NoneType)
    return _is_collection(annotation)


def _is_collection(annotation: Any) -> bool:
    return (get_origin(annotation) or annotation) in (list, set, frozenset, tuple)
