"""Field rules shared by request schemas and services.

The rules are pydantic annotated types. Request schemas use them as field
types; services run values through a ``TypeAdapter`` so calls that never
pass through a request body get the same rules and the same error.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from tenancy.core.exceptions import ValidationError

SLUG_PATTERN = r"^[a-z0-9][a-z0-9-]*[a-z0-9]$"
SLUG_MIN_LENGTH = 3
SLUG_MAX_LENGTH = 63
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 255
TASK_TITLE_MIN_LENGTH = 4

# Request locations that carry no field name of their own
REQUEST_LOCATIONS = ("body", "query", "path", "header", "cookie")


def normalize_slug(value: Any) -> Any:
    """Slugs are compared and stored trimmed and lowercased."""
    if isinstance(value, str):
        return value.strip().lower()
    return value


def strip_text(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip()
    return value


Slug = Annotated[
    str,
    BeforeValidator(normalize_slug),
    Field(min_length=SLUG_MIN_LENGTH, max_length=SLUG_MAX_LENGTH, pattern=SLUG_PATTERN),
]
OrganizationName = Annotated[
    str,
    BeforeValidator(strip_text),
    Field(min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH),
]
TaskTitle = Annotated[
    str,
    BeforeValidator(strip_text),
    Field(min_length=TASK_TITLE_MIN_LENGTH),
]

_slug_adapter = TypeAdapter(Slug)
_name_adapter = TypeAdapter(OrganizationName)
_title_adapter = TypeAdapter(TaskTitle)


def describe_errors(errors: list[dict[str, Any]]) -> dict[str, str]:
    """Map pydantic error entries to ``{field: message}``, first error per field."""
    details: dict[str, str] = {}
    for error in errors:
        parts = [str(part) for part in error.get("loc", ()) if part not in REQUEST_LOCATIONS]
        field = ".".join(parts) or "body"
        details.setdefault(field, error["msg"])
    return details


def _check(adapter: TypeAdapter, field: str, value: Any) -> Any:
    try:
        return adapter.validate_python(value)
    except PydanticValidationError as e:
        raise ValidationError(field, e.errors()[0]["msg"]) from None


def validate_slug(slug: Any) -> str:
    """Normalize a slug and enforce the format rule.

    Raises:
        ValidationError: naming the ``slug`` field
    """
    return _check(_slug_adapter, "slug", slug)


def validate_name(name: Any) -> str:
    return _check(_name_adapter, "name", name)


def validate_task_title(title: Any) -> str:
    return _check(_title_adapter, "title", title)
