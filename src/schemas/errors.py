"""Error envelopes shared by all endpoints."""
from collections.abc import Sequence
from typing import Any, Literal

from pydantic import BaseModel

# Fields whose submitted values must never be echoed back
SENSITIVE_FIELDS = frozenset({"password"})


class ErrorResponse(BaseModel):
    """``{"success": false, "error": "..."}``"""

    success: Literal[False] = False
    error: str


class FieldError(BaseModel):
    """One failed field check."""

    field: str
    message: str
    location: str
    value: Any = None


class ValidationErrorResponse(BaseModel):
    """``{"success": false, "errors": [...]}`` for rejected input."""

    success: Literal[False] = False
    errors: list[FieldError]


def field_errors_from_pydantic(errors: Sequence[Any]) -> list[FieldError]:
    """
    Convert pydantic/FastAPI error dicts to FieldError entries.

    ``loc`` looks like ``("query", "email")`` or ``("body", "username")``.
    Messages from ``ValueError`` raised in validators carry a "Value error, "
    prefix which is stripped.
    """
    result = []
    for error in errors:
        loc = tuple(error.get("loc", ()))
        location = str(loc[0]) if loc else ""
        field = str(loc[-1]) if loc else ""
        message = str(error.get("msg", "Invalid value")).removeprefix("Value error, ")
        value = None if field in SENSITIVE_FIELDS else error.get("input")
        if not isinstance(value, str | int | float | bool | type(None)):
            value = None
        result.append(FieldError(field=field, message=message, location=location, value=value))
    return result
