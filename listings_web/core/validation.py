"""
Listing validation gate.

Form fields arrive as `listing[title]`, `listing[price]`, ...; they are
collected into a dict and checked against `ListingIn`. Every failing field
is reported, and the messages are joined with "," for display.
"""

import re
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from listings_web.core.exceptions import FieldError, ValidationFailure
from listings_web.schemas.listing import ListingIn, ListingSearch

_NESTED_KEY = re.compile(r"^(\w+)\[(\w+)\]$")

_MESSAGES = {
    "missing": "is required",
    "string_too_short": "is not allowed to be empty",
    "string_too_long": "length must be less than or equal to {max_length} characters long",
    "string_type": "must be a string",
    "greater_than_equal": "must be greater than or equal to {ge:g}",
    "float_parsing": "must be a number",
    "float_type": "must be a number",
    "finite_number": "must be a number",
}


def nested_form(form: Mapping[str, Any], name: str) -> dict[str, Any] | None:
    """Collect `name[field]` keys of a submitted form into a dict; None if there are none."""
    items = form.multi_items() if hasattr(form, "multi_items") else form.items()
    data = {}
    for key, value in items:
        match = _NESTED_KEY.match(key)
        if match and match.group(1) == name:
            data[match.group(2)] = value
    return data or None


def field_errors(exc: ValidationError, prefix: str | None = None) -> list[FieldError]:
    """Translate pydantic errors into FieldErrors with readable messages."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"])
        if prefix:
            field = f"{prefix}.{field}"
        template = _MESSAGES.get(error["type"])
        if template:
            text = template.format(**error.get("ctx", {}))
        else:
            text = error["msg"]
        errors.append(FieldError(field=field, message=f'"{field}" {text}'))
    return errors


def validate_listing(payload: Mapping[str, Any] | None) -> ListingIn:
    """Check a listing payload; raise ValidationFailure listing every problem."""
    if payload is None:
        raise ValidationFailure([FieldError(field="listing", message='"listing" is required')])
    try:
        return ListingIn.model_validate(dict(payload))
    except ValidationError as exc:
        raise ValidationFailure(field_errors(exc, prefix="listing")) from None


def validate_search(payload: Mapping[str, Any]) -> ListingSearch:
    try:
        return ListingSearch.model_validate(dict(payload))
    except ValidationError as exc:
        raise ValidationFailure(field_errors(exc)) from None
