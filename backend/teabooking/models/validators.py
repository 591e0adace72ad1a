"""Shared field validators for request models."""

from __future__ import annotations

import re
from typing import Annotated, Optional

from pydantic import AfterValidator, BeforeValidator, StringConstraints

from teabooking.core.constants import (
    LOCATION_MAX_LENGTH,
    MESSAGE_MAX_LENGTH,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    NOTES_MAX_LENGTH,
    PHONE_MAX_LENGTH,
    PHONE_MIN_LENGTH,
    PHONE_PATTERN,
)

_HTML_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        '"': "&quot;",
        "'": "&#x27;",
        "<": "&lt;",
        ">": "&gt;",
        "/": "&#x2F;",
        "\\": "&#x5C;",
        "`": "&#96;",
    }
)

_PHONE_RE = re.compile(PHONE_PATTERN)


def escape_html(value: str) -> str:
    """Replace characters that are significant in HTML with entities."""
    return value.translate(_HTML_ESCAPES)


def _escape_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return escape_html(value)


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_phone(value: str) -> str:
    if not _PHONE_RE.match(value):
        raise ValueError("Invalid phone number format")
    return value


Name = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True, min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH
    ),
    AfterValidator(escape_html),
]

Phone = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True, min_length=PHONE_MIN_LENGTH, max_length=PHONE_MAX_LENGTH
    ),
    AfterValidator(_check_phone),
]

Location = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=LOCATION_MAX_LENGTH),
    AfterValidator(escape_html),
]

OptionalLocation = Annotated[
    Optional[Annotated[str, StringConstraints(strip_whitespace=True, max_length=LOCATION_MAX_LENGTH)]],
    BeforeValidator(_blank_to_none),
    AfterValidator(_escape_optional),
]

OptionalNotes = Annotated[
    Optional[Annotated[str, StringConstraints(strip_whitespace=True, max_length=NOTES_MAX_LENGTH)]],
    BeforeValidator(_blank_to_none),
    AfterValidator(_escape_optional),
]

Message = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=MESSAGE_MAX_LENGTH),
    AfterValidator(escape_html),
]
