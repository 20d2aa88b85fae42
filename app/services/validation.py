"""
Validation helpers for school registration
"""

from __future__ import annotations

import re

from pydantic import AnyHttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# Digits, spaces, "+", "-" and parentheses; at least 10 characters.
CONTACT_PATTERN = re.compile(r"^[0-9+\-\s()]{10,}$")

_http_url = TypeAdapter(AnyHttpUrl)


def validate_email(email: str) -> str:
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email format")
    return email


def validate_contact(contact: str) -> str:
    if not CONTACT_PATTERN.match(contact):
        raise ValidationError("Invalid contact number format")
    return contact


def validate_image_url(image: str | None) -> str | None:
    """Empty values become None; anything else must be an absolute http(s) URL."""

    if not image:
        return None
    try:
        _http_url.validate_python(image)
    except PydanticValidationError as exc:
        raise ValidationError("Invalid image URL format") from exc
    return image
