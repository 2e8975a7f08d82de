"""Reusable validators for request schemas."""

import re

SPECIAL_CHARS = "@$!%*?&#^()_-+=.,;:"
PASSWORD_MIN_LENGTH = 8


def validate_password_strength(value: str) -> str:
    """At least 8 characters with upper, lower, digit and special character.

    Raises:
        ValueError: If any rule fails
    """
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if not re.search(r"[A-Z]", value):
        raise ValueError("Password must contain an uppercase letter")
    if not re.search(r"[a-z]", value):
        raise ValueError("Password must contain a lowercase letter")
    if not re.search(r"\d", value):
        raise ValueError("Password must contain a digit")
    if not any(ch in SPECIAL_CHARS for ch in value):
        raise ValueError("Password must contain a special character")
    return value


def strip_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None
