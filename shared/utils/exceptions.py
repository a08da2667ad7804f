"""
Exception types shared by the stores and the Social API service.
"""

from typing import Any, Iterable


class SocialApiError(Exception):
    """Base class for all errors raised by the social API layers."""


class RecordValidationError(SocialApiError):
    """A record failed validation (missing field, bad format, bad length)."""


class DuplicateKeyError(RecordValidationError):
    """A unique field value is already owned by another record."""

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(f"Duplicate key error: {field} \"{value}\" already exists")


class StoreError(SocialApiError):
    """The store could not be reached or failed unexpectedly."""


def describe_validation_error(entity: str, errors: Iterable[dict]) -> str:
    """Build a readable message from pydantic error dictionaries.

    Args:
        entity: Name of the record type, e.g. "User".
        errors: The output of ``ValidationError.errors()``.

    Returns:
        str: A message such as "User validation failed: email: Field required".
    """
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return f"{entity} validation failed: {', '.join(parts)}"
