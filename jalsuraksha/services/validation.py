"""
Validation boundary for untyped input.

Everything arriving from a network payload passes through here once and
comes out as a typed schema instance; repositories never see raw dicts.
Failures are reported as a ValidationFailure carrying one entry per
offending field.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, EmailStr, TypeAdapter, ValidationError

from jalsuraksha.exceptions import FieldError, ValidationFailure
from jalsuraksha.schemas import Timestamp


S = TypeVar("S", bound=BaseModel)

_timestamp = TypeAdapter(Timestamp)
_email = TypeAdapter(EmailStr)


def _field_path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "body"


def to_failure(error: ValidationError) -> ValidationFailure:
    """Convert a pydantic error into field-addressed failures."""
    return ValidationFailure(
        FieldError(_field_path(e["loc"]), e["msg"]) for e in error.errors()
    )


def validate_payload(schema: Type[S], payload: Any) -> S:
    """
    Validate a payload against an input schema.

    Args:
        schema: Create or Update schema class
        payload: mapping from the caller, or an already validated instance

    Raises:
        ValidationFailure: the payload does not satisfy the schema
    """
    if isinstance(payload, schema):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    if not isinstance(payload, Mapping):
        raise ValidationFailure.single("body", "Expected an object")
    try:
        return schema.model_validate(dict(payload))
    except ValidationError as e:
        raise to_failure(e) from e


def validate_days(days: Any, field: str = "days") -> int:
    """Window length for recency queries: a whole number of days >= 1."""
    if isinstance(days, bool):
        raise ValidationFailure.single(field, "Must be a whole number of days")
    try:
        value = int(days)
    except (TypeError, ValueError):
        raise ValidationFailure.single(field, "Must be a whole number of days")
    if isinstance(days, float) and not days.is_integer():
        raise ValidationFailure.single(field, "Must be a whole number of days")
    if value < 1:
        raise ValidationFailure.single(field, "Must be at least 1")
    return value


def validate_timestamp(value: Any, field: str) -> datetime:
    try:
        return _timestamp.validate_python(value)
    except ValidationError:
        raise ValidationFailure.single(field, "Invalid date")


def validate_date_range(
    start: Any, end: Any, start_field: str = "startDate", end_field: str = "endDate"
) -> Tuple[datetime, datetime]:
    """Parse an inclusive date range; the start may not be after the end."""
    start_at = validate_timestamp(start, start_field)
    end_at = validate_timestamp(end, end_field)
    if start_at > end_at:
        raise ValidationFailure.single(end_field, "End date must not be before start date")
    return start_at, end_at


def validate_actor(name: Optional[Any], field: str) -> str:
    """Name of the person verifying or resolving an alert."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationFailure.single(field, f"{field} is required")
    return name


def normalize_email(email: str) -> str:
    """
    Normalize an address the way stored emails are (the domain is
    lowercased). Strings that are not valid addresses come back unchanged.
    """
    try:
        return _email.validate_python(email)
    except ValidationError:
        return email
