"""
Error types raised by the surveillance store.

"Not found" is not an error here: lookups return None and deletes return
False so callers can tell a missing record from a rejected one.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional


class SurveillanceError(Exception):
    """Base class for all store errors."""


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class ValidationFailure(SurveillanceError):
    """Input violates a field constraint or a business rule."""

    def __init__(self, errors: Iterable[FieldError]):
        self.errors: List[FieldError] = list(errors)
        super().__init__(
            "; ".join(f"{e.field}: {e.message}" for e in self.errors) or "Validation failed"
        )

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationFailure":
        return cls([FieldError(field, message)])

    def details(self) -> List[dict]:
        return [e.to_dict() for e in self.errors]


class InvalidTransitionError(ValidationFailure):
    """Requested alert status change is not allowed from the current status."""

    def __init__(self, current: str, requested: str, reason: Optional[str] = None):
        self.current = current
        self.requested = requested
        message = reason or f"Cannot change status from '{current}' to '{requested}'"
        super().__init__([FieldError("status", message)])


class StoreError(SurveillanceError):
    """Unexpected failure inside a storage backend."""

    def __init__(self, message: str, repository: str, operation: str):
        self.repository = repository
        self.operation = operation
        super().__init__(f"[{repository}] {operation}: {message}")


class IdentifierCollisionError(StoreError):
    """A generated identifier is already held by a live record."""

    def __init__(self, repository: str, record_id: str):
        self.record_id = record_id
        super().__init__(f"identifier {record_id} already in use", repository, "insert")
