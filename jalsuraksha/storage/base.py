"""
Backend interface shared by the memory and SQL storage implementations.

A backend stores frozen pydantic records keyed by their ``id``. It knows
nothing about validation, timestamps or ordering; repositories layer those
on top so the same repository code runs against any backend.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel


R = TypeVar("R", bound=BaseModel)


class RecordBackend(ABC, Generic[R]):
    """Keyed record storage with equality and range filters."""

    def __init__(self, name: str, record_class: Type[R]):
        self.name = name
        self.record_class = record_class

    @abstractmethod
    def get(self, record_id: str) -> Optional[R]:
        """Return the record with this id, or None."""

    @abstractmethod
    def all(self) -> List[R]:
        """Return every stored record."""

    @abstractmethod
    def insert(self, record: R) -> R:
        """
        Store a new record.

        Raises:
            IdentifierCollisionError: a record with the same id exists
        """

    @abstractmethod
    def replace(self, record: R) -> Optional[R]:
        """Swap in a new version of an existing record; None if absent."""

    @abstractmethod
    def remove(self, record_id: str) -> bool:
        """Delete a record; True iff it existed."""

    @abstractmethod
    def find(self, **equals: Any) -> List[R]:
        """Records whose attributes equal all given values."""

    @abstractmethod
    def find_between(
        self, field: str, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[R]:
        """Records with ``start <= field <= end``; a missing bound is open."""

    def count(self) -> int:
        return len(self.all())
