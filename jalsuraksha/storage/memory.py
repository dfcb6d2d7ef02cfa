"""
In-memory record backend.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Type

from jalsuraksha.exceptions import IdentifierCollisionError
from jalsuraksha.storage.base import R, RecordBackend


class MemoryBackend(RecordBackend[R]):
    """Dictionary-backed storage; filtered queries are linear scans."""

    def __init__(self, name: str, record_class: Type[R]):
        super().__init__(name, record_class)
        self._records: Dict[str, R] = {}

    def get(self, record_id: str) -> Optional[R]:
        return self._records.get(record_id)

    def all(self) -> List[R]:
        return list(self._records.values())

    def insert(self, record: R) -> R:
        if record.id in self._records:
            raise IdentifierCollisionError(self.name, record.id)
        self._records[record.id] = record
        return record

    def replace(self, record: R) -> Optional[R]:
        if record.id not in self._records:
            return None
        self._records[record.id] = record
        return record

    def remove(self, record_id: str) -> bool:
        return self._records.pop(record_id, None) is not None

    def find(self, **equals: Any) -> List[R]:
        return [
            record for record in self._records.values()
            if all(getattr(record, key) == value for key, value in equals.items())
        ]

    def find_between(
        self, field: str, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[R]:
        matches = []
        for record in self._records.values():
            value = getattr(record, field)
            if start is not None and value < start:
                continue
            if end is not None and value > end:
                continue
            matches.append(record)
        return matches

    def count(self) -> int:
        return len(self._records)
