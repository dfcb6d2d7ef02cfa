"""
SQLAlchemy record backend.

Each call runs in its own session; rows are converted to frozen records on
the way out so nothing outside this module ever holds an ORM instance.
"""

import logging
from datetime import datetime
from typing import Any, List, Optional, Type

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from jalsuraksha.database import Base, session_scope
from jalsuraksha.exceptions import IdentifierCollisionError, StoreError
from jalsuraksha.storage.base import R, RecordBackend


logger = logging.getLogger(__name__)


class SqlBackend(RecordBackend[R]):
    """Stores records as rows of a mapped table."""

    def __init__(self, name: str, record_class: Type[R], model_class: Type[Base], session_factory: sessionmaker):
        super().__init__(name, record_class)
        self.model_class = model_class
        self.session_factory = session_factory

    def _to_record(self, row) -> R:
        return self.record_class.model_validate(row)

    def _row_values(self, record: R) -> dict:
        values = record.model_dump()
        for key, value in values.items():
            if isinstance(value, tuple):
                values[key] = list(value)
        return values

    def _fail(self, error: SQLAlchemyError, operation: str):
        logger.error(f"Database error in {self.name}.{operation}: {error}", exc_info=True)
        raise StoreError(str(error), self.name, operation) from error

    def get(self, record_id: str) -> Optional[R]:
        try:
            with session_scope(self.session_factory) as session:
                row = session.get(self.model_class, record_id)
                return self._to_record(row) if row is not None else None
        except SQLAlchemyError as e:
            self._fail(e, "get")

    def all(self) -> List[R]:
        try:
            with session_scope(self.session_factory) as session:
                rows = session.scalars(select(self.model_class)).all()
                return [self._to_record(row) for row in rows]
        except SQLAlchemyError as e:
            self._fail(e, "all")

    def insert(self, record: R) -> R:
        try:
            with session_scope(self.session_factory) as session:
                if session.get(self.model_class, record.id) is not None:
                    raise IdentifierCollisionError(self.name, record.id)
                session.add(self.model_class(**self._row_values(record)))
            return record
        except SQLAlchemyError as e:
            self._fail(e, "insert")

    def replace(self, record: R) -> Optional[R]:
        try:
            with session_scope(self.session_factory) as session:
                row = session.get(self.model_class, record.id)
                if row is None:
                    return None
                for key, value in self._row_values(record).items():
                    setattr(row, key, value)
            return record
        except SQLAlchemyError as e:
            self._fail(e, "replace")

    def remove(self, record_id: str) -> bool:
        try:
            with session_scope(self.session_factory) as session:
                row = session.get(self.model_class, record_id)
                if row is None:
                    return False
                session.delete(row)
                return True
        except SQLAlchemyError as e:
            self._fail(e, "remove")

    def find(self, **equals: Any) -> List[R]:
        try:
            with session_scope(self.session_factory) as session:
                rows = session.scalars(select(self.model_class).filter_by(**equals)).all()
                return [self._to_record(row) for row in rows]
        except SQLAlchemyError as e:
            self._fail(e, "find")

    def find_between(
        self, field: str, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[R]:
        column = getattr(self.model_class, field)
        query = select(self.model_class)
        if start is not None:
            query = query.where(column >= start)
        if end is not None:
            query = query.where(column <= end)
        try:
            with session_scope(self.session_factory) as session:
                return [self._to_record(row) for row in session.scalars(query).all()]
        except SQLAlchemyError as e:
            self._fail(e, "find_between")

    def count(self) -> int:
        try:
            with session_scope(self.session_factory) as session:
                return session.scalar(select(func.count()).select_from(self.model_class))
        except SQLAlchemyError as e:
            self._fail(e, "count")
