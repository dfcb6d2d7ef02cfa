"""
Entity repositories for the surveillance store.

Each repository validates its input at the boundary, assigns server-side
fields (identifier, timestamps) and delegates storage to a RecordBackend.
Every operation on a repository holds that repository's lock, so concurrent
writers to the same repository never interleave; the last write wins.

Missing records are reported by return value: ``get``/``update`` return None
and ``delete`` returns False.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Any, Generic, List, Optional, Type

from pydantic import BaseModel

from jalsuraksha import lifecycle
from jalsuraksha.clock import Clock, utc_now
from jalsuraksha.exceptions import ValidationFailure
from jalsuraksha.identifiers import IdentifierGenerator
from jalsuraksha.schemas import (
    AlertCreate, AlertRecord, AlertUpdate,
    DiseaseReportCreate, DiseaseReportRecord, DiseaseReportUpdate,
    PHCCreate, PHCRecord, PHCUpdate,
    UserCreate, UserRecord, UserUpdate,
    WaterQualityTestCreate, WaterQualityTestRecord, WaterQualityTestUpdate,
)
from jalsuraksha.services.validation import normalize_email, validate_days, validate_payload
from jalsuraksha.storage.base import R, RecordBackend


logger = logging.getLogger(__name__)


def newest_first(records: List[R], field: str) -> List[R]:
    return sorted(records, key=lambda record: getattr(record, field), reverse=True)


class Repository(Generic[R]):
    """Create/read/update/delete over one record type."""

    record_class: Type[R]
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]

    def __init__(
        self,
        backend: RecordBackend[R],
        identifiers: Optional[IdentifierGenerator] = None,
        clock: Optional[Clock] = None,
    ):
        self.backend = backend
        self.identifiers = identifiers or IdentifierGenerator()
        self.clock = clock or utc_now
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return self.backend.name

    def get(self, record_id: str) -> Optional[R]:
        with self._lock:
            return self.backend.get(record_id)

    def list(self) -> List[R]:
        with self._lock:
            return self.backend.all()

    def count(self) -> int:
        with self._lock:
            return self.backend.count()

    def create(self, payload: Any) -> R:
        """
        Validate and store a new record.

        Raises:
            ValidationFailure: the payload fails a field or business rule
        """
        data = validate_payload(self.create_schema, payload)
        with self._lock:
            values = data.model_dump()
            self._check_create(values)
            now = self.clock()
            values.update(self._server_fields(values, now))
            values["id"] = self.identifiers.next()
            values["created_at"] = now
            record = self.record_class.model_validate(values)
            self.backend.insert(record)
        logger.info(f"Created {self.name} record {record.id}")
        return record

    def update(self, record_id: str, payload: Any) -> Optional[R]:
        """
        Replace the given fields of a record, leaving all others unchanged.

        Returns:
            The new version, or None if no record has this id

        Raises:
            ValidationFailure: the payload fails a field or business rule
        """
        changes = validate_payload(self.update_schema, payload).changes()
        with self._lock:
            current = self.backend.get(record_id)
            if current is None:
                return None
            if not changes:
                return current
            self._check_update(current, changes)
            return self._replace(current, changes)

    def delete(self, record_id: str) -> bool:
        with self._lock:
            removed = self.backend.remove(record_id)
        if removed:
            logger.info(f"Deleted {self.name} record {record_id}")
        return removed

    def _replace(self, current: R, changes: dict) -> R:
        record = self.record_class.model_validate({**current.model_dump(), **changes})
        self.backend.replace(record)
        return record

    def _check_create(self, values: dict) -> None:
        """Business rules beyond the schema; raise ValidationFailure."""

    def _check_update(self, current: R, changes: dict) -> None:
        """Business rules beyond the schema; raise ValidationFailure."""

    def _server_fields(self, values: dict, now: datetime) -> dict:
        """Extra fields assigned at creation."""
        return {}


class PHCRepository(Repository[PHCRecord]):
    record_class = PHCRecord
    create_schema = PHCCreate
    update_schema = PHCUpdate

    def list_by_state(self, state: str) -> List[PHCRecord]:
        with self._lock:
            return self.backend.find(state=state)

    def list_by_district(self, district: str) -> List[PHCRecord]:
        with self._lock:
            return self.backend.find(district=district)


class DatedRepository(Repository[R]):
    """Records owned by a PHC and stamped with an observation date."""

    date_field: str

    def list_by_phc(self, phc_id: str) -> List[R]:
        with self._lock:
            return self.backend.find(phc_id=phc_id)

    def list_by_date_range(self, start: datetime, end: datetime) -> List[R]:
        """Records dated within ``[start, end]``, both ends inclusive."""
        with self._lock:
            return self.backend.find_between(self.date_field, start, end)

    def list_recent(self, days: int = 7) -> List[R]:
        """Records dated on or after ``now - days``, newest first."""
        days = validate_days(days)
        cutoff = self.clock() - timedelta(days=days)
        with self._lock:
            records = self.backend.find_between(self.date_field, cutoff)
        return newest_first(records, self.date_field)


class DiseaseReportRepository(DatedRepository[DiseaseReportRecord]):
    record_class = DiseaseReportRecord
    create_schema = DiseaseReportCreate
    update_schema = DiseaseReportUpdate
    date_field = "report_date"


class WaterQualityTestRepository(DatedRepository[WaterQualityTestRecord]):
    record_class = WaterQualityTestRecord
    create_schema = WaterQualityTestCreate
    update_schema = WaterQualityTestUpdate
    date_field = "test_date"


class UserRepository(Repository[UserRecord]):
    record_class = UserRecord
    create_schema = UserCreate
    update_schema = UserUpdate

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        with self._lock:
            matches = self.backend.find(email=normalize_email(email))
        return matches[0] if matches else None

    def _check_create(self, values: dict) -> None:
        self._check_email_free(values["email"])

    def _check_update(self, current: UserRecord, changes: dict) -> None:
        if "email" in changes and changes["email"] != current.email:
            self._check_email_free(changes["email"])

    def _check_email_free(self, email: str) -> None:
        if self.backend.find(email=email):
            raise ValidationFailure.single("email", "Email is already registered")


class AlertRepository(Repository[AlertRecord]):
    """
    Alerts start out active. Status changes go through ``verify``/``resolve``
    or, for false alarms, a direct status update checked by
    :func:`lifecycle.check_status_change`.
    """

    record_class = AlertRecord
    create_schema = AlertCreate
    update_schema = AlertUpdate

    def _server_fields(self, values: dict, now: datetime) -> dict:
        return {
            "status": lifecycle.ACTIVE,
            "alerted_at": now,
            "verified_at": None,
            "verified_by": None,
            "resolved_at": None,
            "resolved_by": None,
        }

    def _check_update(self, current: AlertRecord, changes: dict) -> None:
        if "status" in changes:
            lifecycle.check_status_change(current, changes["status"])

    def verify(self, alert_id: str, verified_by: str) -> Optional[AlertRecord]:
        with self._lock:
            current = self.backend.get(alert_id)
            if current is None:
                return None
            return self._replace(current, lifecycle.verification_changes(current, verified_by, self.clock()))

    def resolve(self, alert_id: str, resolved_by: str) -> Optional[AlertRecord]:
        with self._lock:
            current = self.backend.get(alert_id)
            if current is None:
                return None
            return self._replace(current, lifecycle.resolution_changes(current, resolved_by, self.clock()))

    def list_by_phc(self, phc_id: str) -> List[AlertRecord]:
        with self._lock:
            return newest_first(self.backend.find(phc_id=phc_id), "alerted_at")

    def list_by_status(self, status: str) -> List[AlertRecord]:
        with self._lock:
            return newest_first(self.backend.find(status=status), "alerted_at")

    def list_by_severity(self, severity: str) -> List[AlertRecord]:
        with self._lock:
            return newest_first(self.backend.find(severity=severity), "alerted_at")

    def list_active(self) -> List[AlertRecord]:
        return self.list_by_status(lifecycle.ACTIVE)

    def list_recent(self, days: int = 7) -> List[AlertRecord]:
        days = validate_days(days)
        cutoff = self.clock() - timedelta(days=days)
        with self._lock:
            records = self.backend.find_between("alerted_at", cutoff)
        return newest_first(records, "alerted_at")
