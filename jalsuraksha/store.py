"""
Composition root for the surveillance store.

A SurveillanceStore is built explicitly and handed to whoever needs it;
there is no module-level instance. It starts empty unless ``seed=True``.
"""

import logging
from typing import Optional

from sqlalchemy.orm import sessionmaker

from jalsuraksha import models
from jalsuraksha.clock import Clock, utc_now
from jalsuraksha.config import Settings
from jalsuraksha.database import init_database
from jalsuraksha.identifiers import IdentifierGenerator
from jalsuraksha.repositories import (
    AlertRepository,
    DiseaseReportRepository,
    PHCRepository,
    UserRepository,
    WaterQualityTestRepository,
)
from jalsuraksha.schemas import (
    AlertRecord,
    DiseaseReportRecord,
    PHCRecord,
    UserRecord,
    WaterQualityTestRecord,
)
from jalsuraksha.services.alert_service import AlertService
from jalsuraksha.services.data_service import DataService
from jalsuraksha.storage import MemoryBackend, SqlBackend


logger = logging.getLogger(__name__)

BACKENDS = ("memory", "sql")


class SurveillanceStore:
    """
    Owns one repository per entity plus the alert and dashboard services.

    Args:
        backend: "memory" or "sql"
        session_factory: required for the SQL backend; tables must exist
        identifiers: shared identifier generator for all repositories
        clock: source of "now" for timestamps and recency queries
        seed: load the sample PHCs and admin user
    """

    def __init__(
        self,
        backend: str = "memory",
        session_factory: Optional[sessionmaker] = None,
        identifiers: Optional[IdentifierGenerator] = None,
        clock: Optional[Clock] = None,
        seed: bool = False,
    ):
        if backend not in BACKENDS:
            raise ValueError(f"Unknown storage backend '{backend}', expected one of {BACKENDS}")
        if backend == "sql" and session_factory is None:
            raise ValueError("The sql backend needs a session_factory")

        self.backend_name = backend
        self.identifiers = identifiers or IdentifierGenerator()
        self.clock = clock or utc_now

        def make(name, record_class, model_class):
            if backend == "sql":
                return SqlBackend(name, record_class, model_class, session_factory)
            return MemoryBackend(name, record_class)

        shared = {"identifiers": self.identifiers, "clock": self.clock}
        self.phcs = PHCRepository(make("phcs", PHCRecord, models.PHC), **shared)
        self.disease_reports = DiseaseReportRepository(
            make("disease_reports", DiseaseReportRecord, models.DiseaseReport), **shared
        )
        self.water_tests = WaterQualityTestRepository(
            make("water_quality_tests", WaterQualityTestRecord, models.WaterQualityTest), **shared
        )
        self.users = UserRepository(make("users", UserRecord, models.User), **shared)
        self.alerts = AlertRepository(make("alerts", AlertRecord, models.Alert), **shared)

        self.alert_service = AlertService(self.alerts)
        self.data_service = DataService(self.phcs, self.disease_reports, self.water_tests, self.alerts)

        if seed:
            from jalsuraksha.seed import seed_sample_data

            seed_sample_data(self)

    @classmethod
    def from_settings(cls, settings: Settings, clock: Optional[Clock] = None) -> "SurveillanceStore":
        """Build a store as configured by the environment."""
        session_factory = None
        if settings.storage_backend == "sql":
            session_factory = init_database(settings.database_url)
        logger.info(f"Starting surveillance store with {settings.storage_backend} backend")
        return cls(
            backend=settings.storage_backend,
            session_factory=session_factory,
            clock=clock,
            seed=settings.seed_sample_data,
        )
