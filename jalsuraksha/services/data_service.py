"""
Data service for dashboard aggregation across the entity repositories.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

import pandas as pd

from jalsuraksha.repositories import (
    AlertRepository,
    DiseaseReportRepository,
    PHCRepository,
    WaterQualityTestRepository,
)
from jalsuraksha.schemas import CaseTrendPoint, DashboardSummary, PHCStatistics
from jalsuraksha.services.validation import validate_days


logger = logging.getLogger(__name__)

RECENT_DAYS = 7


class DataService:
    """Service for cross-entity queries and summaries."""

    def __init__(
        self,
        phcs: PHCRepository,
        disease_reports: DiseaseReportRepository,
        water_tests: WaterQualityTestRepository,
        alerts: AlertRepository,
    ):
        self.phcs = phcs
        self.disease_reports = disease_reports
        self.water_tests = water_tests
        self.alerts = alerts

    def dashboard_summary(self) -> DashboardSummary:
        """
        Headline counts for the dashboard, as of now.

        The four reads are independent and not a snapshot: records may
        change between them.
        """
        active_alerts = self.alerts.list_active()
        recent_reports = self.disease_reports.list_recent(RECENT_DAYS)
        recent_tests = self.water_tests.list_recent(RECENT_DAYS)
        all_phcs = self.phcs.list()

        summary = DashboardSummary(
            total_phcs=len(all_phcs),
            active_alerts=len(active_alerts),
            recent_disease_reports=len(recent_reports),
            recent_water_tests=len(recent_tests),
            critical_alerts=sum(1 for alert in active_alerts if alert.severity == "critical"),
            high_risk_phcs=len({alert.phc_id for alert in active_alerts}),
        )
        logger.debug(f"Dashboard summary: {summary}")
        return summary

    def case_trend(
        self,
        days: int = 30,
        phc_id: Optional[str] = None,
        disease_type: Optional[str] = None,
    ) -> List[CaseTrendPoint]:
        """
        Daily case totals for the last ``days`` days, today included.

        Days without reports appear with zero cases.
        """
        days = validate_days(days)
        now = self.disease_reports.clock()
        end_day = now.date()
        start_day = end_day - timedelta(days=days - 1)
        start = datetime(start_day.year, start_day.month, start_day.day)

        reports = self.disease_reports.list_by_date_range(start, now)
        if phc_id:
            reports = [r for r in reports if r.phc_id == phc_id]
        if disease_type:
            reports = [r for r in reports if r.disease_type == disease_type]

        date_range = pd.date_range(start=start_day, end=end_day, freq="D")
        daily = pd.DataFrame({"cases": 0, "reports": 0}, index=date_range)

        if reports:
            frame = pd.DataFrame({
                "day": pd.to_datetime([r.report_date.date() for r in reports]),
                "cases": [r.case_count for r in reports],
            })
            grouped = frame.groupby("day").agg(cases=("cases", "sum"), reports=("cases", "size"))
            daily = grouped.reindex(date_range, fill_value=0)

        return [
            CaseTrendPoint(day=ts.date(), cases=int(row.cases), reports=int(row.reports))
            for ts, row in daily.iterrows()
        ]

    def phc_statistics(self, phc_id: str) -> Optional[PHCStatistics]:
        """Report, test and alert counts for one PHC; None if it does not exist."""
        phc = self.phcs.get(phc_id)
        if phc is None:
            return None

        reports = self.disease_reports.list_by_phc(phc_id)
        tests = self.water_tests.list_by_phc(phc_id)
        active_alerts = [a for a in self.alerts.list_by_phc(phc_id) if a.status == "active"]
        recent_cutoff = self.disease_reports.clock() - timedelta(days=30)

        return PHCStatistics(
            phc_id=phc.id,
            phc_name=phc.name,
            district=phc.district,
            state=phc.state,
            total_reports=len(reports),
            total_cases=sum(r.case_count for r in reports),
            recent_cases_30d=sum(r.case_count for r in reports if r.report_date >= recent_cutoff),
            water_tests=len(tests),
            contaminated_tests=sum(1 for t in tests if t.status == "contaminated"),
            active_alerts=len(active_alerts),
        )
