"""
Alert service for managing the outbreak alert lifecycle.
"""

import logging
from collections import Counter
from datetime import timedelta
from typing import Any, List, Optional

from jalsuraksha import lifecycle
from jalsuraksha.repositories import AlertRepository
from jalsuraksha.schemas import AlertRecord, AlertStatistics
from jalsuraksha.services.validation import validate_actor


logger = logging.getLogger(__name__)

SEVERITIES = ("low", "medium", "high", "critical")


class AlertService:
    """Drives alerts through verification and resolution."""

    def __init__(self, alerts: AlertRepository):
        self.alerts = alerts

    def verify(self, alert_id: str, verified_by: Any) -> Optional[AlertRecord]:
        """
        Record who verified an alert and when.

        Repeated calls overwrite the verifier and timestamp. Alerts that are
        already resolved or marked as false alarms keep their status.

        Returns:
            The updated alert, or None if no alert has this id
        """
        verified_by = validate_actor(verified_by, "verifiedBy")
        alert = self.alerts.verify(alert_id, verified_by)
        if alert is None:
            logger.info(f"Verify requested for unknown alert {alert_id}")
            return None
        logger.info(f"Alert {alert_id} verified by {verified_by} (status {alert.status})")
        return alert

    def resolve(self, alert_id: str, resolved_by: Any) -> Optional[AlertRecord]:
        """
        Record who resolved an alert and when.

        Active alerts may be resolved without being verified first.

        Returns:
            The updated alert, or None if no alert has this id
        """
        resolved_by = validate_actor(resolved_by, "resolvedBy")
        alert = self.alerts.resolve(alert_id, resolved_by)
        if alert is None:
            logger.info(f"Resolve requested for unknown alert {alert_id}")
            return None
        logger.info(f"Alert {alert_id} resolved by {resolved_by} (status {alert.status})")
        return alert

    def mark_false_alarm(self, alert_id: str) -> Optional[AlertRecord]:
        alert = self.alerts.update(alert_id, {"status": lifecycle.FALSE_ALARM})
        if alert is not None:
            logger.info(f"Alert {alert_id} marked as false alarm")
        return alert

    def get_active_alerts(self, phc_id: Optional[str] = None) -> List[AlertRecord]:
        """Active alerts, newest first, optionally for one PHC."""
        alerts = self.alerts.list_active()
        if phc_id:
            alerts = [alert for alert in alerts if alert.phc_id == phc_id]
        return alerts

    def alert_statistics(self) -> AlertStatistics:
        """Counts per status, active counts per severity, and 30-day volume."""
        alerts = self.alerts.list()
        by_status = Counter(alert.status for alert in alerts)
        active_by_severity = Counter(
            alert.severity for alert in alerts if alert.status == lifecycle.ACTIVE
        )
        recent_cutoff = self.alerts.clock() - timedelta(days=30)

        return AlertStatistics(
            total_alerts=len(alerts),
            active_alerts=by_status[lifecycle.ACTIVE],
            verified_alerts=by_status[lifecycle.VERIFIED],
            resolved_alerts=by_status[lifecycle.RESOLVED],
            false_alarms=by_status[lifecycle.FALSE_ALARM],
            severity_counts={severity: active_by_severity[severity] for severity in SEVERITIES},
            recent_alerts_30d=sum(1 for alert in alerts if alert.alerted_at >= recent_cutoff),
        )
