"""
Alert status rules.

An alert's status follows from its verification and resolution fields:
resolved if a resolution is recorded, verified if only a verification is,
active otherwise. ``false-alarm`` is the exception; it can only be set by a
direct status update and is never left again. Neither ``resolved`` nor
``false-alarm`` has an outgoing transition.

Resolving does not require prior verification.
"""

from datetime import datetime

from jalsuraksha.exceptions import InvalidTransitionError
from jalsuraksha.schemas import AlertRecord

ACTIVE = "active"
VERIFIED = "verified"
RESOLVED = "resolved"
FALSE_ALARM = "false-alarm"

TERMINAL_STATUSES = frozenset({RESOLVED, FALSE_ALARM})

_OPERATIONS = {VERIFIED: "verify", RESOLVED: "resolve"}


def derive_status(current_status: str, verified_at, resolved_at) -> str:
    if current_status == FALSE_ALARM:
        return FALSE_ALARM
    if resolved_at is not None:
        return RESOLVED
    if verified_at is not None:
        return VERIFIED
    return ACTIVE


def check_status_change(alert: AlertRecord, requested: str) -> None:
    """
    Raise InvalidTransitionError unless a direct status update to
    ``requested`` is allowed.
    """
    if requested == alert.status:
        return
    if alert.status in TERMINAL_STATUSES:
        raise InvalidTransitionError(
            alert.status, requested, f"Alert is already {alert.status}; its status can no longer change"
        )
    if requested in _OPERATIONS:
        raise InvalidTransitionError(
            alert.status, requested, f"Use the {_OPERATIONS[requested]} operation to mark an alert {requested}"
        )
    if requested != FALSE_ALARM:
        raise InvalidTransitionError(alert.status, requested)


def verification_changes(alert: AlertRecord, verified_by: str, now: datetime) -> dict:
    return {
        "verified_by": verified_by,
        "verified_at": now,
        "status": derive_status(alert.status, now, alert.resolved_at),
    }


def resolution_changes(alert: AlertRecord, resolved_by: str, now: datetime) -> dict:
    return {
        "resolved_by": resolved_by,
        "resolved_at": now,
        "status": derive_status(alert.status, alert.verified_at, now),
    }
