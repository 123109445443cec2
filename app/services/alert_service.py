# app/services/alert_service.py
"""
Shared alert construction.
Used by the access verifier for automatic and manual denials.
"""

from typing import Optional

from app.schemas.alert import AlertCreate
from app.utils.logger import get_logger

logger = get_logger(__name__)

UNAUTHORIZED_ACCESS = "unauthorized_access"
SEVERITY_CRITICAL = "critical"


def unauthorized_access_alert(reason: str, plate_number: str, gate_location: str,
                              student_id: Optional[str]) -> AlertCreate:
    """Alert for a denied automatic scan. Carries the tokens exactly as scanned."""
    alert = AlertCreate(
        alert_type=UNAUTHORIZED_ACCESS,
        severity=SEVERITY_CRITICAL,
        title="Unauthorized Access Attempt",
        description=f"{reason} - Vehicle: {plate_number}",
        gate_location=gate_location,
        metadata={"studentId": student_id, "plateNumber": plate_number},
    )
    logger.warning(f"[ALERT][{UNAUTHORIZED_ACCESS.upper()}] {alert.description} @ {gate_location}")
    return alert


def manual_denial_alert(reason: str, plate_number: str, gate_location: str,
                        student_id: Optional[str]) -> AlertCreate:
    """Alert for a guard's explicit denial. Raised whatever the reason."""
    alert = AlertCreate(
        alert_type=UNAUTHORIZED_ACCESS,
        severity=SEVERITY_CRITICAL,
        title="Access Manually Denied",
        description=f"{reason} - Vehicle: {plate_number}",
        gate_location=gate_location,
        metadata={"studentId": student_id, "plateNumber": plate_number, "manual": True},
    )
    logger.warning(f"[ALERT][MANUAL] {alert.description} @ {gate_location}")
    return alert
