# app/schemas/access_log.py
from datetime import datetime
from typing import Any, Optional

from app.schemas.base import CamelModel
from app.schemas.student import StudentOut
from app.schemas.vehicle import VehicleOut

GRANTED = "granted"
DENIED = "denied"


class AccessLogCreate(CamelModel):
    student_id: Optional[str] = None     # students.id, not the card number
    vehicle_id: Optional[str] = None
    plate_number: Optional[str] = None
    gate_location: str
    access_status: str                   # granted | denied
    reason: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class AccessLogOut(CamelModel):
    id: str
    student_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    plate_number: Optional[str] = None
    gate_location: str
    access_status: str
    reason: Optional[str] = None
    timestamp: datetime
    metadata: Optional[dict[str, Any]] = None


class AccessLogWithDetails(AccessLogOut):
    """Log entry joined with the resolved student and vehicle, for display."""
    student: Optional[StudentOut] = None
    vehicle: Optional[VehicleOut] = None
