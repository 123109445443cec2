# app/schemas/verification.py
"""Request/response bodies for the verify, grant and deny endpoints."""

from typing import Optional

from app.schemas.base import CamelModel
from app.schemas.access_log import AccessLogWithDetails
from app.schemas.alert import AlertOut
from app.schemas.student import StudentWithVehicle
from app.schemas.vehicle import VehicleOut


class AccessRequest(CamelModel):
    # Optional so that a missing field is reported as 400, not a validation 422
    student_id: Optional[str] = None
    plate_number: Optional[str] = None
    gate_location: Optional[str] = None


class DenyAccessRequest(AccessRequest):
    reason: Optional[str] = None


class VerificationResult(CamelModel):
    student: Optional[StudentWithVehicle] = None
    vehicle: Optional[VehicleOut] = None
    is_valid: bool
    reason: Optional[str] = None
    access_log: AccessLogWithDetails


class GrantAccessResponse(CamelModel):
    success: bool = True
    access_log: AccessLogWithDetails


class DenyAccessResponse(CamelModel):
    success: bool = True
    access_log: AccessLogWithDetails
    alert: AlertOut
