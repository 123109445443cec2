# app/services/access_verifier.py
"""
Gate access verification: grant or deny a (student ID, plate) pair.

Two steps:
  1. decide()  — pure verdict from the resolved student and vehicle.
  2. AccessVerifier — looks records up, applies the verdict's effects:
     access log write, alert write on denial, then WebSocket broadcasts.

Rules, in order; the first failure fixes the reason:
  student not found → vehicle not registered → vehicle owned by someone
  else → student or vehicle inactive → granted.

Every store call runs in a worker thread under a timeout. A failed or
timed-out call raises PersistenceUnavailable and nothing is broadcast.
"""

from dataclasses import dataclass
from typing import Optional

from app.exceptions import InvalidRequest
from app.schemas.access_log import AccessLogCreate, AccessLogOut, AccessLogWithDetails, GRANTED, DENIED
from app.schemas.student import StudentOut, StudentWithVehicle
from app.schemas.vehicle import VehicleOut
from app.schemas.verification import DenyAccessResponse, GrantAccessResponse, VerificationResult
from app.services.alert_service import manual_denial_alert, unauthorized_access_alert
from app.services.broadcaster import ACCESS_DENIED, ACCESS_GRANTED, ACCESS_LOG, NEW_ALERT, Broadcaster
from app.storage.base import Storage, call_store
from app.utils.logger import get_logger

logger = get_logger(__name__)

IDENTITY_NOT_FOUND = "Identity not found"
VEHICLE_NOT_REGISTERED = "Vehicle not registered"
VEHICLE_NOT_OWNED = "Vehicle does not belong to this identity"
INACTIVE = "Identity or vehicle is inactive"

MANUAL_APPROVAL = "Manual approval"
MANUAL_DENIAL = "Manual denial"
UNKNOWN_PLATE = "Unknown"

AUTO_SCAN_METADATA = {"confidence": 100}
MANUAL_METADATA = {"manual": True}


@dataclass
class Verdict:
    student: Optional[StudentWithVehicle]
    vehicle: Optional[VehicleOut]
    is_valid: bool
    reason: Optional[str] = None


def decide(student: Optional[StudentWithVehicle], vehicle: Optional[VehicleOut]) -> Verdict:
    """Pure verdict. No I/O; order of checks determines the reported reason."""
    if student is None:
        return Verdict(student, vehicle, False, IDENTITY_NOT_FOUND)
    if vehicle is None:
        return Verdict(student, vehicle, False, VEHICLE_NOT_REGISTERED)
    if vehicle.student_id != student.id:
        return Verdict(student, vehicle, False, VEHICLE_NOT_OWNED)
    if not student.is_active or not vehicle.is_active:
        return Verdict(student, vehicle, False, INACTIVE)
    return Verdict(student, vehicle, True)


def _present(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def _with_details(log: AccessLogOut, student: Optional[StudentOut],
                  vehicle: Optional[VehicleOut]) -> AccessLogWithDetails:
    if student is not None:
        student = StudentOut(**student.model_dump(exclude={"vehicle"}))
    return AccessLogWithDetails(**log.model_dump(), student=student, vehicle=vehicle)


class AccessVerifier:
    def __init__(self, storage: Storage, broadcaster: Broadcaster, timeout: float = 5.0):
        self.storage = storage
        self.broadcaster = broadcaster
        self.timeout = timeout

    async def _store(self, method, *args):
        return await call_store(method, *args, timeout=self.timeout)

    async def _resolve(self, student_id: Optional[str], plate_number: Optional[str]):
        student = await self._store(self.storage.get_student_by_student_id, student_id) if _present(student_id) else None
        vehicle = await self._store(self.storage.get_vehicle_by_plate, plate_number) if _present(plate_number) else None
        return student, vehicle

    # ── Automatic scan ───────────────────────────────────────────────────
    async def verify(self, student_id: str, plate_number: str, gate_location: str) -> VerificationResult:
        if not (_present(student_id) and _present(plate_number) and _present(gate_location)):
            raise InvalidRequest("Missing required fields")

        student, vehicle = await self._resolve(student_id, plate_number)
        verdict = decide(student, vehicle)

        log = await self._store(self.storage.create_access_log, AccessLogCreate(
            student_id=student.id if student else None,
            vehicle_id=vehicle.id if vehicle else None,
            plate_number=plate_number,
            gate_location=gate_location,
            access_status=GRANTED if verdict.is_valid else DENIED,
            reason=verdict.reason,
            metadata=dict(AUTO_SCAN_METADATA),
        ))

        alert = None
        if not verdict.is_valid:
            # Not rolled back if this write fails: the log entry stands alone
            alert = await self._store(self.storage.create_alert, unauthorized_access_alert(
                verdict.reason, plate_number, gate_location, student_id))
            logger.warning(f"[ACCESS] DENIED student={student_id} plate={plate_number} "
                           f"gate={gate_location} reason={verdict.reason}")
        else:
            logger.info(f"[ACCESS] GRANTED student={student_id} plate={plate_number} gate={gate_location}")

        log_with_details = _with_details(log, student, vehicle)
        await self.broadcaster.broadcast(ACCESS_LOG, log_with_details.to_wire())
        if alert:
            await self.broadcaster.broadcast(NEW_ALERT, alert.to_wire())

        return VerificationResult(
            student=student,
            vehicle=vehicle,
            is_valid=verdict.is_valid,
            reason=verdict.reason,
            access_log=log_with_details,
        )

    # ── Manual overrides ─────────────────────────────────────────────────
    async def grant_manually(self, student_id: Optional[str], plate_number: Optional[str],
                             gate_location: str) -> GrantAccessResponse:
        if not _present(gate_location):
            raise InvalidRequest("Missing required fields")

        student, vehicle = await self._resolve(student_id, plate_number)
        log = await self._store(self.storage.create_access_log, AccessLogCreate(
            student_id=student.id if student else None,
            vehicle_id=vehicle.id if vehicle else None,
            plate_number=plate_number or UNKNOWN_PLATE,
            gate_location=gate_location,
            access_status=GRANTED,
            reason=MANUAL_APPROVAL,
            metadata=dict(MANUAL_METADATA),
        ))
        logger.info(f"[ACCESS] MANUAL GRANT student={student_id} plate={plate_number} gate={gate_location}")

        log_with_details = _with_details(log, student, vehicle)
        await self.broadcaster.broadcast(ACCESS_GRANTED, log_with_details.to_wire())
        return GrantAccessResponse(success=True, access_log=log_with_details)

    async def deny_manually(self, student_id: Optional[str], plate_number: Optional[str],
                            gate_location: str, reason: Optional[str] = None) -> DenyAccessResponse:
        if not _present(gate_location):
            raise InvalidRequest("Missing required fields")

        reason = reason or MANUAL_DENIAL
        plate = plate_number or UNKNOWN_PLATE
        student, vehicle = await self._resolve(student_id, plate_number)
        log = await self._store(self.storage.create_access_log, AccessLogCreate(
            student_id=student.id if student else None,
            vehicle_id=vehicle.id if vehicle else None,
            plate_number=plate,
            gate_location=gate_location,
            access_status=DENIED,
            reason=reason,
            metadata=dict(MANUAL_METADATA),
        ))
        alert = await self._store(self.storage.create_alert, manual_denial_alert(
            reason, plate, gate_location, student_id))
        logger.warning(f"[ACCESS] MANUAL DENY student={student_id} plate={plate} "
                       f"gate={gate_location} reason={reason}")

        log_with_details = _with_details(log, student, vehicle)
        await self.broadcaster.broadcast(ACCESS_DENIED, log_with_details.to_wire())
        await self.broadcaster.broadcast(NEW_ALERT, alert.to_wire())
        return DenyAccessResponse(success=True, access_log=log_with_details, alert=alert)
