# app/storage/memory.py
"""
In-process store used when DATABASE_URL is not configured.
Dict-backed, guarded by a lock. Contents are lost on restart.
"""

import threading
import uuid
from datetime import datetime, timedelta
from typing import Optional

from app.exceptions import InvalidRequest, NotFound
from app.schemas.access_log import AccessLogCreate, AccessLogOut, AccessLogWithDetails, GRANTED, DENIED
from app.schemas.alert import AlertCreate, AlertOut
from app.schemas.dashboard import DashboardStats
from app.schemas.student import StudentCreate, StudentOut, StudentUpdate, StudentWithVehicle
from app.schemas.vehicle import VehicleCreate, VehicleOut, VehicleUpdate
from app.storage.base import Storage
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


class MemoryStorage(Storage):
    def __init__(self):
        self._lock = threading.RLock()
        # Insertion-ordered: newest rows are at the end
        self._students: dict[str, StudentOut] = {}
        self._vehicles: dict[str, VehicleOut] = {}
        self._access_logs: dict[str, AccessLogOut] = {}
        self._alerts: dict[str, AlertOut] = {}
        logger.info("Using in-memory storage (data is not persisted)")

    # ── Students ─────────────────────────────────────────────────────────
    def get_student(self, id):
        with self._lock:
            return self._students.get(id)

    def get_student_by_student_id(self, student_id):
        with self._lock:
            student = next((s for s in self._students.values() if s.student_id == student_id), None)
            if not student:
                return None
            return self._with_vehicle(student)

    def create_student(self, data: StudentCreate) -> StudentOut:
        with self._lock:
            if any(s.student_id == data.student_id for s in self._students.values()):
                raise InvalidRequest(f"Student ID {data.student_id} already registered")
            student = StudentOut(id=_new_id(), created_at=datetime.utcnow(), **data.model_dump())
            self._students[student.id] = student
            return student

    def update_student(self, id: str, data: StudentUpdate) -> StudentOut:
        with self._lock:
            existing = self._students.get(id)
            if not existing:
                raise NotFound("Student not found")
            changes = data.model_dump(exclude_unset=True)
            new_sid = changes.get("student_id")
            if new_sid and any(s.student_id == new_sid and s.id != id for s in self._students.values()):
                raise InvalidRequest(f"Student ID {new_sid} already registered")
            updated = existing.model_copy(update=changes)
            self._students[id] = updated
            return updated

    def delete_student(self, id: str) -> bool:
        with self._lock:
            if self._students.pop(id, None) is None:
                return False
            removed = {vid for vid, v in self._vehicles.items() if v.student_id == id}
            for vid in removed:
                del self._vehicles[vid]
            for log_id, log in self._access_logs.items():
                if log.student_id == id or log.vehicle_id in removed:
                    self._access_logs[log_id] = log.model_copy(update={
                        "student_id": None if log.student_id == id else log.student_id,
                        "vehicle_id": None if log.vehicle_id in removed else log.vehicle_id,
                    })
            return True

    def search_students(self, query="", department=None, year=None):
        q = (query or "").lower()
        with self._lock:
            results = [
                s for s in self._students.values()
                if q in s.name.lower() or q in s.student_id.lower()
            ]
            if department:
                results = [s for s in results if s.department == department]
            if year:
                results = [s for s in results if s.year == year]
            results.sort(key=lambda s: s.name)
            return [self._with_vehicle(s) for s in results]

    def _with_vehicle(self, student: StudentOut) -> StudentWithVehicle:
        vehicle = next((v for v in self._vehicles.values() if v.student_id == student.id), None)
        return StudentWithVehicle(**student.model_dump(), vehicle=vehicle)

    # ── Vehicles ─────────────────────────────────────────────────────────
    def get_vehicle(self, id):
        with self._lock:
            return self._vehicles.get(id)

    def get_vehicle_by_plate(self, plate_number):
        with self._lock:
            return next((v for v in self._vehicles.values() if v.plate_number == plate_number), None)

    def create_vehicle(self, data: VehicleCreate) -> VehicleOut:
        with self._lock:
            if data.student_id not in self._students:
                raise InvalidRequest("Vehicle owner does not exist")
            if any(v.plate_number == data.plate_number for v in self._vehicles.values()):
                raise InvalidRequest(f"Plate {data.plate_number} already registered")
            vehicle = VehicleOut(id=_new_id(), created_at=datetime.utcnow(), **data.model_dump())
            self._vehicles[vehicle.id] = vehicle
            return vehicle

    def update_vehicle(self, id: str, data: VehicleUpdate) -> VehicleOut:
        with self._lock:
            existing = self._vehicles.get(id)
            if not existing:
                raise NotFound("Vehicle not found")
            changes = data.model_dump(exclude_unset=True)
            plate = changes.get("plate_number")
            if plate and any(v.plate_number == plate and v.id != id for v in self._vehicles.values()):
                raise InvalidRequest(f"Plate {plate} already registered")
            updated = existing.model_copy(update=changes)
            self._vehicles[id] = updated
            return updated

    # ── Access logs ──────────────────────────────────────────────────────
    def create_access_log(self, entry: AccessLogCreate) -> AccessLogOut:
        log = AccessLogOut(id=_new_id(), timestamp=datetime.utcnow(), **entry.model_dump())
        with self._lock:
            self._access_logs[log.id] = log
        return log

    def list_recent_access_logs(self, limit=50):
        with self._lock:
            logs = list(reversed(self._access_logs.values()))[:limit]
            return [self._with_details(log) for log in logs]

    def list_access_logs_by_student(self, student_id):
        with self._lock:
            logs = [log for log in reversed(self._access_logs.values()) if log.student_id == student_id]
            return [self._with_details(log) for log in logs]

    def _with_details(self, log: AccessLogOut) -> AccessLogWithDetails:
        return AccessLogWithDetails(
            **log.model_dump(),
            student=self._students.get(log.student_id) if log.student_id else None,
            vehicle=self._vehicles.get(log.vehicle_id) if log.vehicle_id else None,
        )

    # ── Alerts ───────────────────────────────────────────────────────────
    def create_alert(self, alert: AlertCreate) -> AlertOut:
        created = AlertOut(id=_new_id(), is_read=False, created_at=datetime.utcnow(), **alert.model_dump())
        with self._lock:
            self._alerts[created.id] = created
        return created

    def list_recent_alerts(self, limit=20):
        with self._lock:
            return list(reversed(self._alerts.values()))[:limit]

    def mark_alert_read(self, id):
        with self._lock:
            alert = self._alerts.get(id)
            if not alert:
                return False
            self._alerts[id] = alert.model_copy(update={"is_read": True})
            return True

    # ── Dashboard / health ───────────────────────────────────────────────
    def get_today_stats(self, active_gates):
        start = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
        end = start + timedelta(days=1)
        with self._lock:
            today = [log for log in self._access_logs.values() if start <= log.timestamp < end]
        return DashboardStats(
            total_access=len(today),
            granted=sum(1 for log in today if log.access_status == GRANTED),
            denied=sum(1 for log in today if log.access_status == DENIED),
            active_gates=active_gates,
        )

    def ping(self):
        return None
