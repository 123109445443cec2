# app/storage/base.py
"""
Persistence interface shared by the in-memory and SQL stores.

All methods are synchronous and thread-safe. Async callers go through
call_store(), which runs them in a worker thread under a timeout.
Failures of the underlying store raise PersistenceUnavailable.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

from app.exceptions import PersistenceUnavailable

from app.schemas.access_log import AccessLogCreate, AccessLogOut, AccessLogWithDetails
from app.schemas.alert import AlertCreate, AlertOut
from app.schemas.dashboard import DashboardStats
from app.schemas.student import StudentCreate, StudentOut, StudentUpdate, StudentWithVehicle
from app.schemas.vehicle import VehicleCreate, VehicleOut, VehicleUpdate
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def call_store(method, *args, timeout: float):
    """Run a blocking store call off the event loop, bounded by `timeout` seconds.

    The worker thread is not cancelled on expiry: a write that was already
    in flight may still land after the caller has seen PersistenceUnavailable.
    """
    name = getattr(method, "__name__", "storage call")
    try:
        return await asyncio.wait_for(asyncio.to_thread(method, *args), timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error(f"Store call {name} timed out after {timeout}s")
        raise PersistenceUnavailable(f"Store call {name} timed out") from e


class Storage(ABC):

    # ── Students ─────────────────────────────────────────────────────────
    @abstractmethod
    def get_student(self, id: str) -> Optional[StudentOut]: ...

    @abstractmethod
    def get_student_by_student_id(self, student_id: str) -> Optional[StudentWithVehicle]:
        """Look up by the external (card) identifier, joined with the student's vehicle."""

    @abstractmethod
    def create_student(self, data: StudentCreate) -> StudentOut: ...

    @abstractmethod
    def update_student(self, id: str, data: StudentUpdate) -> StudentOut: ...

    @abstractmethod
    def delete_student(self, id: str) -> bool:
        """Delete a student and their vehicles. Their access logs are kept, detached."""

    @abstractmethod
    def search_students(self, query: str = "", department: Optional[str] = None,
                        year: Optional[str] = None) -> list[StudentWithVehicle]: ...

    # ── Vehicles ─────────────────────────────────────────────────────────
    @abstractmethod
    def get_vehicle(self, id: str) -> Optional[VehicleOut]: ...

    @abstractmethod
    def get_vehicle_by_plate(self, plate_number: str) -> Optional[VehicleOut]:
        """Exact, case-sensitive plate match."""

    @abstractmethod
    def create_vehicle(self, data: VehicleCreate) -> VehicleOut: ...

    @abstractmethod
    def update_vehicle(self, id: str, data: VehicleUpdate) -> VehicleOut: ...

    # ── Access logs ──────────────────────────────────────────────────────
    @abstractmethod
    def create_access_log(self, entry: AccessLogCreate) -> AccessLogOut: ...

    @abstractmethod
    def list_recent_access_logs(self, limit: int = 50) -> list[AccessLogWithDetails]: ...

    @abstractmethod
    def list_access_logs_by_student(self, student_id: str) -> list[AccessLogWithDetails]: ...

    # ── Alerts ───────────────────────────────────────────────────────────
    @abstractmethod
    def create_alert(self, alert: AlertCreate) -> AlertOut: ...

    @abstractmethod
    def list_recent_alerts(self, limit: int = 20) -> list[AlertOut]: ...

    @abstractmethod
    def mark_alert_read(self, id: str) -> bool:
        """Returns False when no alert has this id."""

    # ── Dashboard / health ───────────────────────────────────────────────
    @abstractmethod
    def get_today_stats(self, active_gates: int) -> DashboardStats: ...

    @abstractmethod
    def ping(self) -> None:
        """Raise PersistenceUnavailable if the store cannot be reached."""
