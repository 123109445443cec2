# app/storage/sql.py
"""
SQLAlchemy-backed store (PostgreSQL in production, SQLite in tests).
Opens one short-lived session per operation and converts rows to schemas
before the session closes.
"""

from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, or_, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.exceptions import InvalidRequest, NotFound, PersistenceUnavailable
from app.models.access_log import AccessLog
from app.models.alert import Alert
from app.models.student import Student
from app.models.vehicle import Vehicle
from app.schemas.access_log import AccessLogCreate, AccessLogOut, AccessLogWithDetails, GRANTED, DENIED
from app.schemas.alert import AlertCreate, AlertOut
from app.schemas.dashboard import DashboardStats
from app.schemas.student import StudentCreate, StudentOut, StudentUpdate, StudentWithVehicle
from app.schemas.vehicle import VehicleCreate, VehicleOut, VehicleUpdate
from app.storage.base import Storage
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _log_out(row: AccessLog) -> AccessLogOut:
    return AccessLogOut(
        id=row.id, student_id=row.student_id, vehicle_id=row.vehicle_id,
        plate_number=row.plate_number, gate_location=row.gate_location,
        access_status=row.access_status, reason=row.reason,
        timestamp=row.timestamp, metadata=row.meta,
    )


def _alert_out(row: Alert) -> AlertOut:
    return AlertOut(
        id=row.id, alert_type=row.alert_type, severity=row.severity,
        title=row.title, description=row.description,
        gate_location=row.gate_location, metadata=row.meta,
        is_read=row.is_read, created_at=row.created_at,
    )


def _log_with_details(row: AccessLog, student: Optional[Student], vehicle: Optional[Vehicle]) -> AccessLogWithDetails:
    return AccessLogWithDetails(
        **_log_out(row).model_dump(),
        student=StudentOut.model_validate(student) if student else None,
        vehicle=VehicleOut.model_validate(vehicle) if vehicle else None,
    )


class SqlStorage(Storage):
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self):
        """Yields a session; store errors become PersistenceUnavailable."""
        db: Session = self._session_factory()
        try:
            yield db
        except IntegrityError as e:
            db.rollback()
            raise InvalidRequest(f"Conflicts with an existing record: {e.orig}") from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error: {e}", exc_info=True)
            raise PersistenceUnavailable("Database unavailable") from e
        finally:
            db.close()

    # ── Students ─────────────────────────────────────────────────────────
    def get_student(self, id):
        with self._session() as db:
            row = db.get(Student, id)
            return StudentOut.model_validate(row) if row else None

    def get_student_by_student_id(self, student_id):
        with self._session() as db:
            row = db.query(Student).filter(Student.student_id == student_id).first()
            return self._with_vehicle(db, row) if row else None

    def create_student(self, data: StudentCreate) -> StudentOut:
        with self._session() as db:
            row = Student(created_at=datetime.utcnow(), **data.model_dump())
            db.add(row)
            db.commit()
            return StudentOut.model_validate(row)

    def update_student(self, id, data: StudentUpdate) -> StudentOut:
        with self._session() as db:
            row = db.get(Student, id)
            if not row:
                raise NotFound("Student not found")
            for field, value in data.model_dump(exclude_unset=True).items():
                setattr(row, field, value)
            db.commit()
            return StudentOut.model_validate(row)

    def delete_student(self, id) -> bool:
        with self._session() as db:
            row = db.get(Student, id)
            if not row:
                return False
            vehicle_ids = [v.id for v in db.query(Vehicle.id).filter(Vehicle.student_id == id)]
            # Detach history explicitly; SQLite does not enforce ON DELETE by default
            db.query(AccessLog).filter(AccessLog.student_id == id).update(
                {AccessLog.student_id: None}, synchronize_session=False)
            if vehicle_ids:
                db.query(AccessLog).filter(AccessLog.vehicle_id.in_(vehicle_ids)).update(
                    {AccessLog.vehicle_id: None}, synchronize_session=False)
                db.query(Vehicle).filter(Vehicle.id.in_(vehicle_ids)).delete(synchronize_session=False)
            db.delete(row)
            db.commit()
            return True

    def search_students(self, query="", department=None, year=None):
        pattern = f"%{(query or '').lower()}%"
        with self._session() as db:
            q = db.query(Student).filter(or_(
                func.lower(Student.name).like(pattern),
                func.lower(Student.student_id).like(pattern),
            ))
            if department:
                q = q.filter(Student.department == department)
            if year:
                q = q.filter(Student.year == year)
            return [self._with_vehicle(db, row) for row in q.order_by(Student.name).all()]

    @staticmethod
    def _with_vehicle(db: Session, row: Student) -> StudentWithVehicle:
        vehicle = (
            db.query(Vehicle)
            .filter(Vehicle.student_id == row.id)
            .order_by(Vehicle.created_at)
            .first()
        )
        return StudentWithVehicle(
            **StudentOut.model_validate(row).model_dump(),
            vehicle=VehicleOut.model_validate(vehicle) if vehicle else None,
        )

    # ── Vehicles ─────────────────────────────────────────────────────────
    def get_vehicle(self, id):
        with self._session() as db:
            row = db.get(Vehicle, id)
            return VehicleOut.model_validate(row) if row else None

    def get_vehicle_by_plate(self, plate_number):
        with self._session() as db:
            row = db.query(Vehicle).filter(Vehicle.plate_number == plate_number).first()
            return VehicleOut.model_validate(row) if row else None

    def create_vehicle(self, data: VehicleCreate) -> VehicleOut:
        with self._session() as db:
            if not db.get(Student, data.student_id):
                raise InvalidRequest("Vehicle owner does not exist")
            row = Vehicle(created_at=datetime.utcnow(), **data.model_dump())
            db.add(row)
            db.commit()
            return VehicleOut.model_validate(row)

    def update_vehicle(self, id, data: VehicleUpdate) -> VehicleOut:
        with self._session() as db:
            row = db.get(Vehicle, id)
            if not row:
                raise NotFound("Vehicle not found")
            for field, value in data.model_dump(exclude_unset=True).items():
                setattr(row, field, value)
            db.commit()
            return VehicleOut.model_validate(row)

    # ── Access logs ──────────────────────────────────────────────────────
    def create_access_log(self, entry: AccessLogCreate) -> AccessLogOut:
        values = entry.model_dump()
        meta = values.pop("metadata")
        with self._session() as db:
            row = AccessLog(timestamp=datetime.utcnow(), meta=meta, **values)
            db.add(row)
            db.commit()
            return _log_out(row)

    def _joined_logs(self, db: Session):
        return (
            db.query(AccessLog, Student, Vehicle)
            .outerjoin(Student, AccessLog.student_id == Student.id)
            .outerjoin(Vehicle, AccessLog.vehicle_id == Vehicle.id)
        )

    def list_recent_access_logs(self, limit=50):
        with self._session() as db:
            rows = self._joined_logs(db).order_by(AccessLog.timestamp.desc()).limit(limit).all()
            return [_log_with_details(*row) for row in rows]

    def list_access_logs_by_student(self, student_id):
        with self._session() as db:
            rows = (
                self._joined_logs(db)
                .filter(AccessLog.student_id == student_id)
                .order_by(AccessLog.timestamp.desc())
                .all()
            )
            return [_log_with_details(*row) for row in rows]

    # ── Alerts ───────────────────────────────────────────────────────────
    def create_alert(self, alert: AlertCreate) -> AlertOut:
        values = alert.model_dump()
        meta = values.pop("metadata")
        with self._session() as db:
            row = Alert(is_read=False, created_at=datetime.utcnow(), meta=meta, **values)
            db.add(row)
            db.commit()
            return _alert_out(row)

    def list_recent_alerts(self, limit=20):
        with self._session() as db:
            rows = db.query(Alert).order_by(Alert.created_at.desc()).limit(limit).all()
            return [_alert_out(row) for row in rows]

    def mark_alert_read(self, id) -> bool:
        with self._session() as db:
            row = db.get(Alert, id)
            if not row:
                return False
            row.is_read = True
            db.commit()
            return True

    # ── Dashboard / health ───────────────────────────────────────────────
    def get_today_stats(self, active_gates):
        start = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
        end = start + timedelta(days=1)
        with self._session() as db:
            counts = dict(
                db.query(AccessLog.access_status, func.count(AccessLog.id))
                .filter(AccessLog.timestamp >= start, AccessLog.timestamp < end)
                .group_by(AccessLog.access_status)
                .all()
            )
        return DashboardStats(
            total_access=sum(counts.values()),
            granted=counts.get(GRANTED, 0),
            denied=counts.get(DENIED, 0),
            active_gates=active_gates,
        )

    def ping(self):
        with self._session() as db:
            db.execute(text("SELECT 1"))
