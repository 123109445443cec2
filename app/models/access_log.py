# app/models/access_log.py
"""
Access log table: one row per gate access attempt (automatic or manual).
Append-only. plate_number keeps the raw scanned plate even when no
vehicle row matched.
"""

from sqlalchemy import Column, String, DateTime, Text, JSON, ForeignKey
from app.database import Base
from app.models.student import _new_id


class AccessLog(Base):
    __tablename__ = "access_logs"

    id = Column(String(36), primary_key=True, default=_new_id)
    student_id = Column(String(36), ForeignKey("students.id", ondelete="SET NULL"))   # nullable if unknown
    vehicle_id = Column(String(36), ForeignKey("vehicles.id", ondelete="SET NULL"))   # nullable if unknown
    plate_number = Column(String(50), index=True)
    gate_location = Column(String(100), nullable=False)
    access_status = Column(String(20), nullable=False, index=True)   # granted | denied
    reason = Column(Text)
    timestamp = Column(DateTime, nullable=False, index=True)
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON)

    def __repr__(self):
        return f"<AccessLog {self.id} plate={self.plate_number} status={self.access_status}>"
