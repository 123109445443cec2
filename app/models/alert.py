# app/models/alert.py
"""
Alerts table: security events that need a human to look at them.
Every denied access attempt creates one. Only is_read is ever updated.
"""

from sqlalchemy import Column, String, DateTime, Text, Boolean, JSON
from app.database import Base
from app.models.student import _new_id


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(String(36), primary_key=True, default=_new_id)
    alert_type = Column("type", String(50), nullable=False, index=True)   # unauthorized_access | scan_failed | system_update
    severity = Column(String(20), nullable=False)                         # critical | warning | info
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    gate_location = Column(String(100))
    meta = Column("metadata", JSON)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<Alert {self.id} type={self.alert_type} read={self.is_read}>"
