# app/models/vehicle.py
"""
Registered vehicles table.
Each plate belongs to exactly one student (students.id).
Looked up by plate during access verification.
"""

from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey
from app.database import Base
from app.models.student import _new_id


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(String(36), primary_key=True, default=_new_id)
    student_id = Column(String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    plate_number = Column(String(50), unique=True, nullable=False, index=True)
    vehicle_type = Column(String(50), nullable=False)   # car | motorcycle | ...
    model = Column(String(100))
    color = Column(String(50))
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<Vehicle {self.plate_number} student={self.student_id} type={self.vehicle_type}>"
