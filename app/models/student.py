# app/models/student.py
"""
Students table: identity records eligible for campus vehicle access.
student_id is the external identifier printed on the ID card barcode.
"""

import uuid

from sqlalchemy import Column, String, DateTime, Boolean, Text
from app.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Student(Base):
    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=_new_id)
    student_id = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False, index=True)
    roll_number = Column(String(50), nullable=False)
    department = Column(String(100), nullable=False)
    year = Column(String(20), nullable=False)
    division = Column(String(20), nullable=False)
    contact_number = Column(String(50), nullable=False)
    photo_url = Column(Text)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<Student {self.student_id} name={self.name} active={self.is_active}>"
