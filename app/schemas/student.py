# app/schemas/student.py
from datetime import datetime
from typing import Optional

from app.schemas.base import CamelModel
from app.schemas.vehicle import VehicleOut, VehicleRegistration


class StudentCreate(CamelModel):
    student_id: str
    name: str
    roll_number: str
    department: str
    year: str
    division: str
    contact_number: str
    photo_url: Optional[str] = None
    is_active: bool = True


class StudentUpdate(CamelModel):
    student_id: Optional[str] = None
    name: Optional[str] = None
    roll_number: Optional[str] = None
    department: Optional[str] = None
    year: Optional[str] = None
    division: Optional[str] = None
    contact_number: Optional[str] = None
    photo_url: Optional[str] = None
    is_active: Optional[bool] = None


class StudentOut(CamelModel):
    id: str
    student_id: str
    name: str
    roll_number: str
    department: str
    year: str
    division: str
    contact_number: str
    photo_url: Optional[str] = None
    is_active: bool
    created_at: datetime


class StudentWithVehicle(StudentOut):
    vehicle: Optional[VehicleOut] = None


class StudentRegistration(CamelModel):
    """POST /students body: a student and the vehicle they drive in with."""
    student: StudentCreate
    vehicle: VehicleRegistration
