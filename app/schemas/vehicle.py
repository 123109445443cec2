# app/schemas/vehicle.py
from datetime import datetime
from typing import Optional

from app.schemas.base import CamelModel


class VehicleRegistration(CamelModel):
    plate_number: str
    vehicle_type: str        # car | motorcycle | scooter | ...
    model: Optional[str] = None
    color: Optional[str] = None
    is_active: bool = True


class VehicleCreate(VehicleRegistration):
    student_id: str          # students.id of the owner


class VehicleUpdate(CamelModel):
    plate_number: Optional[str] = None
    vehicle_type: Optional[str] = None
    model: Optional[str] = None
    color: Optional[str] = None
    is_active: Optional[bool] = None


class VehicleOut(CamelModel):
    id: str
    student_id: str
    plate_number: str
    vehicle_type: str
    model: Optional[str] = None
    color: Optional[str] = None
    is_active: bool
    created_at: datetime


class VehicleLookupOut(CamelModel):
    plate: str
    registered: bool
    is_active: Optional[bool] = None
    owner: Optional[str] = None
    vehicle_type: Optional[str] = None
