# app/routers/vehicles.py
"""Registered vehicles: plate lookup and updates (e.g. deactivation)."""

from fastapi import APIRouter, Depends

from app.dependencies import get_storage, store_call
from app.schemas.vehicle import VehicleLookupOut, VehicleOut, VehicleUpdate
from app.storage.base import Storage

router = APIRouter()


@router.get("/vehicles/lookup/{plate}", response_model=VehicleLookupOut, summary="Look up a plate number")
async def lookup_vehicle(plate: str, storage: Storage = Depends(get_storage)):
    vehicle = await store_call(storage.get_vehicle_by_plate, plate)
    if not vehicle:
        return VehicleLookupOut(plate=plate, registered=False)
    owner = await store_call(storage.get_student, vehicle.student_id)
    return VehicleLookupOut(
        plate=plate,
        registered=True,
        is_active=vehicle.is_active,
        owner=owner.name if owner else None,
        vehicle_type=vehicle.vehicle_type,
    )


@router.put("/vehicles/{id}", response_model=VehicleOut, summary="Update a vehicle")
async def update_vehicle(id: str, body: VehicleUpdate, storage: Storage = Depends(get_storage)):
    return await store_call(storage.update_vehicle, id, body)
