# app/routers/students.py
"""Student registry: search, register (with vehicle), update, remove."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import get_broadcaster, get_storage, store_call
from app.exceptions import GateAccessError
from app.schemas.student import StudentOut, StudentRegistration, StudentUpdate, StudentWithVehicle
from app.schemas.vehicle import VehicleCreate
from app.services.broadcaster import STUDENT_ADDED, STUDENT_DELETED, Broadcaster
from app.storage.base import Storage
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/students", response_model=list[StudentWithVehicle], summary="Search students")
async def search_students(query: str = "", department: Optional[str] = None, year: Optional[str] = None,
                          storage: Storage = Depends(get_storage)):
    """Case-insensitive match on name or student ID, optionally filtered by department and year."""
    return await store_call(storage.search_students, query, department, year)


@router.get("/students/{student_id}", response_model=StudentWithVehicle, summary="Look up a student by card ID")
async def get_student(student_id: str, storage: Storage = Depends(get_storage)):
    student = await store_call(storage.get_student_by_student_id, student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return student


@router.post("/students", response_model=StudentWithVehicle, summary="Register a student and their vehicle")
async def register_student(body: StudentRegistration, storage: Storage = Depends(get_storage),
                           broadcaster: Broadcaster = Depends(get_broadcaster)):
    student = await store_call(storage.create_student, body.student)
    try:
        vehicle = await store_call(
            storage.create_vehicle,
            VehicleCreate(student_id=student.id, **body.vehicle.model_dump()),
        )
    except GateAccessError:
        # Keep registration all-or-nothing
        await store_call(storage.delete_student, student.id)
        raise

    result = StudentWithVehicle(**student.model_dump(), vehicle=vehicle)
    logger.info(f"Registered student {student.student_id} with vehicle {vehicle.plate_number}")
    await broadcaster.broadcast(STUDENT_ADDED, result.to_wire())
    return result


@router.put("/students/{id}", response_model=StudentOut, summary="Update a student")
async def update_student(id: str, body: StudentUpdate, storage: Storage = Depends(get_storage)):
    return await store_call(storage.update_student, id, body)


@router.delete("/students/{id}", summary="Remove a student and their vehicles")
async def delete_student(id: str, storage: Storage = Depends(get_storage),
                         broadcaster: Broadcaster = Depends(get_broadcaster)):
    if not await store_call(storage.delete_student, id):
        raise HTTPException(status_code=404, detail="Student not found")
    logger.info(f"Removed student {id}")
    await broadcaster.broadcast(STUDENT_DELETED, {"id": id})
    return {"success": True}
