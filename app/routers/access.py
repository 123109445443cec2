# app/routers/access.py
"""
Gate access endpoints.
POST /verify-access — camera station submits a scanned student ID + plate.
POST /grant-access  — guard lets a vehicle through manually.
POST /deny-access   — guard turns a vehicle away manually.
GET  /access-logs   — recent attempts for the dashboard.
"""

from fastapi import APIRouter, Depends, Query

from app.dependencies import get_storage, get_verifier, store_call
from app.schemas.access_log import AccessLogWithDetails
from app.schemas.verification import (
    AccessRequest, DenyAccessRequest, DenyAccessResponse, GrantAccessResponse, VerificationResult,
)
from app.services.access_verifier import AccessVerifier
from app.storage.base import Storage

router = APIRouter()


@router.post("/verify-access", response_model=VerificationResult, summary="Verify a student / vehicle pair")
async def verify_access(body: AccessRequest, verifier: AccessVerifier = Depends(get_verifier)):
    """
    Denials are normal 200 responses with isValid=false and a reason.
    400 if a field is missing, 500 if the store is unavailable.
    """
    return await verifier.verify(body.student_id, body.plate_number, body.gate_location)


@router.post("/grant-access", response_model=GrantAccessResponse, summary="Manually grant access")
async def grant_access(body: AccessRequest, verifier: AccessVerifier = Depends(get_verifier)):
    return await verifier.grant_manually(body.student_id, body.plate_number, body.gate_location)


@router.post("/deny-access", response_model=DenyAccessResponse, summary="Manually deny access")
async def deny_access(body: DenyAccessRequest, verifier: AccessVerifier = Depends(get_verifier)):
    """Always raises an alert, whatever the reason."""
    return await verifier.deny_manually(body.student_id, body.plate_number, body.gate_location, body.reason)


@router.get("/access-logs", response_model=list[AccessLogWithDetails], summary="Recent access attempts")
async def get_access_logs(limit: int = Query(50, ge=1, le=500), storage: Storage = Depends(get_storage)):
    """Newest first, joined with student and vehicle."""
    return await store_call(storage.list_recent_access_logs, limit)


@router.get("/access-logs/student/{id}", response_model=list[AccessLogWithDetails],
            summary="Access history of one student")
async def get_student_access_logs(id: str, storage: Storage = Depends(get_storage)):
    """`id` is the internal students.id."""
    return await store_call(storage.list_access_logs_by_student, id)
