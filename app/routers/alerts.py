# app/routers/alerts.py
from fastapi import APIRouter, Depends, HTTPException, Query

from app.dependencies import get_storage, store_call
from app.schemas.alert import AlertOut
from app.storage.base import Storage

router = APIRouter()


@router.get("/alerts", response_model=list[AlertOut], summary="Recent alerts")
async def get_alerts(limit: int = Query(20, ge=1, le=500), storage: Storage = Depends(get_storage)):
    """Newest first."""
    return await store_call(storage.list_recent_alerts, limit)


@router.put("/alerts/{alert_id}/read", summary="Mark an alert as read")
async def mark_alert_read(alert_id: str, storage: Storage = Depends(get_storage)):
    if not await store_call(storage.mark_alert_read, alert_id):
        raise HTTPException(status_code=404, detail="Alert not found")
    return {"success": True}
