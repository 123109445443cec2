# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + storage + connected dashboards.
"""

from datetime import datetime

from fastapi import APIRouter, Depends

from app.config import settings
from app.dependencies import get_broadcaster, get_storage, store_call
from app.exceptions import PersistenceUnavailable
from app.services.broadcaster import Broadcaster
from app.storage.base import Storage

router = APIRouter()


@router.get("/health", summary="System health check")
async def health_check(storage: Storage = Depends(get_storage), broadcaster: Broadcaster = Depends(get_broadcaster)):
    """
    Returns:
    - Backend status
    - Storage backend and connectivity
    - Number of dashboards on the real-time channel
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "storage": settings.storage_backend,
        "database": "unknown",
        "observers": broadcaster.connection_count,
    }

    try:
        await store_call(storage.ping)
        result["database"] = "ok"
    except PersistenceUnavailable as e:
        result["database"] = f"error: {e.message}"
        result["status"] = "degraded"

    return result
