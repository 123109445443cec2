# app/routers/dashboard.py
"""Dashboard summary: today's access totals (UTC day)."""

from fastapi import APIRouter, Depends

from app.config import settings
from app.dependencies import get_storage, store_call
from app.schemas.dashboard import DashboardStats
from app.storage.base import Storage

router = APIRouter()


@router.get("/dashboard/stats", response_model=DashboardStats, summary="Today's access totals")
async def get_dashboard_stats(storage: Storage = Depends(get_storage)):
    return await store_call(storage.get_today_stats, settings.ACTIVE_GATES)
