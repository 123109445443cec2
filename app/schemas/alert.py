# app/schemas/alert.py
from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from app.schemas.base import CamelModel


class AlertCreate(CamelModel):
    alert_type: str = Field(alias="type")   # unauthorized_access | scan_failed | system_update
    severity: str                           # critical | warning | info
    title: str
    description: str
    gate_location: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class AlertOut(AlertCreate):
    id: str
    is_read: bool
    created_at: datetime
