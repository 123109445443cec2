# app/schemas/dashboard.py
from app.schemas.base import CamelModel


class DashboardStats(CamelModel):
    total_access: int
    granted: int
    denied: int
    active_gates: int
