# app/dependencies.py
"""FastAPI dependencies. Long-lived services are built at startup and kept on app.state."""

from fastapi import Request

from app.config import settings
from app.services.access_verifier import AccessVerifier
from app.services.broadcaster import Broadcaster
from app.storage.base import Storage, call_store


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_broadcaster(request: Request) -> Broadcaster:
    return request.app.state.broadcaster


def get_verifier(request: Request) -> AccessVerifier:
    return request.app.state.verifier


async def store_call(method, *args):
    """Await a store method from a route, bounded by PERSISTENCE_TIMEOUT_SECONDS."""
    return await call_store(method, *args, timeout=settings.PERSISTENCE_TIMEOUT_SECONDS)
