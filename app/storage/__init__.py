# app/storage/__init__.py
"""
Storage backends. create_storage() picks one from settings at startup:
SQL when DATABASE_URL is set, in-memory otherwise.
"""

from app.config import Settings
from app.storage.base import Storage
from app.storage.memory import MemoryStorage
from app.utils.logger import get_logger

logger = get_logger(__name__)


def create_storage(settings: Settings) -> Storage:
    if settings.storage_backend == "memory":
        return MemoryStorage()

    from app.database import build_engine, build_session_factory, create_tables
    from app.storage.sql import SqlStorage

    engine = build_engine(settings.DATABASE_URL, timeout=settings.PERSISTENCE_TIMEOUT_SECONDS)
    create_tables(engine)
    logger.info(f"Using database storage ({engine.url.render_as_string(hide_password=True)})")
    return SqlStorage(build_session_factory(engine))


__all__ = ["Storage", "MemoryStorage", "create_storage"]
