# app/database.py
"""
Database engine and session factory for the SQL-backed store.
Uses SQLAlchemy (PostgreSQL in production, SQLite for tests). All models are
auto-imported in create_tables() so every table is created in one call.
"""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def build_engine(url: str, timeout: Optional[float] = None) -> Engine:
    """
    Create an engine for `url`. SQLite gets a single shared connection.
    On PostgreSQL, `timeout` (seconds) bounds both connecting and each statement.
    """
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    connect_args = {}
    if timeout and url.startswith("postgresql"):
        connect_args = {
            "connect_timeout": max(1, int(timeout)),
            "options": f"-c statement_timeout={int(timeout * 1000)}",
        }
    return create_engine(
        url,
        connect_args=connect_args,
        pool_pre_ping=True,          # Auto-reconnect if DB connection drops
        pool_size=10,
        max_overflow=20,
        echo=False,                  # Set True to log all SQL queries (debug only)
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    # expire_on_commit=False: rows are converted to schemas after commit
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def create_tables(engine: Engine):
    """
    Creates all DB tables. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from app.models.student import Student           # noqa
    from app.models.vehicle import Vehicle           # noqa
    from app.models.access_log import AccessLog      # noqa
    from app.models.alert import Alert               # noqa

    Base.metadata.create_all(bind=engine)
