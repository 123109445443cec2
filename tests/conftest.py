# tests/conftest.py
"""Shared fixtures: seeded stores and a recording broadcaster."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import AsyncMock, MagicMock

from app.database import build_engine, build_session_factory, create_tables
from app.schemas.student import StudentCreate
from app.schemas.vehicle import VehicleCreate
from app.storage.memory import MemoryStorage
from app.storage.sql import SqlStorage


def add_student(storage, student_id="S100", plate="ABC123", name="Test Student",
                department="CS", active=True, vehicle_active=True):
    """Register a student and (unless plate is None) one vehicle. Returns (student, vehicle)."""
    student = storage.create_student(StudentCreate(
        student_id=student_id,
        name=name,
        roll_number=f"R-{student_id}",
        department=department,
        year="3",
        division="A",
        contact_number="+91-9000000000",
        is_active=active,
    ))
    vehicle = None
    if plate:
        vehicle = storage.create_vehicle(VehicleCreate(
            student_id=student.id,
            plate_number=plate,
            vehicle_type="car",
            is_active=vehicle_active,
        ))
    return student, vehicle


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def sql_storage():
    engine = build_engine("sqlite://")
    create_tables(engine)
    yield SqlStorage(build_session_factory(engine))
    engine.dispose()


@pytest.fixture
def broadcaster():
    """Stands in for Broadcaster; records every broadcast call."""
    fake = MagicMock()
    fake.broadcast = AsyncMock(return_value=1)
    return fake


@pytest.fixture
def seed():
    """add_student as a fixture, so tests don't import conftest directly."""
    return add_student
