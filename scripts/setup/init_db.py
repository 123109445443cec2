"""
Initialize database: creates all tables, optionally seeds demo students.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py
       python scripts/setup/init_db.py --seed
"""

import sys
import os
import argparse
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from sqlalchemy import inspect, text

from app.config import settings
from app.database import build_engine, build_session_factory, create_tables
from app.exceptions import InvalidRequest
from app.schemas.student import StudentCreate
from app.schemas.vehicle import VehicleCreate
from app.storage.sql import SqlStorage

DEMO_STUDENTS = [
    (StudentCreate(student_id="S100", name="Aarav Mehta", roll_number="CS-101", department="CS",
                   year="3", division="A", contact_number="+91-9000000100"),
     {"plate_number": "ABC123", "vehicle_type": "car", "model": "Swift", "color": "white"}),
    (StudentCreate(student_id="S200", name="Diya Nair", roll_number="ME-204", department="ME",
                   year="2", division="B", contact_number="+91-9000000200"),
     {"plate_number": "MH12AB1234", "vehicle_type": "motorcycle", "color": "black"}),
    (StudentCreate(student_id="S300", name="Kabir Shah", roll_number="EE-310", department="EE",
                   year="4", division="A", contact_number="+91-9000000300", is_active=False),
     {"plate_number": "KA01XY9999", "vehicle_type": "scooter"}),
]


def seed(storage: SqlStorage):
    for student_data, vehicle_data in DEMO_STUDENTS:
        try:
            student = storage.create_student(student_data)
        except InvalidRequest:
            print(f"   • {student_data.student_id} already present, skipped")
            continue
        storage.create_vehicle(VehicleCreate(student_id=student.id, **vehicle_data))
        print(f"   ✓ {student.student_id} {student.name} → {vehicle_data['plate_number']}")


def main():
    parser = argparse.ArgumentParser(description="Create gate access tables")
    parser.add_argument("--seed", action="store_true", help="insert demo students and vehicles")
    args = parser.parse_args()

    print("🗄️  Gate Access DB Initialization")
    print("=" * 40)
    if not settings.DATABASE_URL:
        print("❌ DATABASE_URL is not set; the backend will run on in-memory storage.")
        print("   Set DATABASE_URL in .env to use a database.")
        sys.exit(1)

    engine = build_engine(settings.DATABASE_URL)
    print(f"📡 Database: {engine.url.render_as_string(hide_password=True)}")

    # Test connection
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running:")
        print("  sudo systemctl start postgresql")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables(engine)
    tables = inspect(engine).get_table_names()
    print(f"\n📊 Tables in database ({len(tables)} total):")
    for t in sorted(tables):
        print(f"   ✓ {t}")

    if args.seed:
        print("\n🌱 Seeding demo students...")
        seed(SqlStorage(build_session_factory(engine)))

    print("\n🎉 Database ready! You can now start the backend:")
    print(f"   uvicorn app.main:app --host 0.0.0.0 --port {settings.BACKEND_PORT} --reload")


if __name__ == "__main__":
    main()
