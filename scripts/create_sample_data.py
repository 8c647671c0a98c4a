#!/usr/bin/env python3
"""
Sample Data Loader: demo students and appointments

Clears students and appointments (staff accounts are kept), makes sure an
admin exists, then creates three students and three appointments: one
Confirmed, one Completed with action items and one Pending.

Usage:
    python scripts/create_sample_data.py
    python scripts/create_sample_data.py --create-tables \
        --database-url=sqlite+aiosqlite:///demo.db
"""

import argparse
import asyncio
import sys
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any

from sqlalchemy import delete, select

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from atmachetana.auth import ensure_default_admin
from atmachetana.config import Settings, settings
from atmachetana.core.database import Database
from atmachetana.core.enums import AppointmentStatus
from atmachetana.core.models import (
    ActionItem,
    Appointment,
    FollowUpEmail,
    Interest,
    RecurringPattern,
    Staff,
    Student,
    Subject,
)
from atmachetana.core.security import get_password_hash

SAMPLE_PASSWORD = "student123"  # pragma: allowlist secret

SAMPLE_STUDENTS: list[dict[str, Any]] = [
    {
        "first_name": "John",
        "last_name": "Doe",
        "email": "john.doe@student.com",
        "phone": "9876543210",
        "date_of_birth": date(2005, 5, 15),
        "gender": "Male",
        "street": "123 Main St",
        "city": "Bangalore",
        "state": "Karnataka",
        "pincode": "560001",
        "current_class": "4th Year",
        "school": "Computer Science and Engineering",
        "board": "VTU",
        "career_goals": "Software Engineer",
        "risk_level": "Low",
        "special_needs": "None",
        "parent_name": "Jane Doe",
        "parent_relationship": "Mother",
        "parent_phone": "9876543211",
        "parent_email": "jane.doe@parent.com",
        "subjects": ["Data Structures", "Algorithms", "Database Systems", "Software Engineering"],
        "interests": ["Programming", "Web Development", "Problem Solving"],
    },
    {
        "first_name": "Alice",
        "last_name": "Smith",
        "email": "alice.smith@student.com",
        "phone": "9876543212",
        "date_of_birth": date(2006, 3, 22),
        "gender": "Female",
        "street": "456 Oak Ave",
        "city": "Mysore",
        "state": "Karnataka",
        "pincode": "570001",
        "current_class": "3rd Year",
        "school": "Bio Technology",
        "board": "VTU",
        "career_goals": "Biotechnology Researcher",
        "risk_level": "Medium",
        "special_needs": "Study anxiety",
        "parent_name": "Robert Smith",
        "parent_relationship": "Father",
        "parent_phone": "9876543213",
        "parent_email": "robert.smith@parent.com",
        "subjects": ["Biochemistry", "Molecular Biology", "Genetics", "Bioprocess Engineering"],
        "interests": ["Research", "Biotechnology", "Life Sciences"],
    },
    {
        "first_name": "Michael",
        "last_name": "Johnson",
        "email": "michael.johnson@student.com",
        "phone": "9876543214",
        "date_of_birth": date(2004, 11, 8),
        "gender": "Male",
        "street": "789 Pine St",
        "city": "Hubli",
        "state": "Karnataka",
        "pincode": "580020",
        "current_class": "2nd Year",
        "school": "Artificial Intelligence and Machine Learning",
        "board": "VTU",
        "career_goals": "AI Engineer",
        "risk_level": "High",
        "special_needs": "Social anxiety",
        "parent_name": "Sarah Johnson",
        "parent_relationship": "Mother",
        "parent_phone": "9876543215",
        "parent_email": "sarah.johnson@parent.com",
        "subjects": ["Machine Learning", "Python Programming", "Statistics", "Linear Algebra"],
        "interests": ["AI/ML", "Data Science", "Innovation"],
    },
]

SAMPLE_APPOINTMENTS: list[dict[str, Any]] = [
    {
        "student": 0,
        "type": "Academic Counseling",
        "days": 1,
        "status": AppointmentStatus.CONFIRMED,
        "time": "10:00 AM",
        "reason": "Need guidance on course selection for engineering",
        "concerns": "Confused about engineering branch",
    },
    {
        "student": 1,
        "type": "Stress Management",
        "days": -3,
        "status": AppointmentStatus.COMPLETED,
        "time": "2:00 PM",
        "reason": "Study related stress",
        "concerns": "Exam pressure",
        "summary": "Discussed stress management",
        "items": ["Breathing exercises", "Study schedule", "Breaks"],
    },
    {
        "student": 2,
        "type": "Personal Counseling",
        "days": 2,
        "status": AppointmentStatus.PENDING,
        "time": "11:30 AM",
        "reason": "Social anxiety",
        "concerns": "Peer interaction issues",
    },
]


class SampleDataLoader:
    """Resets student data and loads the demo set."""

    def __init__(self, database: Database, app_settings: Settings):
        self.database = database
        self.settings = app_settings

    async def clear(self) -> None:
        """Delete students and everything hanging off them. Staff are kept."""
        async with self.database.session_factory() as session:
            for model in (ActionItem, RecurringPattern, FollowUpEmail, Appointment):
                await session.execute(delete(model))
            await session.execute(delete(Subject))
            await session.execute(delete(Interest))
            await session.execute(delete(Student))
            await session.commit()
        print("✅ Cleared students and appointments")

    async def load(self, now: datetime | None = None) -> dict[str, int]:
        """Create the demo students and appointments.

        Returns:
            Counts of created students, appointments and action items
        """
        now = now or datetime.now()
        async with self.database.session_factory() as session:
            if await ensure_default_admin(session, self.settings):
                print(f"✅ Created default admin {self.settings.ADMIN_EMAIL}")
            counsellor = await session.scalar(select(Staff).order_by(Staff.id).limit(1))

            students: list[Student] = []
            for record in SAMPLE_STUDENTS:
                fields = {k: v for k, v in record.items() if k not in ("subjects", "interests")}
                student = Student(
                    **fields,
                    hashed_password=get_password_hash(SAMPLE_PASSWORD),
                    is_verified=True,
                    subjects=[Subject(value=value) for value in record["subjects"]],
                    interests=[Interest(value=value) for value in record["interests"]],
                )
                session.add(student)
                students.append(student)
            await session.flush()
            print(f"✅ Created {len(students)} students")

            action_items = 0
            for plan in SAMPLE_APPOINTMENTS:
                when = (now + timedelta(days=plan["days"])).replace(microsecond=0)
                confirmed = plan["status"] is AppointmentStatus.CONFIRMED
                items = [ActionItem(value=value) for value in plan.get("items", [])]
                session.add(
                    Appointment(
                        student_id=students[plan["student"]].id,
                        counsellor_id=counsellor.id if counsellor else None,
                        requested_date=when,
                        requested_time=plan["time"],
                        confirmed_date=when if confirmed else None,
                        confirmed_time=plan["time"] if confirmed else None,
                        duration=60,
                        type=plan["type"],
                        mode="In-Person",
                        priority="Medium",
                        reason=plan["reason"],
                        student_concerns=plan["concerns"],
                        status=plan["status"].value,
                        session_summary=plan.get("summary"),
                        follow_up_required=bool(items),
                        action_items=items,
                    )
                )
                action_items += len(items)
            await session.commit()
            print(f"✅ Created {len(SAMPLE_APPOINTMENTS)} appointments")

        return {
            "students": len(students),
            "appointments": len(SAMPLE_APPOINTMENTS),
            "action_items": action_items,
        }


async def main(database_url: str | None, create_tables: bool) -> None:
    app_settings = settings
    database = (
        Database(database_url) if database_url else Database.from_settings(app_settings)
    )
    try:
        if create_tables:
            await database.create_all()
        loader = SampleDataLoader(database, app_settings)
        await loader.clear()
        summary = await loader.load()
    finally:
        await database.dispose()

    print("\n🎉 Sample data created:")
    print(f"   Admin: {app_settings.ADMIN_EMAIL}")
    for record in SAMPLE_STUDENTS:
        print(f"   Student: {record['email']} / {SAMPLE_PASSWORD}")
    print(f"   {summary['appointments']} appointments, {summary['action_items']} action items")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Load demo students and appointments")
    parser.add_argument("--database-url", help="Override DATABASE_URL")
    parser.add_argument(
        "--create-tables", action="store_true", help="Create tables before loading"
    )
    args = parser.parse_args()
    asyncio.run(main(args.database_url, args.create_tables))
