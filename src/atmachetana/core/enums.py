"""
Closed vocabularies shared by models, schemas and services.
"""

from enum import StrEnum


class Role(StrEnum):
    STUDENT = "student"
    COUNSELLOR = "counsellor"
    ADMIN = "admin"


STAFF_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.COUNSELLOR})


class AppointmentStatus(StrEnum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class StudentStatus(StrEnum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    GRADUATED = "Graduated"


class RiskLevel(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class OtpPurpose(StrEnum):
    SIGNUP = "signup"
    RESET = "reset"


class RecurrenceFrequency(StrEnum):
    WEEKLY = "Weekly"
    BIWEEKLY = "Biweekly"
    MONTHLY = "Monthly"


def sql_in(values: type[StrEnum]) -> str:
    """Render an enum as a SQL ``IN (...)`` list for check constraints."""
    return "(" + ", ".join(f"'{member.value}'" for member in values) + ")"
