"""
Atma-Chethana SQLAlchemy Models
"""

from .appointments import ActionItem, Appointment, FollowUpEmail, RecurringPattern
from .base import Base, IntegerPrimaryKeyMixin, TimestampMixin
from .staff import Staff
from .students import Interest, Student, Subject

__all__ = [
    # Base
    "Base",
    "IntegerPrimaryKeyMixin",
    "TimestampMixin",
    # People
    "Student",
    "Subject",
    "Interest",
    "Staff",
    # Appointments
    "Appointment",
    "ActionItem",
    "RecurringPattern",
    "FollowUpEmail",
]
