"""
Read-only dashboards and statistics.
"""

from .stats import (
    appointment_stats,
    calendar,
    completion_rate,
    daily_buckets,
    monthly_trend,
    staff_dashboard,
    student_dashboard,
    student_stats,
    weekly_buckets,
)

__all__ = [
    "appointment_stats",
    "calendar",
    "completion_rate",
    "daily_buckets",
    "monthly_trend",
    "staff_dashboard",
    "student_dashboard",
    "student_stats",
    "weekly_buckets",
]
