"""
Dashboard and statistics queries.

Read-only aggregation over students and appointments. Counts and group-bys
run in SQL; time bucketing (weeks, months, days) is done in Python by the
pure helpers at the bottom of this module so results do not depend on the
database's date functions.

``now`` is a naive local datetime, the same convention as
``Appointment.requested_date``.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime, timedelta
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from atmachetana.core.enums import AppointmentStatus, RiskLevel, StudentStatus
from atmachetana.core.errors import InvalidInput
from atmachetana.core.models import Appointment, Student
from atmachetana.core.schemas.appointments import AppointmentSchema

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    """Naive local -> aware UTC, for comparisons against ``created_at``."""
    return value.astimezone(UTC)


def _month_start(year: int, month: int) -> datetime:
    return datetime(year, month, 1)


def _next_month(year: int, month: int) -> tuple[int, int]:
    return (year + 1, 1) if month == 12 else (year, month + 1)


def _months_before(day: date, months: int) -> date:
    """Same day-of-month ``months`` earlier, clamped to the month's length."""
    index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    ny, nm = _next_month(year, month)
    last_day = (date(ny, nm, 1) - timedelta(days=1)).day
    return date(year, month, min(day.day, last_day))


def _serialize(appointment: Appointment | None) -> dict[str, Any] | None:
    if appointment is None:
        return None
    return AppointmentSchema.model_validate(appointment).model_dump(mode="json", by_alias=True)


async def _count(db: AsyncSession, model: type, *conditions: Any) -> int:
    return await db.scalar(select(func.count()).select_from(model).where(*conditions)) or 0


async def _distribution(db: AsyncSession, column: Any, key: str) -> list[dict[str, Any]]:
    """``[{key: value, "count": n}]`` for each distinct value of ``column``."""
    result = await db.execute(select(column, func.count()).group_by(column).order_by(column))
    return [{key: value, "count": count} for value, count in result.all()]


# ============================================================================
# Dashboards
# ============================================================================


async def student_dashboard(
    db: AsyncSession, student_id: int, now: datetime | None = None
) -> dict[str, Any]:
    """A student's own appointment overview."""
    now = now or datetime.now()
    own = Appointment.student_id == student_id
    upcoming = (
        own,
        Appointment.status == AppointmentStatus.CONFIRMED.value,
        Appointment.requested_date >= now,
    )

    last_result = await db.execute(
        select(Appointment)
        .where(own, Appointment.status == AppointmentStatus.COMPLETED.value)
        .options(selectinload(Appointment.student), selectinload(Appointment.counsellor))
        .order_by(Appointment.confirmed_date.desc(), Appointment.requested_date.desc())
        .limit(1)
    )
    next_result = await db.execute(
        select(Appointment)
        .where(*upcoming)
        .options(selectinload(Appointment.student), selectinload(Appointment.counsellor))
        .order_by(Appointment.requested_date.asc())
        .limit(1)
    )

    return {
        "overview": {
            "totalAppointments": await _count(db, Appointment, own),
            "completedAppointments": await _count(
                db, Appointment, own, Appointment.status == AppointmentStatus.COMPLETED.value
            ),
            "upcomingAppointments": await _count(db, Appointment, *upcoming),
            "pendingAppointments": await _count(
                db, Appointment, own, Appointment.status == AppointmentStatus.PENDING.value
            ),
            "lastAppointment": _serialize(last_result.scalar_one_or_none()),
            "nextAppointment": _serialize(next_result.scalar_one_or_none()),
        }
    }


async def staff_dashboard(db: AsyncSession, now: datetime | None = None) -> dict[str, Any]:
    """Service-wide overview for counsellors and admins."""
    now = now or datetime.now()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    tomorrow = today + timedelta(days=1)
    week_ago = _as_utc(now - timedelta(days=7))
    trend_start = _months_before(now.date(), 6)
    trend_cutoff = _as_utc(datetime(trend_start.year, trend_start.month, trend_start.day))

    by_status = await db.execute(
        select(Appointment.status, func.count()).group_by(Appointment.status)
    )
    status_counts = {status: count for status, count in by_status.all()}
    created = await db.scalars(
        select(Appointment.created_at).where(Appointment.created_at >= trend_cutoff)
    )

    return {
        "overview": {
            "totalStudents": await _count(db, Student, Student.is_active.is_(True)),
            "activeStudents": await _count(
                db, Student, Student.status == StudentStatus.ACTIVE.value
            ),
            "totalAppointments": sum(status_counts.values()),
            "pendingAppointments": status_counts.get(AppointmentStatus.PENDING.value, 0),
            "confirmedAppointments": status_counts.get(AppointmentStatus.CONFIRMED.value, 0),
            "completedAppointments": status_counts.get(AppointmentStatus.COMPLETED.value, 0),
            "todaysAppointments": await _count(
                db,
                Appointment,
                Appointment.requested_date >= today,
                Appointment.requested_date < tomorrow,
            ),
            "highPriorityStudents": await _count(
                db, Student, Student.risk_level == RiskLevel.HIGH.value
            ),
            "recentAppointments": await _count(
                db, Appointment, Appointment.created_at >= week_ago
            ),
        },
        "appointmentTypes": await _distribution(db, Appointment.type, "type"),
        "monthlyTrend": monthly_trend(created.all()),
    }


async def student_stats(db: AsyncSession, now: datetime | None = None) -> dict[str, Any]:
    """Student status and risk distributions plus recent registrations."""
    now = now or datetime.now()
    since = _as_utc(now - timedelta(days=30))
    return {
        "statusStats": await _distribution(db, Student.status, "status"),
        "priorityStats": await _distribution(db, Student.risk_level, "riskLevel"),
        "recentRegistrations": await _count(db, Student, Student.created_at >= since),
        "total": await _count(db, Student),
    }


async def appointment_stats(db: AsyncSession, now: datetime | None = None) -> dict[str, Any]:
    """Appointment distributions, this month's weekly load and completion rate."""
    now = now or datetime.now()
    month_start = _month_start(now.year, now.month)
    month_end = _month_start(*_next_month(now.year, now.month))

    total = await _count(db, Appointment)
    completed = await _count(
        db, Appointment, Appointment.status == AppointmentStatus.COMPLETED.value
    )
    this_month = await db.scalars(
        select(Appointment.requested_date).where(
            Appointment.requested_date >= month_start,
            Appointment.requested_date < month_end,
        )
    )

    return {
        "statusStats": await _distribution(db, Appointment.status, "status"),
        "typeStats": await _distribution(db, Appointment.type, "type"),
        "priorityStats": await _distribution(db, Appointment.priority, "priority"),
        "weeklyStats": weekly_buckets(this_month.all()),
        "completionRate": completion_rate(completed, total),
        "total": total,
    }


async def calendar(
    db: AsyncSession, month: int | None = None, year: int | None = None
) -> dict[str, Any]:
    """Appointments per day of one month (defaults to the current month)."""
    today = datetime.now()
    month = month or today.month
    year = year or today.year
    if not 1 <= month <= 12:
        raise InvalidInput("month must be between 1 and 12")

    start = _month_start(year, month)
    end = _month_start(*_next_month(year, month))
    result = await db.scalars(
        select(Appointment)
        .where(Appointment.requested_date >= start, Appointment.requested_date < end)
        .order_by(Appointment.requested_date, Appointment.id)
    )
    return {"month": month, "year": year, "dailyAppointments": daily_buckets(result.all())}


# ============================================================================
# Bucketing
# ============================================================================


def completion_rate(completed: int, total: int) -> float:
    """Percentage rounded to two decimals; 0 when there is nothing to complete."""
    if total == 0:
        return 0
    return round(completed / total * 100, 2)


def monthly_trend(timestamps: Iterable[datetime]) -> list[dict[str, int]]:
    """Count per calendar month, oldest first; empty months are omitted."""
    counts = Counter((ts.year, ts.month) for ts in timestamps)
    return [
        {"year": year, "month": month, "count": counts[(year, month)]}
        for year, month in sorted(counts)
    ]


def weekly_buckets(dates: Iterable[datetime]) -> list[dict[str, int]]:
    """Count per ISO week number, in week order."""
    counts = Counter(value.isocalendar().week for value in dates)
    return [{"week": week, "count": counts[week]} for week in sorted(counts)]


def daily_buckets(appointments: Sequence[Appointment]) -> list[dict[str, Any]]:
    """Group appointments by day of month with a compact summary of each."""
    days: dict[int, list[dict[str, Any]]] = defaultdict(list)
    for appointment in appointments:
        days[appointment.requested_date.day].append(
            {
                "id": appointment.id,
                "time": appointment.requested_time,
                "status": appointment.status,
                "type": appointment.type,
                "studentId": appointment.student_id,
            }
        )
    return [
        {"day": day, "count": len(items), "appointments": items}
        for day, items in sorted(days.items())
    ]
