"""
Appointment lifecycle service.

State machine: Pending -> Confirmed -> Completed | Cancelled. Only the
staff-gated ``set_status`` can move an appointment out of Completed or
Cancelled. Writes are last-writer-wins; there is no version column.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from atmachetana.auth.principal import Principal
from atmachetana.config import Settings
from atmachetana.core.enums import AppointmentStatus
from atmachetana.core.errors import Forbidden, InvalidInput, NotFound
from atmachetana.core.models import (
    ActionItem,
    Appointment,
    RecurringPattern,
    Staff,
    Student,
)
from atmachetana.core.schemas.appointments import AppointmentDetails
from atmachetana.core.validation import (
    day_bounds,
    pagination_info,
    parse_date_input,
    parse_optional_date,
    parse_status,
    validate_pagination,
    validate_sort,
)

from .permissions import DATE_FIELDS, RESCHEDULE_FIELDS, filter_patch

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "createdAt": Appointment.created_at,
    "updatedAt": Appointment.updated_at,
    "requestedDate": Appointment.requested_date,
    "confirmedDate": Appointment.confirmed_date,
    "status": Appointment.status,
    "priority": Appointment.priority,
    "type": Appointment.type,
}


@dataclass(frozen=True)
class LifecyclePolicy:
    """Hardening switches; both off reproduces the permissive behaviour."""

    confirm_staff_only: bool = False
    initial_status_staff_only: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> LifecyclePolicy:
        return cls(
            confirm_staff_only=settings.APPOINTMENT_CONFIRM_STAFF_ONLY,
            initial_status_staff_only=settings.APPOINTMENT_INITIAL_STATUS_STAFF_ONLY,
        )


@dataclass
class AppointmentFilters:
    status: str | None = None
    type: str | None = None
    priority: str | None = None
    date: str | None = None


@dataclass
class AppointmentPage:
    appointments: list[Appointment]
    pagination: dict[str, int]


class AppointmentService:
    """Lifecycle operations over one request-scoped session."""

    def __init__(self, db: AsyncSession, policy: LifecyclePolicy | None = None):
        self.db = db
        self.policy = policy or LifecyclePolicy()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def _load(self, appointment_id: int) -> Appointment:
        result = await self.db.execute(
            select(Appointment)
            .where(Appointment.id == appointment_id)
            .options(
                selectinload(Appointment.student),
                selectinload(Appointment.counsellor),
                selectinload(Appointment.action_items),
                selectinload(Appointment.recurring_pattern),
            )
            .execution_options(populate_existing=True)
        )
        appointment = result.scalar_one_or_none()
        if appointment is None:
            raise NotFound("Appointment not found")
        return appointment

    @staticmethod
    def _check_owner(principal: Principal, appointment: Appointment) -> None:
        if principal.is_student and appointment.student_id != principal.id:
            raise Forbidden("Not authorized to access this appointment")

    async def get(self, principal: Principal, appointment_id: int) -> Appointment:
        """Full record: student, counsellor, action items and recurrence."""
        appointment = await self._load(appointment_id)
        self._check_owner(principal, appointment)
        return appointment

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create(
        self, principal: Principal, details: AppointmentDetails, reason: str | None = None
    ) -> Appointment:
        """Create an appointment request.

        A student always creates for themself; staff name the student.

        Raises:
            InvalidInput: Missing student id, bad date or unknown status
            Forbidden: Student setting an initial status under the strict policy
            NotFound: Unknown student or counsellor
        """
        student_id = principal.id if principal.is_student else details.student_id
        if not student_id:
            raise InvalidInput("Student ID is required")

        requested_date = parse_date_input(details.requested_date)

        status = AppointmentStatus.PENDING
        if details.status:
            if principal.is_student and self.policy.initial_status_staff_only:
                raise Forbidden("Students cannot set the appointment status")
            status = parse_status(details.status)

        if await self.db.get(Student, student_id) is None:
            raise NotFound("Student not found")
        if details.counsellor_id and await self.db.get(Staff, details.counsellor_id) is None:
            raise NotFound("Counsellor not found")

        appointment = Appointment(
            student_id=student_id,
            counsellor_id=details.counsellor_id or None,
            requested_date=requested_date,
            requested_time=details.requested_time or None,
            type=details.type or None,
            mode=details.mode or None,
            priority=details.priority or None,
            student_concerns=details.student_concerns or None,
            reason=reason,
            status=status.value,
            action_items=[],
        )
        if details.recurring_pattern is not None:
            pattern = details.recurring_pattern
            appointment.recurring_pattern = RecurringPattern(
                frequency=pattern.frequency.value,
                interval=pattern.interval,
                end_date=parse_optional_date(pattern.end_date, "endDate"),
            )

        self.db.add(appointment)
        await self.db.commit()
        logger.info(f"Appointment {appointment.id} created for student {student_id}")
        return await self._load(appointment.id)

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def update(
        self, principal: Principal, appointment_id: int, patch: Mapping[str, Any]
    ) -> Appointment:
        """Apply the fields ``principal``'s role may set; drop the rest.

        Raises:
            NotFound: Unknown appointment
            Forbidden: Student editing someone else's appointment
            InvalidInput: Nothing applicable in the patch, or a bad date
        """
        appointment = await self._load(appointment_id)
        self._check_owner(principal, appointment)

        changes = filter_patch(principal.role, patch)
        for column, field in DATE_FIELDS.items():
            if column not in changes:
                continue
            if column == "requested_date":
                changes[column] = parse_date_input(changes[column], field)
            else:
                changes[column] = parse_optional_date(changes[column], field)
        if "status" in changes:
            changes["status"] = parse_status(changes["status"]).value

        if principal.is_student and changes.keys() & RESCHEDULE_FIELDS:
            changes["status"] = AppointmentStatus.PENDING.value
            changes["confirmed_date"] = None
            changes["confirmed_time"] = None

        if not changes:
            raise InvalidInput("No valid fields provided for update")

        for column, value in changes.items():
            setattr(appointment, column, value)
        await self.db.commit()

        logger.info(f"Appointment {appointment_id} updated by {principal.role}: {sorted(changes)}")
        return await self._load(appointment_id)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def confirm(
        self,
        principal: Principal,
        appointment_id: int,
        confirmed_date: Any = None,
        confirmed_time: str | None = None,
    ) -> Appointment:
        """Mark Confirmed; absent date/time leave the stored values alone."""
        if self.policy.confirm_staff_only and not principal.is_staff:
            raise Forbidden("Only staff can confirm appointments")

        appointment = await self._load(appointment_id)
        parsed_date = parse_optional_date(confirmed_date, "confirmedDate")

        appointment.status = AppointmentStatus.CONFIRMED.value
        if parsed_date is not None:
            appointment.confirmed_date = parsed_date
        if confirmed_time:
            appointment.confirmed_time = confirmed_time
        await self.db.commit()

        logger.info(f"Appointment {appointment_id} confirmed by {principal.role} {principal.id}")
        return await self._load(appointment_id)

    async def complete(
        self,
        appointment_id: int,
        session_summary: str | None = None,
        action_items: Sequence[str] | None = None,
        recommendations: str | None = None,
        follow_up_date: Any = None,
    ) -> Appointment:
        """Mark Completed and record one action item per non-empty entry.

        Status change and action items are committed together.
        """
        appointment = await self._load(appointment_id)
        parsed_follow_up = parse_optional_date(follow_up_date, "followUpDate")

        appointment.status = AppointmentStatus.COMPLETED.value
        appointment.session_summary = session_summary
        appointment.recommendations = recommendations
        appointment.follow_up_date = parsed_follow_up

        items = [item.strip() for item in action_items or [] if item and item.strip()]
        for value in items:
            appointment.action_items.append(ActionItem(value=value))

        await self.db.commit()
        logger.info(f"Appointment {appointment_id} completed with {len(items)} action item(s)")
        return await self._load(appointment_id)

    async def set_status(
        self, principal: Principal, appointment_id: int, status: Any
    ) -> Appointment:
        """Staff override of the status, from any state to any state."""
        if not principal.is_staff:
            raise Forbidden()
        new_status = parse_status(status)

        appointment = await self._load(appointment_id)
        appointment.status = new_status.value
        await self.db.commit()
        return await self._load(appointment_id)

    async def delete(self, principal: Principal, appointment_id: int) -> None:
        """Hard delete; action items, recurrence and follow-ups go with it."""
        appointment = await self._load(appointment_id)
        self._check_owner(principal, appointment)
        await self.db.delete(appointment)
        await self.db.commit()
        logger.info(f"Appointment {appointment_id} deleted by {principal.role} {principal.id}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list(
        self,
        principal: Principal,
        filters: AppointmentFilters | None = None,
        *,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 10,
    ) -> AppointmentPage:
        """Filtered, sorted, paginated list; students only see their own."""
        filters = filters or AppointmentFilters()
        skip, limit = validate_pagination(page, limit)
        column, descending = validate_sort(sort_by, sort_order, SORTABLE_COLUMNS)

        conditions = []
        if principal.is_student:
            conditions.append(Appointment.student_id == principal.id)
        if filters.status:
            conditions.append(Appointment.status == filters.status)
        if filters.type:
            conditions.append(Appointment.type == filters.type)
        if filters.priority:
            conditions.append(Appointment.priority == filters.priority)
        if filters.date:
            start, end = day_bounds(filters.date)
            conditions.append(Appointment.requested_date >= start)
            conditions.append(Appointment.requested_date < end)

        total = await self.db.scalar(
            select(func.count()).select_from(Appointment).where(*conditions)
        )
        result = await self.db.execute(
            select(Appointment)
            .where(*conditions)
            .options(selectinload(Appointment.student), selectinload(Appointment.counsellor))
            .order_by(column.desc() if descending else column.asc(), Appointment.id)
            .offset(skip)
            .limit(limit)
        )
        return AppointmentPage(
            appointments=list(result.scalars().all()),
            pagination=pagination_info(page, limit, total or 0),
        )

    async def list_pending(self, principal: Principal) -> list[Appointment]:
        """Pending requests, newest first. Staff only."""
        if not principal.is_staff:
            raise Forbidden()
        result = await self.db.execute(
            select(Appointment)
            .where(Appointment.status == AppointmentStatus.PENDING.value)
            .options(selectinload(Appointment.student), selectinload(Appointment.counsellor))
            .order_by(Appointment.created_at.desc(), Appointment.id.desc())
        )
        return list(result.scalars().all())
