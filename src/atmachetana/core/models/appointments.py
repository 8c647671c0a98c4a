"""
Appointment Models

Counselling appointments and the records hanging off them: action items,
recurrence patterns and the follow-up email audit trail.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .staff import Staff
    from .students import Student

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from atmachetana.core.enums import AppointmentStatus, RecurrenceFrequency, sql_in

from .base import Base, IntegerPrimaryKeyMixin, TimestampMixin


class Appointment(Base, IntegerPrimaryKeyMixin, TimestampMixin):
    """A counselling appointment requested by (or for) a student.

    ``requested_date``/``confirmed_date`` are naive local datetimes: the
    calendar day is what matters for filtering and display.
    """

    __tablename__ = "appointments"
    __table_args__ = (
        CheckConstraint(f"status IN {sql_in(AppointmentStatus)}", name="check_appointment_status"),
        Index("idx_appointments_student", "student_id"),
        Index("idx_appointments_status", "status"),
        Index("idx_appointments_requested_date", "requested_date"),
    )

    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    counsellor_id: Mapped[int | None] = mapped_column(
        ForeignKey("admins.id", ondelete="SET NULL"), nullable=True
    )

    # Scheduling
    requested_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    requested_time: Mapped[str | None] = mapped_column(String(20), nullable=True)
    confirmed_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    confirmed_time: Mapped[str | None] = mapped_column(String(20), nullable=True)
    duration: Mapped[int] = mapped_column(Integer, default=60, comment="Minutes")

    # Request details
    type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    mode: Mapped[str | None] = mapped_column(String(50), nullable=True)
    priority: Mapped[str | None] = mapped_column(String(20), nullable=True)
    urgency_level: Mapped[str | None] = mapped_column(String(20), nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    student_concerns: Mapped[str | None] = mapped_column(Text, nullable=True)
    pre_session_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(String(20), default=AppointmentStatus.PENDING.value)

    # Post-session
    session_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    recommendations: Mapped[str | None] = mapped_column(Text, nullable=True)
    next_steps: Mapped[str | None] = mapped_column(Text, nullable=True)
    follow_up_required: Mapped[bool] = mapped_column(default=False)
    follow_up_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Confirmation email audit
    email_sent: Mapped[bool] = mapped_column(default=False)
    email_sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    email_sent_by: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relationships
    student: Mapped[Student] = relationship(back_populates="appointments")
    counsellor: Mapped[Staff | None] = relationship(back_populates="appointments")
    action_items: Mapped[list[ActionItem]] = relationship(
        back_populates="appointment", cascade="all, delete-orphan", order_by="ActionItem.id"
    )
    recurring_pattern: Mapped[RecurringPattern | None] = relationship(
        back_populates="appointment", cascade="all, delete-orphan", uselist=False
    )
    follow_up_emails: Mapped[list[FollowUpEmail]] = relationship(
        back_populates="appointment", cascade="all, delete-orphan"
    )


class ActionItem(Base, IntegerPrimaryKeyMixin):
    """A free-text follow-up task recorded when an appointment is completed."""

    __tablename__ = "action_items"

    appointment_id: Mapped[int] = mapped_column(
        ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    value: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    appointment: Mapped[Appointment] = relationship(back_populates="action_items")


class RecurringPattern(Base, IntegerPrimaryKeyMixin):
    """Optional recurrence attached to an appointment at creation time."""

    __tablename__ = "recurring_patterns"
    __table_args__ = (
        CheckConstraint(f"frequency IN {sql_in(RecurrenceFrequency)}", name="check_frequency"),
    )

    appointment_id: Mapped[int] = mapped_column(
        ForeignKey("appointments.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    frequency: Mapped[str] = mapped_column(String(20), nullable=False)
    interval: Mapped[int] = mapped_column(Integer, default=1)
    end_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    appointment: Mapped[Appointment] = relationship(back_populates="recurring_pattern")


class FollowUpEmail(Base, IntegerPrimaryKeyMixin):
    """Append-only audit row for an ad-hoc follow-up email."""

    __tablename__ = "follow_up_emails"

    appointment_id: Mapped[int] = mapped_column(
        ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    sent_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    sent_by: Mapped[int] = mapped_column(Integer, nullable=False)

    appointment: Mapped[Appointment] = relationship(back_populates="follow_up_emails")
