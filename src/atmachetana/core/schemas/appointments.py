"""
Appointment Schemas

Request bodies for the lifecycle endpoints and the response shapes.
Dates arrive as loose strings and are validated by the lifecycle service so
the client gets the same message from every endpoint.
"""

from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field

from atmachetana.core.enums import RecurrenceFrequency

from .common import CamelModel, Pagination
from .students import StudentSummary
from .users import StaffSummary

# Requests


class RecurringPatternIn(CamelModel):
    frequency: RecurrenceFrequency
    interval: int = Field(default=1, ge=1, le=12)
    end_date: str | None = None


class AppointmentDetails(CamelModel):
    student_id: int | None = None
    counsellor_id: int | None = None
    requested_date: Any = None
    requested_time: str | None = None
    type: str | None = None
    mode: str | None = None
    priority: str | None = None
    status: str | None = None
    student_concerns: str | None = None
    recurring_pattern: RecurringPatternIn | None = None


class AppointmentCreate(CamelModel):
    """``POST /api/appointments`` body."""

    appointment_details: AppointmentDetails
    reason: str | None = None


class ConfirmRequest(CamelModel):
    confirmed_date: str | None = None
    confirmed_time: str | None = None
    send_email: bool = False
    custom_message: str | None = None


class CompleteRequest(CamelModel):
    session_summary: str | None = None
    action_items: list[str] | None = None
    recommendations: str | None = None
    follow_up_date: str | None = None


class StatusRequest(CamelModel):
    status: str | None = None


class AppointmentPatch(CamelModel):
    """``PATCH /api/appointments/{id}`` body.

    Every field is optional and unknown keys are dropped. Which of these a
    caller may actually set depends on their role.
    """

    model_config = ConfigDict(extra="ignore")

    requested_date: str | None = None
    requested_time: str | None = None
    reason: str | None = None
    student_concerns: str | None = None
    type: str | None = None
    mode: str | None = None
    priority: str | None = None
    counsellor_id: int | None = None
    confirmed_date: str | None = None
    confirmed_time: str | None = None
    status: str | None = None
    pre_session_notes: str | None = None
    session_summary: str | None = None
    recommendations: str | None = None
    next_steps: str | None = None
    follow_up_required: bool = False
    follow_up_date: str | None = None
    urgency_level: str | None = None


# Responses


class ActionItemSchema(CamelModel):
    id: int
    value: str
    created_at: datetime | None = None


class RecurringPatternSchema(CamelModel):
    id: int
    frequency: str
    interval: int
    end_date: datetime | None


class AppointmentSchema(CamelModel):
    """Appointment with its student and counsellor attached."""

    id: int
    student_id: int
    counsellor_id: int | None
    requested_date: datetime
    requested_time: str | None
    confirmed_date: datetime | None
    confirmed_time: str | None
    duration: int
    type: str | None
    mode: str | None
    priority: str | None
    urgency_level: str | None
    reason: str | None
    student_concerns: str | None
    pre_session_notes: str | None
    status: str
    session_summary: str | None
    recommendations: str | None
    next_steps: str | None
    follow_up_required: bool
    follow_up_date: datetime | None
    email_sent: bool
    email_sent_at: datetime | None
    email_sent_by: int | None
    created_at: datetime
    updated_at: datetime
    student: StudentSummary | None = None
    counsellor: StaffSummary | None = None


class AppointmentDetailSchema(AppointmentSchema):
    """Single-appointment view including post-session records."""

    action_items: list[ActionItemSchema] = Field(default_factory=list)
    recurring_pattern: RecurringPatternSchema | None = None


class AppointmentData(CamelModel):
    appointment: AppointmentDetailSchema


class AppointmentListData(CamelModel):
    appointments: list[AppointmentSchema]
    pagination: Pagination


class AppointmentCollection(CamelModel):
    appointments: list[AppointmentSchema]
