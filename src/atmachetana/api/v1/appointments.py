"""
Appointments API

Request, reschedule, confirm, complete and cancel counselling appointments.
Field-level permissions and transition rules live in
``atmachetana.appointments``; this module only maps HTTP onto them.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from atmachetana.appointments import AppointmentFilters, AppointmentService, LifecyclePolicy
from atmachetana.auth import Principal, get_current_principal, require_staff
from atmachetana.config import settings
from atmachetana.core.database import get_db
from atmachetana.core.models import Appointment
from atmachetana.core.schemas import (
    AppointmentCollection,
    AppointmentCreate,
    AppointmentData,
    AppointmentDetailSchema,
    AppointmentListData,
    AppointmentPatch,
    AppointmentSchema,
    CompleteRequest,
    ConfirmRequest,
    Envelope,
    Pagination,
    StatusRequest,
)
from atmachetana.notifications import (
    EmailClient,
    EmailError,
    get_email_client,
    send_appointment_confirmation,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_lifecycle_policy() -> LifecyclePolicy:
    return LifecyclePolicy.from_settings(settings)


def get_appointment_service(
    db: AsyncSession = Depends(get_db),
    policy: LifecyclePolicy = Depends(get_lifecycle_policy),
) -> AppointmentService:
    return AppointmentService(db, policy)


def _detail(appointment: Appointment) -> AppointmentData:
    return AppointmentData(appointment=AppointmentDetailSchema.model_validate(appointment))


@router.get("", response_model=Envelope[AppointmentListData])
async def list_appointments(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: str | None = Query(None, alias="status"),
    type_filter: str | None = Query(None, alias="type"),
    priority: str | None = None,
    date: str | None = None,
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    principal: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
) -> Envelope[AppointmentListData]:
    """List appointments. Students only ever see their own."""
    filters = AppointmentFilters(
        status=status_filter, type=type_filter, priority=priority, date=date
    )
    result = await service.list(
        principal, filters, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit
    )
    return Envelope(
        data=AppointmentListData(
            appointments=[AppointmentSchema.model_validate(a) for a in result.appointments],
            pagination=Pagination(**result.pagination),
        )
    )


@router.get("/status/pending", response_model=Envelope[AppointmentCollection])
async def list_pending(
    principal: Principal = Depends(require_staff),
    service: AppointmentService = Depends(get_appointment_service),
) -> Envelope[AppointmentCollection]:
    appointments = await service.list_pending(principal)
    return Envelope(
        data=AppointmentCollection(
            appointments=[AppointmentSchema.model_validate(a) for a in appointments]
        )
    )


@router.get("/{appointment_id}", response_model=Envelope[AppointmentData])
async def get_appointment(
    appointment_id: int,
    principal: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
) -> Envelope[AppointmentData]:
    appointment = await service.get(principal, appointment_id)
    return Envelope(data=_detail(appointment))


@router.post("", response_model=Envelope[AppointmentData], status_code=status.HTTP_201_CREATED)
async def create_appointment(
    data: AppointmentCreate,
    principal: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
) -> Envelope[AppointmentData]:
    """Request an appointment.

    Body: ``{"appointmentDetails": {...}, "reason": "..."}``. A student's
    ``studentId`` is always their own.
    """
    appointment = await service.create(principal, data.appointment_details, data.reason)
    return Envelope(message="Appointment created successfully", data=_detail(appointment))


@router.patch("/{appointment_id}", response_model=Envelope[AppointmentData])
async def update_appointment(
    appointment_id: int,
    patch: AppointmentPatch,
    principal: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
) -> Envelope[AppointmentData]:
    """Partial update; keys outside the caller's role allow-list are ignored."""
    appointment = await service.update(
        principal, appointment_id, patch.model_dump(exclude_unset=True)
    )
    return Envelope(
        message="Appointment updated successfully", data=_detail(appointment)
    )


@router.patch("/{appointment_id}/confirm", response_model=Envelope[AppointmentData])
async def confirm_appointment(
    appointment_id: int,
    data: ConfirmRequest | None = None,
    principal: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
    email_client: EmailClient = Depends(get_email_client),
) -> Envelope[AppointmentData]:
    """Confirm an appointment, optionally emailing the student.

    The email goes out after the confirmation is committed; a delivery
    failure is reported in the message and does not undo the confirmation.
    """
    data = data or ConfirmRequest()
    appointment = await service.confirm(
        principal, appointment_id, data.confirmed_date, data.confirmed_time
    )
    message = "Appointment confirmed"

    if data.send_email:
        try:
            await send_appointment_confirmation(
                service.db,
                email_client,
                appointment_id=appointment_id,
                sender_id=principal.id,
                custom_message=data.custom_message,
            )
            message = "Appointment confirmed and email sent"
        except EmailError as e:
            logger.warning(f"Confirmation email for appointment {appointment_id} failed: {e}")
            message = "Appointment confirmed, but the confirmation email failed to send"

    return Envelope(message=message, data=_detail(appointment))


@router.patch("/{appointment_id}/complete", response_model=Envelope[AppointmentData])
async def complete_appointment(
    appointment_id: int,
    data: CompleteRequest | None = None,
    _staff: Principal = Depends(require_staff),
    service: AppointmentService = Depends(get_appointment_service),
) -> Envelope[AppointmentData]:
    """Close a session with its summary and action items."""
    data = data or CompleteRequest()
    appointment = await service.complete(
        appointment_id,
        session_summary=data.session_summary,
        action_items=data.action_items,
        recommendations=data.recommendations,
        follow_up_date=data.follow_up_date,
    )
    return Envelope(message="Appointment completed", data=_detail(appointment))


@router.patch("/{appointment_id}/status", response_model=Envelope[AppointmentData])
async def set_appointment_status(
    appointment_id: int,
    data: StatusRequest,
    principal: Principal = Depends(require_staff),
    service: AppointmentService = Depends(get_appointment_service),
) -> Envelope[AppointmentData]:
    appointment = await service.set_status(principal, appointment_id, data.status)
    return Envelope(
        message="Appointment status updated", data=_detail(appointment)
    )


@router.delete("/{appointment_id}", response_model=Envelope[None])
async def delete_appointment(
    appointment_id: int,
    principal: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
) -> Envelope[None]:
    await service.delete(principal, appointment_id)
    return Envelope(message="Appointment deleted successfully")
