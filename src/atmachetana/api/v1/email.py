"""
Email API

Appointment confirmations, ad-hoc follow-ups and an SMTP configuration check.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from atmachetana.appointments import AppointmentService
from atmachetana.auth import Principal, get_current_principal, require_staff
from atmachetana.core.database import get_db
from atmachetana.core.errors import InternalError
from atmachetana.core.schemas import CamelModel, Envelope
from atmachetana.notifications import (
    EmailClient,
    EmailError,
    get_email_client,
    send_appointment_confirmation,
    send_follow_up,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class ConfirmationEmailRequest(CamelModel):
    appointment_id: int
    custom_message: str | None = None


class FollowUpRequest(CamelModel):
    student_id: int
    message: str
    subject: str | None = None
    appointment_id: int | None = None


class SentData(CamelModel):
    sent_to: str
    sent_at: datetime


@router.post("/appointment-confirmation", response_model=Envelope[SentData])
async def appointment_confirmation(
    data: ConfirmationEmailRequest,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
    client: EmailClient = Depends(get_email_client),
) -> Envelope[SentData]:
    """Email the confirmation. Students may only trigger it for their own appointment."""
    await AppointmentService(db).get(principal, data.appointment_id)
    try:
        receipt = await send_appointment_confirmation(
            db,
            client,
            appointment_id=data.appointment_id,
            sender_id=principal.id,
            custom_message=data.custom_message,
        )
    except EmailError as e:
        raise InternalError("Failed to send confirmation email") from e
    return Envelope(
        message="Confirmation email sent",
        data=SentData(sent_to=receipt.recipient, sent_at=receipt.sent_at),
    )


@router.post("/follow-up", response_model=Envelope[SentData])
async def follow_up(
    data: FollowUpRequest,
    principal: Principal = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
    client: EmailClient = Depends(get_email_client),
) -> Envelope[SentData]:
    """Email a student; recorded against the appointment when one is given."""
    try:
        receipt = await send_follow_up(
            db,
            client,
            student_id=data.student_id,
            message=data.message,
            sender_id=principal.id,
            subject=data.subject,
            appointment_id=data.appointment_id,
        )
    except EmailError as e:
        raise InternalError("Failed to send follow-up email") from e
    return Envelope(
        message="Follow-up email sent",
        data=SentData(sent_to=receipt.recipient, sent_at=receipt.sent_at),
    )


@router.post("/test", response_model=Envelope[None])
async def test_email_config(
    _principal: Principal = Depends(get_current_principal),
    client: EmailClient = Depends(get_email_client),
) -> Envelope[None]:
    try:
        await client.verify()
    except EmailError as e:
        raise InternalError("Email config test failed") from e
    return Envelope(message="Email config works correctly")
