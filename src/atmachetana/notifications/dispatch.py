"""
Notification dispatch for appointments.

Renders the message, hands it to the email client and, only after a
successful send, writes the audit trail. Sending and auditing are separate
steps: a send failure leaves earlier committed state alone.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from atmachetana.config import settings
from atmachetana.core.errors import NotFound
from atmachetana.core.models import Appointment, FollowUpEmail, Student

from . import templates
from .email_client import EmailClient, SentReceipt

logger = logging.getLogger(__name__)


async def send_appointment_confirmation(
    db: AsyncSession,
    client: EmailClient,
    *,
    appointment_id: int,
    sender_id: int,
    custom_message: str | None = None,
) -> SentReceipt:
    """Email the student their appointment details and mark the appointment.

    Raises:
        NotFound: Unknown appointment
        EmailError: Delivery failed (nothing is written)
    """
    result = await db.execute(
        select(Appointment)
        .where(Appointment.id == appointment_id)
        .options(selectinload(Appointment.student))
    )
    appointment = result.scalar_one_or_none()
    if appointment is None:
        raise NotFound("Appointment not found")

    student = appointment.student
    subject, html = templates.appointment_confirmation_email(
        app_name=settings.APP_NAME,
        student_name=student.full_name,
        appointment_date=appointment.confirmed_date or appointment.requested_date,
        appointment_time=appointment.confirmed_time or appointment.requested_time,
        appointment_type=appointment.type,
        custom_message=custom_message,
    )

    receipt = await client.send(to=student.email, subject=subject, html=html)

    appointment.email_sent = True
    appointment.email_sent_at = receipt.sent_at
    appointment.email_sent_by = sender_id
    await db.commit()

    logger.info(f"Confirmation email recorded for appointment {appointment_id}")
    return receipt


async def send_follow_up(
    db: AsyncSession,
    client: EmailClient,
    *,
    student_id: int,
    message: str,
    sender_id: int,
    subject: str | None = None,
    appointment_id: int | None = None,
) -> SentReceipt:
    """Send an ad-hoc follow-up; audit it when tied to an appointment.

    Raises:
        NotFound: Unknown student or appointment
        EmailError: Delivery failed (nothing is written)
    """
    student = await db.get(Student, student_id)
    if student is None:
        raise NotFound("Student not found")

    if appointment_id is not None and await db.get(Appointment, appointment_id) is None:
        raise NotFound("Appointment not found")

    email_subject = subject or f"Follow-up - {settings.APP_NAME}"
    html = templates.follow_up_email(student_name=student.full_name, message=message)

    receipt = await client.send(to=student.email, subject=email_subject, html=html)

    if appointment_id is not None:
        db.add(
            FollowUpEmail(
                appointment_id=appointment_id,
                student_id=student.id,
                subject=email_subject,
                message=message,
                sent_at=receipt.sent_at,
                sent_by=sender_id,
            )
        )
        await db.commit()

    return receipt
