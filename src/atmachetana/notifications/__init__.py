"""Transactional email: SMTP client, templates and appointment dispatch."""

from .dispatch import send_appointment_confirmation, send_follow_up
from .email_client import EmailClient, EmailError, SentReceipt, get_email_client

__all__ = [
    "EmailClient",
    "EmailError",
    "SentReceipt",
    "get_email_client",
    "send_appointment_confirmation",
    "send_follow_up",
]
