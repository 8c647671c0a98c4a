"""
HTML email templates.

Every value that came from a user is escaped before it is embedded.
"""

from datetime import datetime
from html import escape

_WRAPPER = '<div style="font-family: Arial, sans-serif; padding: 20px;">{body}</div>'


def format_appointment_date(value: datetime) -> str:
    """e.g. 'Monday, 10 June 2024'."""
    return f"{value:%A}, {value.day} {value:%B %Y}"


def otp_email(otp: str) -> tuple[str, str]:
    """Signup verification code. Returns (subject, html)."""
    body = (
        "<h2>Verify Your Account</h2>"
        f"<p>Your verification code is <b>{escape(otp)}</b>.</p>"
        "<p>The code expires in 10 minutes.</p>"
    )
    return "Verify Your Account", _WRAPPER.format(body=body)


def resend_otp_email(otp: str) -> tuple[str, str]:
    body = f"<h2>Your OTP Code</h2><p><b>{escape(otp)}</b></p>"
    return "Your OTP Code", _WRAPPER.format(body=body)


def password_reset_email(otp: str) -> tuple[str, str]:
    body = f"<h2>Your password reset OTP is <b>{escape(otp)}</b></h2>"
    return "Password Reset OTP", _WRAPPER.format(body=body)


def appointment_confirmation_email(
    *,
    app_name: str,
    student_name: str,
    appointment_date: datetime,
    appointment_time: str | None,
    appointment_type: str | None,
    custom_message: str | None = None,
) -> tuple[str, str]:
    """Confirmation sent to the student once staff have scheduled a session."""
    note = f"<p><b>Note:</b> {escape(custom_message)}</p>" if custom_message else ""
    body = (
        "<h2>Appointment Confirmation</h2>"
        f"<p>Dear <b>{escape(student_name)}</b>,</p>"
        "<p>Your appointment is confirmed. Details:</p>"
        f"<p><b>Date:</b> {format_appointment_date(appointment_date)}</p>"
        f"<p><b>Time:</b> {escape(appointment_time or 'To be announced')}</p>"
        f"<p><b>Type:</b> {escape(appointment_type or 'Counselling')}</p>"
        f"{note}"
    )
    return f"Appointment Confirmation - {app_name}", _WRAPPER.format(body=body)


def follow_up_email(*, student_name: str, message: str) -> str:
    """Free-text follow-up; each line of ``message`` becomes a paragraph."""
    paragraphs = "".join(
        f'<p style="line-height:1.6; margin-bottom:10px;">{escape(line)}</p>'
        for line in message.split("\n")
    )
    body = (
        "<h2>Follow-up Message</h2>"
        f"<p>Dear <b>{escape(student_name)}</b>,</p>"
        f'<div style="margin-top: 10px;">{paragraphs}</div>'
    )
    return _WRAPPER.format(body=body)
