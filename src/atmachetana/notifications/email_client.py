"""
SMTP Email Client

Sends transactional HTML email (OTP codes, appointment confirmations,
follow-ups). smtplib is blocking, so each send runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
import ssl
from dataclasses import dataclass
from datetime import UTC, datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid, parseaddr

from atmachetana.config import settings

logger = logging.getLogger(__name__)


class EmailError(Exception):
    """Email delivery error."""

    pass


@dataclass(frozen=True)
class SentReceipt:
    message_id: str
    recipient: str
    sent_at: datetime


class EmailClient:
    """Client for an SMTP relay.

    Port 465 (or ``secure=True``) uses implicit TLS; anything else upgrades
    with STARTTLS when the server offers it.
    """

    def __init__(
        self,
        *,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        secure: bool = False,
        timeout: float = 30.0,
    ):
        """Initialize email client.

        Args:
            host: SMTP server host
            port: SMTP server port
            sender: From header, e.g. "Atma-Chethana <noreply@example.org>"
            username: SMTP login (skipped when empty)
            password: SMTP password
            secure: Use implicit TLS (SMTPS)
            timeout: Socket timeout in seconds
        """
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.secure = secure or port == 465
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> EmailClient:
        """Create client from application settings."""
        return cls(
            host=settings.EMAIL_HOST,
            port=settings.EMAIL_PORT,
            sender=settings.email_sender,
            username=settings.EMAIL_USER,
            password=settings.EMAIL_PASS,
            secure=settings.EMAIL_SECURE,
        )

    async def send(self, *, to: str, subject: str, html: str) -> SentReceipt:
        """Send an HTML email.

        Args:
            to: Recipient address
            subject: Subject line
            html: Rendered HTML body

        Returns:
            SentReceipt with the generated Message-ID

        Raises:
            EmailError: If the SMTP exchange fails
        """
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = self.sender
        message["To"] = to
        message_id = make_msgid(domain=self.host or None)
        message["Message-ID"] = message_id
        message.attach(MIMEText(html, "html", "utf-8"))

        try:
            await asyncio.to_thread(self._deliver, to, message.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP error sending '{subject}' to {to}: {e}")
            raise EmailError(f"SMTP error: {e}") from e

        logger.info(f"Email sent successfully: {message_id}", extra={"to": to})
        return SentReceipt(message_id=message_id, recipient=to, sent_at=datetime.now(UTC))

    async def verify(self) -> bool:
        """Connect and authenticate without sending anything.

        Raises:
            EmailError: If the server is unreachable or rejects the login
        """
        try:
            await asyncio.to_thread(self._check)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP verification failed for {self.host}:{self.port}: {e}")
            raise EmailError(f"SMTP verification failed: {e}") from e
        return True

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        server: smtplib.SMTP
        if self.secure:
            server = smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
            server.ehlo()
            if server.has_extn("starttls"):
                server.starttls(context=context)
                server.ehlo()
        if self.username:
            server.login(self.username, self.password)
        return server

    def _deliver(self, to: str, payload: str) -> None:
        server = self._connect()
        try:
            server.sendmail(parseaddr(self.sender)[1], [to], payload)
        finally:
            server.quit()

    def _check(self) -> None:
        server = self._connect()
        try:
            server.noop()
        finally:
            server.quit()


def get_email_client() -> EmailClient:
    """FastAPI dependency; overridden in tests."""
    return EmailClient.from_settings()
