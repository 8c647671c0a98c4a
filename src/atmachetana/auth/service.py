"""
Account flows: login, OTP-verified signup, staff provisioning, password
change and OTP-gated password reset.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from atmachetana.config import settings
from atmachetana.core.enums import OtpPurpose, Role, StudentStatus
from atmachetana.core.errors import Conflict, Forbidden, InvalidInput, NotFound, Unauthenticated
from atmachetana.core.models import Staff, Student
from atmachetana.core.security import (
    create_access_token,
    generate_otp,
    get_password_hash,
    otp_expired,
    otp_expiry,
    otp_matches,
    verify_password,
)
from atmachetana.core.validation import split_full_name
from atmachetana.notifications import EmailClient, EmailError
from atmachetana.notifications import templates

from .principal import Principal

logger = logging.getLogger(__name__)


def issue_token(principal: Principal) -> str:
    return create_access_token(
        subject_id=principal.id, email=principal.email, role=principal.role.value
    )


class AuthService:
    """Account operations over one request-scoped session."""

    def __init__(self, db: AsyncSession, email_client: EmailClient | None = None):
        self.db = db
        self.email_client = email_client

    async def _student_by_email(self, email: str) -> Student | None:
        result = await self.db.execute(select(Student).where(Student.email == email))
        return result.scalar_one_or_none()

    async def _staff_by_email(self, email: str) -> Staff | None:
        result = await self.db.execute(select(Staff).where(Staff.email == email))
        return result.scalar_one_or_none()

    async def _send_otp(self, to: str, subject: str, html: str) -> bool:
        """Deliver an OTP email; a failure is logged and reported, not raised."""
        if self.email_client is None:
            return False
        try:
            await self.email_client.send(to=to, subject=subject, html=html)
        except EmailError as e:
            logger.error(f"OTP email to {to} failed: {e}")
            return False
        return True

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str, user_type: str) -> tuple[str, Principal]:
        """Check credentials and return ``(token, principal)``.

        Raises:
            Unauthenticated: Unknown email or wrong password
            Forbidden: Unverified student or disabled staff account
        """
        now = datetime.now(UTC)
        principal: Principal
        if user_type == Role.STUDENT.value:
            student = await self._student_by_email(email)
            if student is None:
                raise Unauthenticated("Invalid credentials")
            if not student.is_verified:
                raise Forbidden("Email not verified")
            if not verify_password(password, student.hashed_password):
                raise Unauthenticated("Invalid credentials")
            student.last_login = now
            principal = Principal.from_student(student)
        else:
            staff = await self._staff_by_email(email)
            if staff is None:
                raise Unauthenticated("Invalid credentials")
            if staff.lock_until is not None and not otp_expired(staff.lock_until, now):
                raise Forbidden("Account locked, try again later")
            if not verify_password(password, staff.hashed_password):
                await self._record_failed_login(staff, now)
                raise Unauthenticated("Invalid credentials")
            if not staff.is_active:
                raise Forbidden("Account disabled")
            staff.login_attempts = 0
            staff.lock_until = None
            staff.last_login = now
            principal = Principal.from_staff(staff)

        await self.db.commit()
        logger.info(f"{principal.role.value} {principal.id} logged in")
        return issue_token(principal), principal

    async def _record_failed_login(self, staff: Staff, now: datetime) -> None:
        """Count a bad staff password; lock the account once the limit is hit."""
        staff.login_attempts = (staff.login_attempts or 0) + 1
        if staff.login_attempts >= settings.LOGIN_MAX_ATTEMPTS:
            staff.lock_until = now + timedelta(minutes=settings.LOGIN_LOCK_MINUTES)
            staff.login_attempts = 0
            logger.warning(f"Staff {staff.id} locked after repeated failed logins")
        await self.db.commit()

    # ------------------------------------------------------------------
    # Signup & OTP
    # ------------------------------------------------------------------

    async def signup(self, name: str | None, email: str, password: str) -> tuple[Student, bool]:
        """Create an unverified student and email an OTP.

        An earlier unverified signup for the same email is replaced.

        Returns:
            (student, otp_email_delivered)

        Raises:
            Conflict: A verified account already uses this email
        """
        existing = await self._student_by_email(email)
        if existing is not None:
            if existing.is_verified:
                raise Conflict("User already exists, please login.")
            await self.db.delete(existing)
            await self.db.flush()

        first_name, last_name = split_full_name(name, email)
        otp = generate_otp()
        student = Student(
            first_name=first_name,
            last_name=last_name,
            email=email,
            hashed_password=get_password_hash(password),
            otp=otp,
            otp_expires=otp_expiry(),
            otp_purpose=OtpPurpose.SIGNUP.value,
            otp_attempts=0,
            is_verified=False,
            subjects=[],
            interests=[],
        )
        self.db.add(student)
        await self.db.commit()

        subject, html = templates.otp_email(otp)
        delivered = await self._send_otp(email, subject, html)
        return student, delivered

    @staticmethod
    def _issue_otp(student: Student, purpose: OtpPurpose) -> str:
        otp = generate_otp()
        student.otp = otp
        student.otp_expires = otp_expiry()
        student.otp_purpose = purpose.value
        student.otp_attempts = 0
        student.reset_verified_until = None
        return otp

    @staticmethod
    def _clear_otp(student: Student) -> None:
        student.otp = None
        student.otp_expires = None
        student.otp_purpose = None
        student.otp_attempts = 0

    async def verify_otp(self, email: str, otp: str) -> str:
        """Consume an OTP (signup or reset) and return a student token.

        First verification activates the account. A reset OTP opens a short
        window in which ``confirm_password_reset`` may set a new password.
        ``OTP_MAX_ATTEMPTS`` wrong guesses revoke the code.

        Raises:
            InvalidInput: Unknown email, wrong code or expired code
        """
        student = await self._student_by_email(email)
        if student is None:
            raise InvalidInput("Invalid email")
        if not otp_matches(student.otp, otp):
            if student.otp is not None:
                student.otp_attempts = (student.otp_attempts or 0) + 1
                if student.otp_attempts >= settings.OTP_MAX_ATTEMPTS:
                    self._clear_otp(student)
                    await self.db.commit()
                    logger.warning(f"OTP for student {student.id} revoked after failed attempts")
                    raise InvalidInput("Too many attempts, request a new OTP")
                await self.db.commit()
            raise InvalidInput("Invalid OTP")
        if otp_expired(student.otp_expires):
            raise InvalidInput("OTP expired")

        if student.otp_purpose == OtpPurpose.RESET.value:
            student.reset_verified_until = datetime.now(UTC) + timedelta(
                minutes=settings.RESET_WINDOW_MINUTES
            )
        self._clear_otp(student)
        if not student.is_verified:
            student.is_verified = True
            student.status = StudentStatus.ACTIVE.value
        await self.db.commit()

        return issue_token(Principal.from_student(student))

    async def resend_otp(self, email: str) -> bool:
        """Issue a fresh signup OTP.

        Raises:
            NotFound: Unknown email
            InvalidInput: Account already verified
        """
        student = await self._student_by_email(email)
        if student is None:
            raise NotFound("User not found")
        if student.is_verified:
            raise InvalidInput("Already verified")

        otp = self._issue_otp(student, OtpPurpose.SIGNUP)
        await self.db.commit()

        subject, html = templates.resend_otp_email(otp)
        return await self._send_otp(email, subject, html)

    # ------------------------------------------------------------------
    # Staff
    # ------------------------------------------------------------------

    async def create_staff(self, name: str, email: str, password: str, role: str) -> Staff:
        """Provision a counsellor or admin.

        Raises:
            InvalidInput: Role is not a staff role
            Conflict: Email already in use
        """
        if role not in (Role.ADMIN.value, Role.COUNSELLOR.value):
            raise InvalidInput("Invalid role")
        if await self._staff_by_email(email) is not None:
            raise Conflict("User already exists")

        staff = Staff(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            role=role,
            is_active=True,
        )
        self.db.add(staff)
        await self.db.commit()
        logger.info(f"Created {role} {staff.id}")
        return staff

    # ------------------------------------------------------------------
    # Self-service
    # ------------------------------------------------------------------

    async def load_account(self, principal: Principal) -> Student | Staff:
        account: Student | Staff | None
        if principal.is_student:
            account = await self.db.get(Student, principal.id)
        else:
            account = await self.db.get(Staff, principal.id)
        if account is None:
            raise NotFound("User not found")
        return account

    async def change_password(
        self, principal: Principal, current_password: str, new_password: str
    ) -> None:
        """Raises InvalidInput when ``current_password`` is wrong."""
        account = await self.load_account(principal)
        if not verify_password(current_password, account.hashed_password):
            raise InvalidInput("Incorrect current password")
        account.hashed_password = get_password_hash(new_password)
        await self.db.commit()

    async def request_password_reset(self, email: str) -> bool:
        """Issue a reset OTP to a student.

        Raises:
            NotFound: Unknown email
        """
        student = await self._student_by_email(email)
        if student is None:
            raise NotFound("Account not found")

        otp = self._issue_otp(student, OtpPurpose.RESET)
        await self.db.commit()

        subject, html = templates.password_reset_email(otp)
        return await self._send_otp(email, subject, html)

    async def confirm_password_reset(self, email: str, new_password: str) -> None:
        """Set a new password after a reset OTP was verified.

        The verification is single use and lapses after
        ``RESET_WINDOW_MINUTES``.

        Raises:
            NotFound: Unknown email
            InvalidInput: No verified reset request
        """
        student = await self._student_by_email(email)
        if student is None:
            raise NotFound("User not found")
        if otp_expired(student.reset_verified_until):
            raise InvalidInput("OTP not verified")

        student.hashed_password = get_password_hash(new_password)
        student.reset_verified_until = None
        await self.db.commit()
