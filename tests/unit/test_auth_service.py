"""
Unit Tests for Account Flows

Login, OTP signup, staff provisioning and password reset.
"""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func, select

from atmachetana.auth import AuthService, ensure_default_admin
from atmachetana.config import Settings, settings
from atmachetana.core.enums import Role
from atmachetana.core.errors import Conflict, Forbidden, InvalidInput, NotFound, Unauthenticated
from atmachetana.core.models import Staff, Student
from atmachetana.core.security import decode_access_token, verify_password
from atmachetana.notifications import EmailError

PASSWORD = "secret123"  # pragma: allowlist secret


class TestLogin:
    """Tests for credential checks."""

    async def test_student_login(self, db_session, student):
        service = AuthService(db_session)

        token, principal = await service.login(student.email, PASSWORD, "student")

        assert principal.id == student.id
        assert principal.role is Role.STUDENT
        claims = decode_access_token(token)
        assert claims["sub"] == str(student.id)
        assert claims["role"] == "student"
        assert student.last_login is not None

    async def test_unknown_and_wrong_password_look_the_same(self, db_session, student):
        service = AuthService(db_session)

        with pytest.raises(Unauthenticated, match="Invalid credentials"):
            await service.login("nobody@example.com", PASSWORD, "student")
        with pytest.raises(Unauthenticated, match="Invalid credentials"):
            await service.login(student.email, "wrong-password", "student")

    async def test_unverified_student_refused(self, db_session, make_student):
        pending = await make_student(is_verified=False)
        service = AuthService(db_session)

        with pytest.raises(Forbidden, match="Email not verified"):
            await service.login(pending.email, PASSWORD, "student")

    async def test_staff_login(self, db_session, counsellor):
        service = AuthService(db_session)

        _, principal = await service.login(counsellor.email, PASSWORD, "counsellor")

        assert principal.role is Role.COUNSELLOR
        assert principal.is_staff

    async def test_disabled_staff_refused(self, db_session, make_staff):
        staff = await make_staff(is_active=False)
        service = AuthService(db_session)

        with pytest.raises(Forbidden, match="Account disabled"):
            await service.login(staff.email, PASSWORD, "admin")

    async def test_staff_locked_after_repeated_failures(self, db_session, counsellor):
        service = AuthService(db_session)

        for _ in range(settings.LOGIN_MAX_ATTEMPTS):
            with pytest.raises(Unauthenticated, match="Invalid credentials"):
                await service.login(counsellor.email, "wrong-password", "counsellor")

        assert counsellor.lock_until is not None
        with pytest.raises(Forbidden, match="Account locked"):
            await service.login(counsellor.email, PASSWORD, "counsellor")

    async def test_lock_lapses(self, db_session, make_staff):
        staff = await make_staff(lock_until=datetime.now(UTC) - timedelta(minutes=1))
        service = AuthService(db_session)

        _, principal = await service.login(staff.email, PASSWORD, "counsellor")

        assert principal.id == staff.id
        assert staff.lock_until is None

    async def test_successful_login_clears_failures(self, db_session, make_staff):
        staff = await make_staff(login_attempts=3)
        service = AuthService(db_session)

        await service.login(staff.email, PASSWORD, "counsellor")

        assert staff.login_attempts == 0


class TestSignup:
    """Tests for OTP-verified self-registration."""

    async def test_signup_sends_otp(self, db_session, email_client):
        service = AuthService(db_session, email_client)

        student, delivered = await service.signup("Asha Rao Kumar", "asha@example.com", PASSWORD)

        assert delivered is True
        assert student.first_name == "Asha"
        assert student.last_name == "Rao Kumar"
        assert student.is_verified is False
        assert student.otp is not None and len(student.otp) == 4
        email_client.send.assert_awaited_once()
        assert student.otp in email_client.send.await_args.kwargs["html"]

    async def test_signup_email_failure_still_creates_account(self, db_session, email_client):
        email_client.send.side_effect = EmailError("smtp down")
        service = AuthService(db_session, email_client)

        student, delivered = await service.signup("Asha", "asha@example.com", PASSWORD)

        assert delivered is False
        assert student.id is not None

    async def test_signup_replaces_unverified_account(self, db_session, make_student, email_client):
        await make_student(email="asha@example.com", is_verified=False)
        service = AuthService(db_session, email_client)

        await service.signup("Asha", "asha@example.com", PASSWORD)

        count = await db_session.scalar(
            select(func.count()).select_from(Student).where(Student.email == "asha@example.com")
        )
        assert count == 1

    async def test_signup_verified_email_conflicts(self, db_session, student, email_client):
        service = AuthService(db_session, email_client)

        with pytest.raises(Conflict, match="User already exists"):
            await service.signup("Someone", student.email, PASSWORD)
        email_client.send.assert_not_awaited()


class TestVerifyOtp:
    """Tests for consuming one-time codes."""

    async def test_verify_activates_account(self, db_session, make_student):
        pending = await make_student(
            is_verified=False,
            status="Inactive",
            otp="4821",
            otp_expires=datetime.now(UTC) + timedelta(minutes=5),
        )
        service = AuthService(db_session)

        token = await service.verify_otp(pending.email, "4821")

        assert decode_access_token(token)["sub"] == str(pending.id)
        assert pending.is_verified is True
        assert pending.status == "Active"
        assert pending.otp is None

    async def test_wrong_code(self, db_session, make_student):
        pending = await make_student(
            is_verified=False, otp="4821", otp_expires=datetime.now(UTC) + timedelta(minutes=5)
        )
        service = AuthService(db_session)

        with pytest.raises(InvalidInput, match="Invalid OTP"):
            await service.verify_otp(pending.email, "1234")

    async def test_expired_code(self, db_session, make_student):
        pending = await make_student(
            is_verified=False, otp="4821", otp_expires=datetime.now(UTC) - timedelta(minutes=1)
        )
        service = AuthService(db_session)

        with pytest.raises(InvalidInput, match="OTP expired"):
            await service.verify_otp(pending.email, "4821")

    async def test_unknown_email(self, db_session):
        service = AuthService(db_session)

        with pytest.raises(InvalidInput, match="Invalid email"):
            await service.verify_otp("ghost@example.com", "4821")

    async def test_resend_for_verified_account(self, db_session, student):
        service = AuthService(db_session)

        with pytest.raises(InvalidInput, match="Already verified"):
            await service.resend_otp(student.email)

    async def test_resend_issues_new_code(self, db_session, make_student, email_client):
        pending = await make_student(is_verified=False, otp="1111")
        service = AuthService(db_session, email_client)

        delivered = await service.resend_otp(pending.email)

        assert delivered is True
        assert pending.otp is not None
        assert pending.otp_expires is not None

    async def test_repeated_wrong_guesses_revoke_code(self, db_session, make_student):
        pending = await make_student(
            is_verified=False, otp="4821", otp_expires=datetime.now(UTC) + timedelta(minutes=5)
        )
        service = AuthService(db_session)

        for _ in range(settings.OTP_MAX_ATTEMPTS - 1):
            with pytest.raises(InvalidInput, match="Invalid OTP"):
                await service.verify_otp(pending.email, "1234")
        with pytest.raises(InvalidInput, match="Too many attempts"):
            await service.verify_otp(pending.email, "1234")

        assert pending.otp is None
        with pytest.raises(InvalidInput, match="Invalid OTP"):
            await service.verify_otp(pending.email, "4821")
        assert pending.is_verified is False

    async def test_fresh_code_resets_attempts(self, db_session, make_student, email_client):
        pending = await make_student(is_verified=False, otp="4821", otp_attempts=3)
        service = AuthService(db_session, email_client)

        await service.resend_otp(pending.email)

        assert pending.otp_attempts == 0
        assert pending.otp_purpose == "signup"


class TestStaffProvisioning:
    """Tests for admin-created staff accounts."""

    async def test_create_counsellor(self, db_session):
        service = AuthService(db_session)

        staff = await service.create_staff("Dr. Rao", "rao@example.com", PASSWORD, "counsellor")

        assert staff.role == "counsellor"
        assert verify_password(PASSWORD, staff.hashed_password)

    async def test_student_role_rejected(self, db_session):
        service = AuthService(db_session)

        with pytest.raises(InvalidInput, match="Invalid role"):
            await service.create_staff("X", "x@example.com", PASSWORD, "student")

    async def test_duplicate_email(self, db_session, counsellor):
        service = AuthService(db_session)

        with pytest.raises(Conflict):
            await service.create_staff("X", counsellor.email, PASSWORD, "admin")


class TestPasswords:
    """Tests for password change and OTP-gated reset."""

    async def test_change_password(self, db_session, student, principal):
        service = AuthService(db_session)

        await service.change_password(principal(student), PASSWORD, "new-secret")

        assert verify_password("new-secret", student.hashed_password)

    async def test_change_password_wrong_current(self, db_session, counsellor, principal):
        service = AuthService(db_session)

        with pytest.raises(InvalidInput, match="Incorrect current password"):
            await service.change_password(principal(counsellor), "nope", "new-secret")

    async def test_reset_flow(self, db_session, student, email_client):
        service = AuthService(db_session, email_client)

        assert await service.request_password_reset(student.email) is True
        with pytest.raises(InvalidInput, match="OTP not verified"):
            await service.confirm_password_reset(student.email, "new-secret")

        await service.verify_otp(student.email, student.otp)
        await service.confirm_password_reset(student.email, "new-secret")

        assert verify_password("new-secret", student.hashed_password)

    async def test_reset_unknown_email(self, db_session, email_client):
        service = AuthService(db_session, email_client)

        with pytest.raises(NotFound, match="Account not found"):
            await service.request_password_reset("ghost@example.com")

    async def test_reset_without_request_refused(self, db_session, student):
        service = AuthService(db_session)

        with pytest.raises(InvalidInput, match="OTP not verified"):
            await service.confirm_password_reset(student.email, "attacker-pw")

        assert verify_password(PASSWORD, student.hashed_password)

    async def test_signup_code_does_not_allow_reset(self, db_session, make_student):
        pending = await make_student(
            is_verified=False,
            otp="4821",
            otp_expires=datetime.now(UTC) + timedelta(minutes=5),
            otp_purpose="signup",
        )
        service = AuthService(db_session)

        await service.verify_otp(pending.email, "4821")

        with pytest.raises(InvalidInput, match="OTP not verified"):
            await service.confirm_password_reset(pending.email, "new-secret")

    async def test_reset_verification_is_single_use(self, db_session, student, email_client):
        service = AuthService(db_session, email_client)
        await service.request_password_reset(student.email)
        await service.verify_otp(student.email, student.otp)

        await service.confirm_password_reset(student.email, "new-secret")

        assert student.reset_verified_until is None
        with pytest.raises(InvalidInput, match="OTP not verified"):
            await service.confirm_password_reset(student.email, "another-one")

    async def test_reset_window_lapses(self, db_session, make_student):
        student = await make_student(reset_verified_until=datetime.now(UTC) - timedelta(minutes=1))
        service = AuthService(db_session)

        with pytest.raises(InvalidInput, match="OTP not verified"):
            await service.confirm_password_reset(student.email, "new-secret")


class TestDefaultAdmin:
    """Tests for the startup admin bootstrap."""

    async def test_creates_admin_when_no_staff(self, db_session):
        config = Settings(ADMIN_EMAIL="boss@example.com", ADMIN_PASSWORD=PASSWORD)

        created = await ensure_default_admin(db_session, config)

        assert created is True
        admin = await db_session.scalar(select(Staff))
        assert admin.email == "boss@example.com"
        assert admin.role == "admin"

    async def test_skips_when_staff_exist(self, db_session, counsellor):
        created = await ensure_default_admin(db_session, Settings())

        assert created is False
        assert await db_session.scalar(select(func.count()).select_from(Staff)) == 1
