"""
Tests for Authentication API Endpoints
"""

from httpx import AsyncClient

from atmachetana.config import settings
from atmachetana.notifications import EmailError

PASSWORD = "secret123"  # pragma: allowlist secret


class TestLogin:
    """Tests for POST /api/auth/login."""

    async def test_student_login(self, client: AsyncClient, student) -> None:
        response = await client.post(
            "/api/auth/login",
            json={"email": student.email, "password": PASSWORD, "userType": "student"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Login successful"
        assert body["data"]["token"]
        assert body["data"]["user"] == {"id": student.id, "email": student.email, "role": "student"}

    async def test_staff_login(self, client: AsyncClient, admin) -> None:
        response = await client.post(
            "/api/auth/login",
            json={"email": admin.email, "password": PASSWORD, "userType": "admin"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["user"]["role"] == "admin"

    async def test_wrong_password(self, client: AsyncClient, student) -> None:
        response = await client.post(
            "/api/auth/login", json={"email": student.email, "password": "nope"}
        )

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid credentials"}


class TestSignupFlow:
    """Signup, OTP verification and the resulting session."""

    async def test_signup_verify_then_me(self, client: AsyncClient, email_client) -> None:
        response = await client.post(
            "/api/auth/signup",
            json={"name": "Asha Rao", "email": "asha@example.com", "password": PASSWORD},
        )
        assert response.status_code == 201
        assert response.json()["message"] == "Signup complete, verify OTP"

        html = email_client.send.await_args.kwargs["html"]
        otp = html.split("<b>")[1].split("</b>")[0]

        response = await client.post(
            "/api/auth/verify-otp", json={"email": "asha@example.com", "otp": otp}
        )
        assert response.status_code == 200
        token = response.json()["data"]["token"]

        response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        user = response.json()["data"]["user"]
        assert user["email"] == "asha@example.com"
        assert user["firstName"] == "Asha"
        assert user["isVerified"] is True
        assert "hashedPassword" not in user
        assert "otp" not in user

    async def test_signup_reports_email_failure(self, client: AsyncClient, email_client) -> None:
        email_client.send.side_effect = EmailError("smtp down")

        response = await client.post(
            "/api/auth/signup", json={"email": "asha@example.com", "password": PASSWORD}
        )

        assert response.status_code == 201
        assert "could not be sent" in response.json()["message"]

    async def test_signup_short_password(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/auth/signup", json={"email": "asha@example.com", "password": "123"}
        )

        assert response.status_code == 400

    async def test_wrong_otp(self, client: AsyncClient, make_student) -> None:
        pending = await make_student(is_verified=False, otp="4821")

        response = await client.post(
            "/api/auth/verify-otp", json={"email": pending.email, "otp": "0000"}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid OTP"


class TestStaffProvisioning:
    """Tests for POST /api/auth/create-staff."""

    async def test_admin_creates_counsellor(self, client: AsyncClient, admin, auth_headers) -> None:
        response = await client.post(
            "/api/auth/create-staff",
            json={"name": "Dr. Rao", "email": "rao@example.com", "password": PASSWORD},
            headers=auth_headers(admin),
        )

        assert response.status_code == 201
        assert response.json()["message"] == "counsellor created"

    async def test_counsellor_cannot_create_staff(
        self, client: AsyncClient, counsellor, auth_headers
    ) -> None:
        response = await client.post(
            "/api/auth/create-staff",
            json={"name": "X", "email": "x@example.com", "password": PASSWORD, "role": "admin"},
            headers=auth_headers(counsellor),
        )

        assert response.status_code == 403


class TestSession:
    """Tests for token-authenticated account endpoints."""

    async def test_me_for_staff(self, client: AsyncClient, counsellor, auth_headers) -> None:
        response = await client.get("/api/auth/me", headers=auth_headers(counsellor))

        assert response.status_code == 200
        user = response.json()["data"]["user"]
        assert user["email"] == counsellor.email
        assert user["role"] == "counsellor"

    async def test_garbage_token(self, client: AsyncClient) -> None:
        response = await client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    async def test_logout(self, client: AsyncClient, student, auth_headers) -> None:
        response = await client.post("/api/auth/logout", headers=auth_headers(student))

        assert response.status_code == 200
        assert response.json()["message"] == "Logged out"

    async def test_change_password(self, client: AsyncClient, student, auth_headers) -> None:
        response = await client.put(
            "/api/auth/change-password",
            json={"currentPassword": PASSWORD, "newPassword": "brand-new"},
            headers=auth_headers(student),
        )
        assert response.status_code == 200

        response = await client.post(
            "/api/auth/login", json={"email": student.email, "password": "brand-new"}
        )
        assert response.status_code == 200

    async def test_password_reset(self, client: AsyncClient, student) -> None:
        response = await client.post(
            "/api/auth/reset-password/request", json={"email": student.email}
        )
        assert response.json()["message"] == "OTP sent to email"

        response = await client.post(
            "/api/auth/reset-password/confirm",
            json={"email": student.email, "newPassword": "brand-new"},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "OTP not verified"

        await client.post("/api/auth/verify-otp", json={"email": student.email, "otp": student.otp})
        response = await client.post(
            "/api/auth/reset-password/confirm",
            json={"email": student.email, "newPassword": "brand-new"},
        )
        assert response.status_code == 200

    async def test_reset_confirm_without_request(self, client: AsyncClient, student) -> None:
        response = await client.post(
            "/api/auth/reset-password/confirm",
            json={"email": student.email, "newPassword": "attacker-pw"},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "OTP not verified"

        response = await client.post(
            "/api/auth/login", json={"email": student.email, "password": "attacker-pw"}
        )
        assert response.status_code == 401


class TestOtpGuessing:
    """Wrong OTP guesses are limited."""

    async def test_code_revoked_after_repeated_guesses(
        self, client: AsyncClient, email_client
    ) -> None:
        await client.post(
            "/api/auth/signup", json={"email": "asha@example.com", "password": PASSWORD}
        )
        html = email_client.send.await_args.kwargs["html"]
        otp = html.split("<b>")[1].split("</b>")[0]
        wrong = "1000" if otp != "1000" else "1001"

        messages = []
        for _ in range(settings.OTP_MAX_ATTEMPTS):
            response = await client.post(
                "/api/auth/verify-otp", json={"email": "asha@example.com", "otp": wrong}
            )
            messages.append(response.json()["message"])

        assert messages[-1] == "Too many attempts, request a new OTP"
        response = await client.post(
            "/api/auth/verify-otp", json={"email": "asha@example.com", "otp": otp}
        )
        assert response.status_code == 400
