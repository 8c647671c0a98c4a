"""
Tests for Email API Endpoints
"""

from httpx import AsyncClient
from sqlalchemy import select

from atmachetana.core.models import FollowUpEmail
from atmachetana.notifications import EmailError


class TestAppointmentConfirmation:
    """Tests for POST /api/email/appointment-confirmation."""

    async def test_sends_and_marks(
        self, client: AsyncClient, student, counsellor, make_appointment, auth_headers
    ) -> None:
        appointment = await make_appointment(student_id=student.id)

        response = await client.post(
            "/api/email/appointment-confirmation",
            json={"appointmentId": appointment.id, "customMessage": "Room 204"},
            headers=auth_headers(counsellor),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Confirmation email sent"
        assert body["data"]["sentTo"] == student.email
        assert appointment.email_sent is True

    async def test_delivery_failure(
        self, client: AsyncClient, student, counsellor, make_appointment, auth_headers, email_client
    ) -> None:
        appointment = await make_appointment(student_id=student.id)
        email_client.send.side_effect = EmailError("smtp down")

        response = await client.post(
            "/api/email/appointment-confirmation",
            json={"appointmentId": appointment.id},
            headers=auth_headers(counsellor),
        )

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to send confirmation email"
        assert appointment.email_sent is False

    async def test_unknown_appointment(self, client: AsyncClient, counsellor, auth_headers) -> None:
        response = await client.post(
            "/api/email/appointment-confirmation",
            json={"appointmentId": 999},
            headers=auth_headers(counsellor),
        )

        assert response.status_code == 404

    async def test_student_cannot_trigger_for_others(
        self,
        client: AsyncClient,
        student,
        make_student,
        make_appointment,
        auth_headers,
        email_client,
    ) -> None:
        other = await make_student()
        appointment = await make_appointment(student_id=student.id)

        response = await client.post(
            "/api/email/appointment-confirmation",
            json={"appointmentId": appointment.id},
            headers=auth_headers(other),
        )

        assert response.status_code == 403
        email_client.send.assert_not_awaited()
        assert appointment.email_sent_by is None

    async def test_student_can_trigger_for_own(
        self, client: AsyncClient, student, make_appointment, auth_headers
    ) -> None:
        appointment = await make_appointment(student_id=student.id)

        response = await client.post(
            "/api/email/appointment-confirmation",
            json={"appointmentId": appointment.id},
            headers=auth_headers(student),
        )

        assert response.status_code == 200


class TestFollowUp:
    """Tests for POST /api/email/follow-up."""

    async def test_follow_up_recorded(
        self, client: AsyncClient, db_session, student, counsellor, make_appointment, auth_headers
    ) -> None:
        appointment = await make_appointment(student_id=student.id)

        response = await client.post(
            "/api/email/follow-up",
            json={
                "studentId": student.id,
                "appointmentId": appointment.id,
                "subject": "Checking in",
                "message": "How did the exams go?",
            },
            headers=auth_headers(counsellor),
        )

        assert response.status_code == 200
        assert response.json()["data"]["sentTo"] == student.email
        record = await db_session.scalar(select(FollowUpEmail))
        assert record.subject == "Checking in"
        assert record.sent_by == counsellor.id

    async def test_students_cannot_send(self, client: AsyncClient, student, auth_headers) -> None:
        response = await client.post(
            "/api/email/follow-up",
            json={"studentId": student.id, "message": "Hi"},
            headers=auth_headers(student),
        )

        assert response.status_code == 403


class TestEmailConfig:
    """Tests for POST /api/email/test."""

    async def test_config_ok(self, client: AsyncClient, admin, auth_headers) -> None:
        response = await client.post("/api/email/test", headers=auth_headers(admin))

        assert response.status_code == 200
        assert response.json()["message"] == "Email config works correctly"

    async def test_config_broken(
        self, client: AsyncClient, admin, auth_headers, email_client
    ) -> None:
        email_client.verify.side_effect = EmailError("refused")

        response = await client.post("/api/email/test", headers=auth_headers(admin))

        assert response.status_code == 500
        assert response.json()["message"] == "Email config test failed"
