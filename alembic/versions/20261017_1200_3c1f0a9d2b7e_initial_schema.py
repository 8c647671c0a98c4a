"""Initial schema: students, staff, appointments and audit tables

Revision ID: 3c1f0a9d2b7e
Revises:
Create Date: 2026-10-17 12:00:00.000000+00:00

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3c1f0a9d2b7e"  # pragma: allowlist secret
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
            comment="Creation timestamp (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
            comment="Last update timestamp (UTC)",
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("usn", sa.String(length=50), nullable=True, comment="University seat number"),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(length=20), nullable=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=True),
        sa.Column("otp", sa.String(length=10), nullable=True),
        sa.Column("otp_expires", sa.DateTime(timezone=True), nullable=True),
        sa.Column("otp_purpose", sa.String(length=10), nullable=True),
        sa.Column("otp_attempts", sa.Integer(), nullable=False),
        sa.Column("reset_verified_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("street", sa.String(length=200), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("state", sa.String(length=100), nullable=True),
        sa.Column("pincode", sa.String(length=20), nullable=True),
        sa.Column("current_class", sa.String(length=100), nullable=True),
        sa.Column("school", sa.String(length=200), nullable=True),
        sa.Column("board", sa.String(length=100), nullable=True),
        sa.Column("career_goals", sa.Text(), nullable=True),
        sa.Column("parent_name", sa.String(length=200), nullable=True),
        sa.Column("parent_relationship", sa.String(length=50), nullable=True),
        sa.Column("parent_phone", sa.String(length=20), nullable=True),
        sa.Column("parent_email", sa.String(length=255), nullable=True),
        sa.Column("risk_level", sa.String(length=10), nullable=False),
        sa.Column("special_needs", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('Active', 'Inactive', 'Graduated')", name="check_student_status"
        ),
        sa.CheckConstraint("risk_level IN ('Low', 'Medium', 'High')", name="check_risk_level"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("usn"),
    )
    op.create_index("idx_students_status", "students", ["status"])
    op.create_index("idx_students_risk_level", "students", ["risk_level"])

    op.create_table(
        "admins",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("login_attempts", sa.Integer(), nullable=False),
        sa.Column("lock_until", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("role IN ('admin', 'counsellor')", name="check_staff_role"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    for tag_table in ("subjects", "interests"):
        op.create_table(
            tag_table,
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("student_id", sa.Integer(), nullable=False),
            sa.Column("value", sa.String(length=200), nullable=False),
            sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(f"ix_{tag_table}_student_id", tag_table, ["student_id"])

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("counsellor_id", sa.Integer(), nullable=True),
        sa.Column("requested_date", sa.DateTime(), nullable=False),
        sa.Column("requested_time", sa.String(length=20), nullable=True),
        sa.Column("confirmed_date", sa.DateTime(), nullable=True),
        sa.Column("confirmed_time", sa.String(length=20), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=False, comment="Minutes"),
        sa.Column("type", sa.String(length=100), nullable=True),
        sa.Column("mode", sa.String(length=50), nullable=True),
        sa.Column("priority", sa.String(length=20), nullable=True),
        sa.Column("urgency_level", sa.String(length=20), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("student_concerns", sa.Text(), nullable=True),
        sa.Column("pre_session_notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("session_summary", sa.Text(), nullable=True),
        sa.Column("recommendations", sa.Text(), nullable=True),
        sa.Column("next_steps", sa.Text(), nullable=True),
        sa.Column("follow_up_required", sa.Boolean(), nullable=False),
        sa.Column("follow_up_date", sa.DateTime(), nullable=True),
        sa.Column("email_sent", sa.Boolean(), nullable=False),
        sa.Column("email_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("email_sent_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('Pending', 'Confirmed', 'Completed', 'Cancelled')",
            name="check_appointment_status",
        ),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["counsellor_id"], ["admins.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_appointments_student", "appointments", ["student_id"])
    op.create_index("idx_appointments_status", "appointments", ["status"])
    op.create_index("idx_appointments_requested_date", "appointments", ["requested_date"])

    op.create_table(
        "action_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("appointment_id", sa.Integer(), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["appointment_id"], ["appointments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_action_items_appointment_id", "action_items", ["appointment_id"])

    op.create_table(
        "recurring_patterns",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("appointment_id", sa.Integer(), nullable=False),
        sa.Column("frequency", sa.String(length=20), nullable=False),
        sa.Column("interval", sa.Integer(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "frequency IN ('Weekly', 'Biweekly', 'Monthly')", name="check_frequency"
        ),
        sa.ForeignKeyConstraint(["appointment_id"], ["appointments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("appointment_id"),
    )

    op.create_table(
        "follow_up_emails",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("appointment_id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("subject", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("sent_by", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["appointment_id"], ["appointments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_follow_up_emails_appointment_id", "follow_up_emails", ["appointment_id"])


def downgrade() -> None:
    op.drop_table("follow_up_emails")
    op.drop_table("recurring_patterns")
    op.drop_table("action_items")
    op.drop_table("appointments")
    op.drop_table("interests")
    op.drop_table("subjects")
    op.drop_table("admins")
    op.drop_table("students")
