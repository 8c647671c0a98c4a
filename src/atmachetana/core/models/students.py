"""
Student Models

Student profiles with their subject and interest tags.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .appointments import Appointment

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from atmachetana.core.enums import RiskLevel, StudentStatus, sql_in

from .base import Base, IntegerPrimaryKeyMixin, TimestampMixin


class Student(Base, IntegerPrimaryKeyMixin, TimestampMixin):
    """Students who book counselling sessions.

    ``hashed_password`` is nullable: records created by staff have no login
    until the student resets their password.
    """

    __tablename__ = "students"
    __table_args__ = (
        CheckConstraint(f"status IN {sql_in(StudentStatus)}", name="check_student_status"),
        CheckConstraint(f"risk_level IN {sql_in(RiskLevel)}", name="check_risk_level"),
        Index("idx_students_status", "status"),
        Index("idx_students_risk_level", "risk_level"),
    )

    # Identity
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    usn: Mapped[str | None] = mapped_column(
        String(50), unique=True, nullable=True, comment="University seat number"
    )
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Credentials (never exposed; see core.schemas.students.StudentPublic)
    hashed_password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    otp: Mapped[str | None] = mapped_column(String(10), nullable=True)
    otp_expires: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    otp_purpose: Mapped[str | None] = mapped_column(String(10), nullable=True)
    otp_attempts: Mapped[int] = mapped_column(Integer, default=0)
    reset_verified_until: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    is_verified: Mapped[bool] = mapped_column(default=False)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Address
    street: Mapped[str | None] = mapped_column(String(200), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    pincode: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Academic
    current_class: Mapped[str | None] = mapped_column(String(100), nullable=True)
    school: Mapped[str | None] = mapped_column(String(200), nullable=True)
    board: Mapped[str | None] = mapped_column(String(100), nullable=True)
    career_goals: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Parent / guardian
    parent_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    parent_relationship: Mapped[str | None] = mapped_column(String(50), nullable=True)
    parent_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    parent_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Counselling
    risk_level: Mapped[str] = mapped_column(String(10), default=RiskLevel.LOW.value)
    special_needs: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=StudentStatus.ACTIVE.value)
    is_active: Mapped[bool] = mapped_column(default=True)

    # Relationships
    subjects: Mapped[list[Subject]] = relationship(
        back_populates="student", cascade="all, delete-orphan", lazy="selectin"
    )
    interests: Mapped[list[Interest]] = relationship(
        back_populates="student", cascade="all, delete-orphan", lazy="selectin"
    )
    appointments: Mapped[list[Appointment]] = relationship(
        back_populates="student", cascade="all, delete-orphan"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Subject(Base, IntegerPrimaryKeyMixin):
    """A subject tag owned by a student."""

    __tablename__ = "subjects"

    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    value: Mapped[str] = mapped_column(String(200), nullable=False)

    student: Mapped[Student] = relationship(back_populates="subjects")


class Interest(Base, IntegerPrimaryKeyMixin):
    """An interest tag owned by a student."""

    __tablename__ = "interests"

    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    value: Mapped[str] = mapped_column(String(200), nullable=False)

    student: Mapped[Student] = relationship(back_populates="interests")
