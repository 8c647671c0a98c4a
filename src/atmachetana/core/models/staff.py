"""
Staff Models

Admins and counsellors share one table, distinguished by ``role``.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .appointments import Appointment

from sqlalchemy import CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from atmachetana.core.enums import Role

from .base import Base, IntegerPrimaryKeyMixin, TimestampMixin


class Staff(Base, IntegerPrimaryKeyMixin, TimestampMixin):
    """Counselling staff. Created only by an admin or by the startup bootstrap."""

    __tablename__ = "admins"
    __table_args__ = (
        CheckConstraint(
            f"role IN ('{Role.ADMIN.value}', '{Role.COUNSELLOR.value}')", name="check_staff_role"
        ),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default=Role.COUNSELLOR.value)
    is_active: Mapped[bool] = mapped_column(default=True)

    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    login_attempts: Mapped[int] = mapped_column(Integer, default=0)
    lock_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    appointments: Mapped[list[Appointment]] = relationship(back_populates="counsellor")
