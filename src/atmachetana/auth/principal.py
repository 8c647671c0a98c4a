"""
The authenticated actor of a request.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from atmachetana.core.enums import STAFF_ROLES, Role
from atmachetana.core.models import Staff, Student


@dataclass(frozen=True)
class Principal:
    """Resolved identity; lives for one request and carries no secrets."""

    id: int
    email: str
    role: Role
    name: str = ""

    @property
    def is_student(self) -> bool:
        return self.role is Role.STUDENT

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @classmethod
    def from_student(cls, student: Student) -> Principal:
        return cls(id=student.id, email=student.email, role=Role.STUDENT, name=student.full_name)

    @classmethod
    def from_staff(cls, staff: Staff) -> Principal:
        return cls(id=staff.id, email=staff.email, role=Role(staff.role), name=staff.name)


def authorize(principal: Principal, allowed_roles: Iterable[Role]) -> bool:
    """Pure role check; callers turn ``False`` into ``Forbidden``."""
    return principal.role in set(allowed_roles)
