"""
Student record management: staff CRUD, search and the self-service profile.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from atmachetana.core.enums import StudentStatus
from atmachetana.core.errors import Conflict, NotFound
from atmachetana.core.models import Interest, Student, Subject
from atmachetana.core.schemas.students import (
    StudentCreate,
    StudentProfileUpdate,
    StudentUpdate,
)
from atmachetana.core.security import get_password_hash
from atmachetana.core.validation import pagination_info, validate_pagination, validate_sort

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "createdAt": Student.created_at,
    "updatedAt": Student.updated_at,
    "firstName": Student.first_name,
    "lastName": Student.last_name,
    "email": Student.email,
    "usn": Student.usn,
    "status": Student.status,
    "riskLevel": Student.risk_level,
}

SEARCH_COLUMNS = (Student.first_name, Student.last_name, Student.email, Student.phone, Student.usn)

DUPLICATE_MESSAGE = "Student with this email or USN already exists"


@dataclass
class StudentPage:
    students: list[Student]
    pagination: dict[str, int]


def _replace_tags(
    student: Student, subjects: list[str] | None, interests: list[str] | None
) -> None:
    if subjects is not None:
        student.subjects = [Subject(value=value) for value in subjects if value]
    if interests is not None:
        student.interests = [Interest(value=value) for value in interests if value]


class StudentService:
    """Student operations over one request-scoped session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, student_id: int) -> Student:
        student = await self.db.get(Student, student_id, populate_existing=True)
        if student is None:
            raise NotFound("Student not found")
        return student

    async def _ensure_unique(
        self, email: str | None, usn: str | None, exclude_id: int | None = None
    ) -> None:
        """Raises Conflict when another student already holds ``email`` or ``usn``."""
        clauses = []
        if email:
            clauses.append(Student.email == email)
        if usn:
            clauses.append(Student.usn == usn)
        if not clauses:
            return
        query = select(Student.id).where(or_(*clauses))
        if exclude_id is not None:
            query = query.where(Student.id != exclude_id)
        if await self.db.scalar(query.limit(1)) is not None:
            raise Conflict(DUPLICATE_MESSAGE)

    async def list(
        self,
        *,
        search: str | None = None,
        status: str | None = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 10,
    ) -> StudentPage:
        """Paginated listing with a case-insensitive substring search.

        The search term is always a bound parameter.
        """
        skip, limit = validate_pagination(page, limit)
        column, descending = validate_sort(sort_by, sort_order, SORTABLE_COLUMNS)

        conditions = []
        if status:
            conditions.append(Student.status == status)
        term = (search or "").strip()
        if term:
            pattern = f"%{term}%"
            conditions.append(or_(*(col.ilike(pattern) for col in SEARCH_COLUMNS)))

        total = await self.db.scalar(select(func.count()).select_from(Student).where(*conditions))
        result = await self.db.execute(
            select(Student)
            .where(*conditions)
            .order_by(column.desc() if descending else column.asc(), Student.id)
            .offset(skip)
            .limit(limit)
        )
        return StudentPage(
            students=list(result.scalars().all()),
            pagination=pagination_info(page, limit, total or 0),
        )

    async def create(self, data: StudentCreate) -> Student:
        """Staff-created record; verified straight away when a password is set."""
        await self._ensure_unique(data.email, data.usn)

        fields = data.model_dump(exclude={"password", "subjects", "interests"}, exclude_none=True)
        student = Student(
            **fields,
            hashed_password=get_password_hash(data.password) if data.password else None,
            is_verified=data.password is not None,
            subjects=[],
            interests=[],
        )
        _replace_tags(student, data.subjects, data.interests)
        self.db.add(student)
        await self.db.commit()
        logger.info(f"Student {student.id} created")
        return await self.get(student.id)

    async def update(self, student_id: int, data: StudentUpdate) -> Student:
        """Apply the fields that were sent; tag lists are replaced wholesale."""
        student = await self.get(student_id)
        changes = data.model_dump(exclude_unset=True, exclude={"subjects", "interests"})
        await self._ensure_unique(changes.get("email"), changes.get("usn"), exclude_id=student_id)

        for column, value in changes.items():
            setattr(student, column, value)
        _replace_tags(student, data.subjects, data.interests)
        await self.db.commit()
        return await self.get(student_id)

    async def delete(self, student_id: int) -> None:
        """Deletes the student with their appointments and tags."""
        student = await self.get(student_id)
        await self.db.delete(student)
        await self.db.commit()
        logger.info(f"Student {student_id} deleted")

    async def update_profile(self, student_id: int, profile: StudentProfileUpdate) -> Student:
        """Self-service edit; fields absent from the body stay untouched."""
        student = await self.get(student_id)
        changes: dict[str, Any] = profile.flatten()
        for column, value in changes.items():
            setattr(student, column, value)
        await self.db.commit()
        return await self.get(student_id)

    async def overview(self) -> dict[str, int]:
        """Head-count per status."""
        result = await self.db.execute(
            select(Student.status, func.count()).group_by(Student.status)
        )
        counts = {status: count for status, count in result.all()}
        return {
            "total": sum(counts.values()),
            "active": counts.get(StudentStatus.ACTIVE.value, 0),
            "inactive": counts.get(StudentStatus.INACTIVE.value, 0),
            "graduated": counts.get(StudentStatus.GRADUATED.value, 0),
        }
