"""
Student Schemas

Pydantic models for student request/response validation. ``StudentPublic``
is the only shape a student record leaves the API in; it has no credential
fields at all.
"""

from datetime import date, datetime
from typing import Any

from pydantic import Field, field_validator

from atmachetana.core.enums import RiskLevel, StudentStatus

from .common import CamelModel, Pagination


def _tag_values(value: Any) -> Any:
    """ORM Subject/Interest rows -> plain strings."""
    if isinstance(value, list):
        return [getattr(item, "value", item) for item in value]
    return value


class StudentSummary(CamelModel):
    """Compact student view embedded in appointment responses."""

    id: int
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    usn: str | None = None


class StudentPublic(CamelModel):
    """Full student schema for responses."""

    id: int
    first_name: str
    last_name: str
    email: str
    usn: str | None
    phone: str | None
    date_of_birth: date | None
    gender: str | None
    street: str | None
    city: str | None
    state: str | None
    pincode: str | None
    current_class: str | None
    school: str | None
    board: str | None
    career_goals: str | None
    parent_name: str | None
    parent_relationship: str | None
    parent_phone: str | None
    parent_email: str | None
    risk_level: str
    special_needs: str | None
    status: str
    is_active: bool
    is_verified: bool
    last_login: datetime | None
    subjects: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    role: str = "student"
    created_at: datetime
    updated_at: datetime

    @field_validator("subjects", "interests", mode="before")
    @classmethod
    def flatten_tags(cls, value: Any) -> Any:
        return _tag_values(value)


class StudentBase(CamelModel):
    phone: str | None = Field(None, max_length=20)
    usn: str | None = Field(None, max_length=50)
    date_of_birth: date | None = None
    gender: str | None = Field(None, max_length=20)
    street: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    current_class: str | None = None
    school: str | None = None
    board: str | None = None
    career_goals: str | None = None
    parent_name: str | None = None
    parent_relationship: str | None = None
    parent_phone: str | None = None
    parent_email: str | None = None
    risk_level: RiskLevel | None = None
    special_needs: str | None = None
    status: StudentStatus | None = None
    is_active: bool | None = None
    subjects: list[str] | None = None
    interests: list[str] | None = None


class StudentCreate(StudentBase):
    """Schema for staff creating a student record."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password: str | None = Field(None, min_length=6, description="Optional initial password")


class StudentUpdate(StudentBase):
    """Schema for staff updating a student record. Only set fields are applied."""

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: str | None = Field(None, min_length=3, max_length=255)


# Self-service profile (nested wire format)


class Address(CamelModel):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None


class PersonalInfo(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None
    address: Address | None = None


class AcademicInfo(CamelModel):
    current_class: str | None = None
    school: str | None = None
    board: str | None = None
    career_goals: str | None = None


class ParentGuardianInfo(CamelModel):
    name: str | None = None
    relationship: str | None = None
    phone: str | None = None
    email: str | None = None


class CounselingInfo(CamelModel):
    parent_guardian_info: ParentGuardianInfo | None = None


class StudentProfileUpdate(CamelModel):
    """``PUT /api/students/me`` body. Email is deliberately absent."""

    personal_info: PersonalInfo | None = None
    academic_info: AcademicInfo | None = None
    counseling_info: CounselingInfo | None = None

    def flatten(self) -> dict[str, Any]:
        """Column -> value for every field the client actually sent."""
        data: dict[str, Any] = {}
        if self.personal_info:
            personal = self.personal_info.model_dump(exclude_unset=True, exclude={"address"})
            data.update(personal)
            if self.personal_info.address:
                data.update(self.personal_info.address.model_dump(exclude_unset=True))
        if self.academic_info:
            data.update(self.academic_info.model_dump(exclude_unset=True))
        if self.counseling_info and self.counseling_info.parent_guardian_info:
            guardian = self.counseling_info.parent_guardian_info.model_dump(exclude_unset=True)
            data.update({f"parent_{key}": value for key, value in guardian.items()})
        return data


class StudentListData(CamelModel):
    students: list[StudentPublic]
    pagination: Pagination


class StudentOverview(CamelModel):
    total: int
    active: int
    inactive: int
    graduated: int
