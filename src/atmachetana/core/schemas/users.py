"""
Auth & Staff Schemas

Pydantic models for login, signup, OTP and staff provisioning.
"""

from datetime import datetime
from typing import Literal

from pydantic import Field

from .common import CamelModel
from .students import StudentPublic


class StaffPublic(CamelModel):
    """Staff account as exposed by the API (no credential fields)."""

    id: int
    name: str
    email: str
    role: str
    is_active: bool
    last_login: datetime | None
    created_at: datetime


class StaffSummary(CamelModel):
    id: int
    name: str
    email: str


class PrincipalView(CamelModel):
    id: int
    email: str
    role: str


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    user_type: Literal["student", "admin", "counsellor"] = "student"


class SignupRequest(CamelModel):
    name: str | None = None
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6)


class VerifyOtpRequest(CamelModel):
    email: str
    otp: str = Field(..., min_length=1, max_length=10)


class EmailOnlyRequest(CamelModel):
    email: str = Field(..., min_length=1)


class CreateStaffRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6)
    role: Literal["admin", "counsellor"] = "counsellor"


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class ResetPasswordConfirm(CamelModel):
    email: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class TokenData(CamelModel):
    token: str
    user: PrincipalView


class AccountRef(CamelModel):
    id: int
    email: str


class TokenOnly(CamelModel):
    token: str


class UserData(CamelModel):
    """``GET /api/auth/me`` payload."""

    user: StudentPublic | StaffPublic
