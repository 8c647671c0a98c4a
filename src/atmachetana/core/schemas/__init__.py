"""Pydantic schemas for API validation."""

from .appointments import (
    ActionItemSchema,
    AppointmentCollection,
    AppointmentCreate,
    AppointmentData,
    AppointmentDetails,
    AppointmentDetailSchema,
    AppointmentListData,
    AppointmentPatch,
    AppointmentSchema,
    CompleteRequest,
    ConfirmRequest,
    RecurringPatternIn,
    StatusRequest,
)
from .common import CamelModel, Envelope, Pagination
from .students import (
    StudentCreate,
    StudentListData,
    StudentOverview,
    StudentProfileUpdate,
    StudentPublic,
    StudentSummary,
    StudentUpdate,
)
from .users import (
    AccountRef,
    ChangePasswordRequest,
    CreateStaffRequest,
    EmailOnlyRequest,
    LoginRequest,
    PrincipalView,
    ResetPasswordConfirm,
    SignupRequest,
    StaffPublic,
    StaffSummary,
    TokenData,
    TokenOnly,
    UserData,
    VerifyOtpRequest,
)

__all__ = [
    # Common
    "CamelModel",
    "Envelope",
    "Pagination",
    # Appointments
    "ActionItemSchema",
    "AppointmentCollection",
    "AppointmentCreate",
    "AppointmentData",
    "AppointmentDetails",
    "AppointmentDetailSchema",
    "AppointmentListData",
    "AppointmentPatch",
    "AppointmentSchema",
    "CompleteRequest",
    "ConfirmRequest",
    "RecurringPatternIn",
    "StatusRequest",
    # Students
    "StudentCreate",
    "StudentListData",
    "StudentOverview",
    "StudentProfileUpdate",
    "StudentPublic",
    "StudentSummary",
    "StudentUpdate",
    # Users
    "AccountRef",
    "ChangePasswordRequest",
    "CreateStaffRequest",
    "EmailOnlyRequest",
    "LoginRequest",
    "PrincipalView",
    "ResetPasswordConfirm",
    "SignupRequest",
    "StaffPublic",
    "StaffSummary",
    "TokenData",
    "TokenOnly",
    "UserData",
    "VerifyOtpRequest",
]
