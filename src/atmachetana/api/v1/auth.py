"""
Authentication API

Login for students and staff, OTP-verified student signup, staff
provisioning, and password change/reset.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from atmachetana.auth import AuthService, Principal, get_current_principal, require_admin
from atmachetana.core.database import get_db
from atmachetana.core.models import Student
from atmachetana.core.schemas import (
    AccountRef,
    ChangePasswordRequest,
    CreateStaffRequest,
    EmailOnlyRequest,
    Envelope,
    LoginRequest,
    PrincipalView,
    ResetPasswordConfirm,
    SignupRequest,
    StaffPublic,
    StudentPublic,
    TokenData,
    TokenOnly,
    UserData,
    VerifyOtpRequest,
)
from atmachetana.notifications import EmailClient, get_email_client

logger = logging.getLogger(__name__)

router = APIRouter()


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    email_client: EmailClient = Depends(get_email_client),
) -> AuthService:
    return AuthService(db, email_client)


@router.post("/login", response_model=Envelope[TokenData])
async def login(
    data: LoginRequest, service: AuthService = Depends(get_auth_service)
) -> Envelope[TokenData]:
    """Exchange email and password for a bearer token."""
    token, principal = await service.login(data.email, data.password, data.user_type)
    user = PrincipalView(id=principal.id, email=principal.email, role=principal.role.value)
    return Envelope(message="Login successful", data=TokenData(token=token, user=user))


@router.post(
    "/signup", response_model=Envelope[AccountRef], status_code=status.HTTP_201_CREATED
)
async def signup(
    data: SignupRequest, service: AuthService = Depends(get_auth_service)
) -> Envelope[AccountRef]:
    """Register an unverified student and email a verification OTP."""
    student, delivered = await service.signup(data.name, data.email, data.password)
    message = (
        "Signup complete, verify OTP"
        if delivered
        else "Signup complete, but the OTP email could not be sent. Use resend OTP."
    )
    return Envelope(message=message, data=AccountRef(id=student.id, email=student.email))


@router.post("/verify-otp", response_model=Envelope[TokenOnly])
async def verify_otp(
    data: VerifyOtpRequest, service: AuthService = Depends(get_auth_service)
) -> Envelope[TokenOnly]:
    token = await service.verify_otp(data.email, data.otp)
    return Envelope(message="Account verified", data=TokenOnly(token=token))


@router.post("/resend-otp", response_model=Envelope[None])
async def resend_otp(
    data: EmailOnlyRequest, service: AuthService = Depends(get_auth_service)
) -> Envelope[None]:
    delivered = await service.resend_otp(data.email)
    return Envelope(message="OTP resent" if delivered else "OTP reissued but email failed")


@router.post(
    "/create-staff",
    response_model=Envelope[AccountRef],
    status_code=status.HTTP_201_CREATED,
)
async def create_staff(
    data: CreateStaffRequest,
    _admin: Principal = Depends(require_admin),
    service: AuthService = Depends(get_auth_service),
) -> Envelope[AccountRef]:
    """Provision a counsellor or admin account (admin only)."""
    staff = await service.create_staff(data.name, data.email, data.password, data.role)
    return Envelope(message=f"{data.role} created", data=AccountRef(id=staff.id, email=staff.email))


@router.get("/me", response_model=Envelope[UserData])
async def me(
    principal: Principal = Depends(get_current_principal),
    service: AuthService = Depends(get_auth_service),
) -> Envelope[UserData]:
    account = await service.load_account(principal)
    user: StudentPublic | StaffPublic
    if isinstance(account, Student):
        user = StudentPublic.model_validate(account)
    else:
        user = StaffPublic.model_validate(account)
    return Envelope(data=UserData(user=user))


@router.post("/logout", response_model=Envelope[None])
async def logout(_principal: Principal = Depends(get_current_principal)) -> Envelope[None]:
    """Tokens are stateless; the client discards its copy."""
    return Envelope(message="Logged out")


@router.put("/change-password", response_model=Envelope[None])
async def change_password(
    data: ChangePasswordRequest,
    principal: Principal = Depends(get_current_principal),
    service: AuthService = Depends(get_auth_service),
) -> Envelope[None]:
    await service.change_password(principal, data.current_password, data.new_password)
    return Envelope(message="Password changed")


@router.post("/reset-password/request", response_model=Envelope[None])
async def request_password_reset(
    data: EmailOnlyRequest, service: AuthService = Depends(get_auth_service)
) -> Envelope[None]:
    """Email a reset OTP; verify it with ``/verify-otp`` before confirming."""
    delivered = await service.request_password_reset(data.email)
    return Envelope(message="OTP sent to email" if delivered else "OTP issued but email failed")


@router.post("/reset-password/confirm", response_model=Envelope[None])
async def confirm_password_reset(
    data: ResetPasswordConfirm, service: AuthService = Depends(get_auth_service)
) -> Envelope[None]:
    await service.confirm_password_reset(data.email, data.new_password)
    return Envelope(message="Password reset successful")
