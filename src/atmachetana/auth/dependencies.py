"""
Bearer-token authentication and role gates as FastAPI dependencies.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from atmachetana.core.database import get_db
from atmachetana.core.enums import STAFF_ROLES, Role
from atmachetana.core.errors import Forbidden, Unauthenticated
from atmachetana.core.models import Staff, Student
from atmachetana.core.security import decode_access_token

from .principal import Principal, authorize

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def authenticate(db: AsyncSession, token: str | None) -> Principal:
    """Resolve a bearer token to a principal.

    The ``role`` claim selects the identity table: students and staff have
    separate id spaces.

    Raises:
        Unauthenticated: Missing, malformed or expired token, unknown role,
            or the identity no longer exists
    """
    if not token:
        raise Unauthenticated()

    claims = decode_access_token(token)
    try:
        role = Role(claims["role"])
        subject_id = int(claims["sub"])
    except (ValueError, TypeError) as e:
        raise Unauthenticated("Invalid or expired token") from e

    if role is Role.STUDENT:
        student = await db.get(Student, subject_id)
        if student is not None:
            return Principal.from_student(student)
    else:
        staff = await db.get(Staff, subject_id)
        if staff is not None and staff.role == role.value:
            return Principal.from_staff(staff)

    logger.warning(f"Token for missing {role.value} {subject_id}")
    raise Unauthenticated("No user found with this token")


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """Dependency: the authenticated principal of this request."""
    token = credentials.credentials if credentials else None
    return await authenticate(db, token)


def require_roles(*roles: Role) -> Callable[..., Awaitable[Principal]]:
    """Dependency factory rejecting principals outside ``roles``."""

    async def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not authorize(principal, roles):
            raise Forbidden()
        return principal

    return dependency


require_staff = require_roles(*STAFF_ROLES)
require_admin = require_roles(Role.ADMIN)
require_student = require_roles(Role.STUDENT)
