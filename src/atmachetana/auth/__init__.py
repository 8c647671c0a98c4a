"""
Identity & access: principals, token authentication, role gates and
account flows.
"""

from .bootstrap import ensure_default_admin
from .dependencies import (
    authenticate,
    get_current_principal,
    require_admin,
    require_roles,
    require_staff,
    require_student,
)
from .principal import Principal, authorize
from .service import AuthService, issue_token

__all__ = [
    "AuthService",
    "Principal",
    "authenticate",
    "authorize",
    "ensure_default_admin",
    "get_current_principal",
    "issue_token",
    "require_admin",
    "require_roles",
    "require_staff",
    "require_student",
]
