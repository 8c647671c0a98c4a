"""
Appointment lifecycle: creation, role-gated updates and status transitions.
"""

from .permissions import ROLE_PATCHABLE_FIELDS, filter_patch
from .service import (
    AppointmentFilters,
    AppointmentPage,
    AppointmentService,
    LifecyclePolicy,
)

__all__ = [
    "ROLE_PATCHABLE_FIELDS",
    "AppointmentFilters",
    "AppointmentPage",
    "AppointmentService",
    "LifecyclePolicy",
    "filter_patch",
]
