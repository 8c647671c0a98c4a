"""
Field-level update permissions for appointments.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from atmachetana.core.enums import Role

STUDENT_FIELDS = frozenset(
    {
        "requested_date",
        "requested_time",
        "reason",
        "student_concerns",
        "type",
        "mode",
        "priority",
    }
)

STAFF_FIELDS = frozenset(
    {
        "counsellor_id",
        "confirmed_date",
        "confirmed_time",
        "status",
        "pre_session_notes",
        "session_summary",
        "recommendations",
        "next_steps",
        "follow_up_required",
        "follow_up_date",
        "urgency_level",
        "mode",
        "priority",
    }
)

ROLE_PATCHABLE_FIELDS: dict[Role, frozenset[str]] = {
    Role.STUDENT: STUDENT_FIELDS,
    Role.COUNSELLOR: STAFF_FIELDS,
    Role.ADMIN: STAFF_FIELDS,
}

# Fields that, edited by a student, send the appointment back to Pending
RESCHEDULE_FIELDS = frozenset({"requested_date", "requested_time"})

DATE_FIELDS = {
    "requested_date": "requestedDate",
    "confirmed_date": "confirmedDate",
    "follow_up_date": "followUpDate",
}

_CAMEL_TO_SNAKE = {
    "requestedDate": "requested_date",
    "requestedTime": "requested_time",
    "studentConcerns": "student_concerns",
    "counsellorId": "counsellor_id",
    "confirmedDate": "confirmed_date",
    "confirmedTime": "confirmed_time",
    "preSessionNotes": "pre_session_notes",
    "sessionSummary": "session_summary",
    "nextSteps": "next_steps",
    "followUpRequired": "follow_up_required",
    "followUpDate": "follow_up_date",
    "urgencyLevel": "urgency_level",
}


def patchable_fields(role: Role) -> frozenset[str]:
    return ROLE_PATCHABLE_FIELDS[role]


def filter_patch(role: Role, patch: Mapping[str, Any]) -> dict[str, Any]:
    """Normalise keys to column names and drop everything ``role`` may not set."""
    allowed = ROLE_PATCHABLE_FIELDS[role]
    gated: dict[str, Any] = {}
    for key, value in patch.items():
        column = _CAMEL_TO_SNAKE.get(key, key)
        if column in allowed:
            gated[column] = value
    return gated
