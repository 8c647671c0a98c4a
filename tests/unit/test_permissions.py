"""
Unit Tests for Appointment Field Permissions
"""

import pytest

from atmachetana.appointments import ROLE_PATCHABLE_FIELDS, filter_patch
from atmachetana.core.enums import Role
from atmachetana.core.models import Appointment


def test_every_role_has_a_field_set():
    assert set(ROLE_PATCHABLE_FIELDS) == set(Role)


@pytest.mark.parametrize("role", list(Role))
def test_patchable_fields_are_real_columns(role):
    columns = set(Appointment.__table__.columns.keys())

    assert ROLE_PATCHABLE_FIELDS[role] <= columns


def test_identity_fields_never_patchable():
    for fields in ROLE_PATCHABLE_FIELDS.values():
        assert "id" not in fields
        assert "student_id" not in fields
        assert "created_at" not in fields


def test_student_patch_drops_staff_fields():
    patch = {
        "requestedDate": "2024-03-12",
        "reason": "Moved",
        "status": "Completed",
        "sessionSummary": "Forged",
        "studentId": 99,
    }

    assert filter_patch(Role.STUDENT, patch) == {
        "requested_date": "2024-03-12",
        "reason": "Moved",
    }


def test_staff_patch_accepts_camel_and_snake_keys():
    patch = {"confirmedTime": "3:00 PM", "pre_session_notes": "Notes", "reason": "ignored"}

    assert filter_patch(Role.COUNSELLOR, patch) == {
        "confirmed_time": "3:00 PM",
        "pre_session_notes": "Notes",
    }


def test_admin_and_counsellor_share_field_set():
    assert ROLE_PATCHABLE_FIELDS[Role.ADMIN] == ROLE_PATCHABLE_FIELDS[Role.COUNSELLOR]
