"""
Input validation functions for Atma-Chethana.

All validation functions follow the pattern:
1. Accept raw user input (string, date, etc.)
2. Normalize/clean the input
3. Validate against business rules
4. Return cleaned value or raise ValidationError
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from typing import Any

from atmachetana.core.enums import AppointmentStatus

from .errors import InvalidInput


class ValidationError(InvalidInput):
    """Raised when user input fails validation."""

    pass


# ============================================================================
# Dates
# ============================================================================

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date_input(value: Any, field: str = "requestedDate") -> datetime:
    """
    Parse a client-supplied date into a naive local datetime.

    Accepts:
    - "YYYY-MM-DD" (midnight local time)
    - ISO 8601 datetimes; offset-aware values are converted to local time
    - ``date`` / ``datetime`` objects

    Args:
        value: Raw input
        field: Field name used in error messages

    Returns:
        Naive datetime in local time

    Raises:
        ValidationError: If the value is missing or not a valid calendar date
    """
    if value is None or value == "":
        raise ValidationError(f"{field} is required")

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        try:
            if _DATE_ONLY.match(text):
                parsed_day = date.fromisoformat(text)
                return datetime(parsed_day.year, parsed_day.month, parsed_day.day)
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise ValidationError(
                f"Invalid {field} format. Please send a valid date string (YYYY-MM-DD)."
            ) from e
    else:
        raise ValidationError(f"Invalid {field} type. Must be a date string.")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def parse_optional_date(value: Any, field: str) -> datetime | None:
    """Like ``parse_date_input`` but ``None``/empty means "no date"."""
    if value is None or value == "":
        return None
    return parse_date_input(value, field)


def day_bounds(value: Any) -> tuple[datetime, datetime]:
    """Half-open local-day interval ``[day, day + 1)`` for a date filter."""
    start = parse_date_input(value, "date")
    start = start.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


# ============================================================================
# Appointment status
# ============================================================================


def parse_status(value: Any) -> AppointmentStatus:
    """Validate an appointment status; exact, case-sensitive match."""
    try:
        return AppointmentStatus(value)
    except ValueError as e:
        raise ValidationError("Invalid status") from e


# ============================================================================
# Pagination
# ============================================================================

MAX_PAGE_SIZE = 100


def validate_pagination(page: int, limit: int) -> tuple[int, int]:
    """Return ``(skip, limit)`` for 1-based ``page``."""
    if page < 1:
        raise ValidationError("page must be at least 1")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
    return (page - 1) * limit, limit


def pagination_info(page: int, limit: int, total: int) -> dict[str, int]:
    return {
        "current": page,
        "pages": math.ceil(total / limit),
        "total": total,
        "limit": limit,
    }


# ============================================================================
# Sorting
# ============================================================================


def validate_sort(
    sort_by: str, sort_order: str, allowed: dict[str, Any]
) -> tuple[Any, bool]:
    """Resolve a client sort key against an allow-list of columns.

    Returns:
        (column, descending)
    """
    if sort_by not in allowed:
        raise ValidationError(f"Cannot sort by {sort_by}")
    order = sort_order.lower()
    if order not in ("asc", "desc"):
        raise ValidationError("sortOrder must be 'asc' or 'desc'")
    return allowed[sort_by], order == "desc"


# ============================================================================
# Names
# ============================================================================


def split_full_name(name: str | None, email: str) -> tuple[str, str]:
    """Split a signup name into first/last, falling back to the email local-part."""
    parts = (name or "").strip().split()
    first = parts[0] if parts else email.split("@")[0]
    last = " ".join(parts[1:]) or "Student"
    return first, last
