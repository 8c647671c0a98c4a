"""
Statistics API

Dashboards for students (their own) and staff (service-wide).
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from atmachetana import reporting
from atmachetana.auth import Principal, get_current_principal, require_staff
from atmachetana.core.database import get_db
from atmachetana.core.schemas import Envelope

router = APIRouter()


@router.get("/dashboard", response_model=Envelope[dict[str, Any]])
async def dashboard(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> Envelope[dict[str, Any]]:
    """Students get their own overview; staff get the service-wide one."""
    if principal.is_student:
        return Envelope(data=await reporting.student_dashboard(db, principal.id))
    return Envelope(data=await reporting.staff_dashboard(db))


@router.get("/students", response_model=Envelope[dict[str, Any]])
async def student_statistics(
    _staff: Principal = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> Envelope[dict[str, Any]]:
    return Envelope(data=await reporting.student_stats(db))


@router.get("/appointments", response_model=Envelope[dict[str, Any]])
async def appointment_statistics(
    _staff: Principal = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> Envelope[dict[str, Any]]:
    return Envelope(data=await reporting.appointment_stats(db))


@router.get("/calendar", response_model=Envelope[dict[str, Any]])
async def calendar(
    month: int | None = Query(None, ge=1, le=12),
    year: int | None = Query(None, ge=1970, le=9999),
    _staff: Principal = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> Envelope[dict[str, Any]]:
    """Per-day appointment counts for a month (defaults to the current one)."""
    return Envelope(data=await reporting.calendar(db, month=month, year=year))
