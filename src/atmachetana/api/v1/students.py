"""
Students API

Staff-facing student records and the student's own profile.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from atmachetana.auth import Principal, get_current_principal, require_staff
from atmachetana.core.database import get_db
from atmachetana.core.errors import Forbidden
from atmachetana.core.schemas import (
    Envelope,
    Pagination,
    StudentCreate,
    StudentListData,
    StudentOverview,
    StudentProfileUpdate,
    StudentPublic,
    StudentUpdate,
)
from atmachetana.students import StudentService

router = APIRouter()


def get_student_service(db: AsyncSession = Depends(get_db)) -> StudentService:
    return StudentService(db)


async def require_student_self(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    if not principal.is_student:
        raise Forbidden("This endpoint is only accessible to students")
    return principal


@router.get("/me", response_model=Envelope[StudentPublic])
async def get_my_profile(
    principal: Principal = Depends(require_student_self),
    service: StudentService = Depends(get_student_service),
) -> Envelope[StudentPublic]:
    student = await service.get(principal.id)
    return Envelope(data=StudentPublic.model_validate(student))


@router.put("/me", response_model=Envelope[StudentPublic])
async def update_my_profile(
    data: StudentProfileUpdate,
    principal: Principal = Depends(require_student_self),
    service: StudentService = Depends(get_student_service),
) -> Envelope[StudentPublic]:
    """Update personal, academic and guardian details. Email cannot change here."""
    student = await service.update_profile(principal.id, data)
    return Envelope(
        message="Profile updated successfully", data=StudentPublic.model_validate(student)
    )


@router.get("/stats/overview", response_model=Envelope[StudentOverview])
async def student_overview(
    _staff: Principal = Depends(require_staff),
    service: StudentService = Depends(get_student_service),
) -> Envelope[StudentOverview]:
    return Envelope(data=StudentOverview(**await service.overview()))


@router.get("", response_model=Envelope[StudentListData])
async def list_students(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str | None = Query(None, max_length=100),
    status_filter: str | None = Query(None, alias="status"),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    _staff: Principal = Depends(require_staff),
    service: StudentService = Depends(get_student_service),
) -> Envelope[StudentListData]:
    """Search by name, email, phone or USN."""
    result = await service.list(
        search=search,
        status=status_filter,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return Envelope(
        data=StudentListData(
            students=[StudentPublic.model_validate(s) for s in result.students],
            pagination=Pagination(**result.pagination),
        )
    )


@router.get("/{student_id}", response_model=Envelope[StudentPublic])
async def get_student(
    student_id: int,
    principal: Principal = Depends(get_current_principal),
    service: StudentService = Depends(get_student_service),
) -> Envelope[StudentPublic]:
    """Staff can read any record; a student only their own."""
    if principal.is_student and principal.id != student_id:
        raise Forbidden()
    student = await service.get(student_id)
    return Envelope(data=StudentPublic.model_validate(student))


@router.post("", response_model=Envelope[StudentPublic], status_code=status.HTTP_201_CREATED)
async def create_student(
    data: StudentCreate,
    _staff: Principal = Depends(require_staff),
    service: StudentService = Depends(get_student_service),
) -> Envelope[StudentPublic]:
    student = await service.create(data)
    return Envelope(
        message="Student created successfully", data=StudentPublic.model_validate(student)
    )


@router.put("/{student_id}", response_model=Envelope[StudentPublic])
async def update_student(
    student_id: int,
    data: StudentUpdate,
    _staff: Principal = Depends(require_staff),
    service: StudentService = Depends(get_student_service),
) -> Envelope[StudentPublic]:
    student = await service.update(student_id, data)
    return Envelope(
        message="Student updated successfully", data=StudentPublic.model_validate(student)
    )


@router.delete("/{student_id}", response_model=Envelope[None])
async def delete_student(
    student_id: int,
    _staff: Principal = Depends(require_staff),
    service: StudentService = Depends(get_student_service),
) -> Envelope[None]:
    await service.delete(student_id)
    return Envelope(message="Student deleted successfully")
