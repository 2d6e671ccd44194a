"""Student attendance router."""

import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_roles
from app.auth.schemas import TenantContext
from app.auth.tenant import get_tenant_context
from app.core.enums import UserRole
from app.core.exceptions import ServiceError, unexpected_error
from app.core.schemas import ApiResponse, HealthResponse
from app.db.session import get_db

from .schemas import (
    AttendanceMark,
    AttendanceMarkResult,
    AttendanceRecordResponse,
    AttendanceStats,
    ClassSections,
    ClassStudent,
    StudentAttendanceSummary,
)
from . import service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/attendance", tags=["attendance"])

STAFF_ROLES = (UserRole.ADMIN.value, UserRole.SCHOOL.value, UserRole.TEACHER.value)
ALL_ROLES = tuple(role.value for role in UserRole)


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(message="Attendance service is running", timestamp=datetime.now(timezone.utc))


@router.get(
    "/students",
    response_model=ApiResponse[List[ClassStudent]],
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def list_students(
    class_name: Optional[str] = Query(None, alias="className"),
    section: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[List[ClassStudent]]:
    try:
        students = await service.list_students(db, tenant, class_name=class_name, section=section)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error fetching students for attendance")
        raise unexpected_error("Error fetching students", e) from e
    return ApiResponse[List[ClassStudent]](message="Students retrieved successfully", data=students)


@router.get(
    "/classes",
    response_model=ApiResponse[List[ClassSections]],
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def list_classes(
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[List[ClassSections]]:
    try:
        classes = await service.list_classes(db, tenant)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error fetching classes list")
        raise unexpected_error("Failed to fetch classes list", e) from e
    return ApiResponse[List[ClassSections]](message="Classes list retrieved successfully", data=classes)


@router.post(
    "/mark",
    response_model=ApiResponse[AttendanceMarkResult],
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def mark_attendance(
    payload: AttendanceMark,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[AttendanceMarkResult]:
    try:
        result = await service.mark_attendance(db, tenant, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error marking attendance")
        raise unexpected_error("Failed to mark attendance due to server error", e) from e
    return ApiResponse[AttendanceMarkResult](
        message=f"Attendance marked successfully. Created {result.created_count} records.",
        data=result,
    )


@router.get(
    "/records",
    response_model=ApiResponse[List[AttendanceRecordResponse]],
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def get_records(
    on_date: Optional[date] = Query(None, alias="date"),
    class_name: Optional[str] = Query(None, alias="className"),
    section: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[List[AttendanceRecordResponse]]:
    try:
        records = await service.get_records(db, tenant, on_date, class_name, section)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error fetching attendance records")
        raise unexpected_error("Failed to fetch attendance records", e) from e
    return ApiResponse[List[AttendanceRecordResponse]](
        message="Attendance records retrieved successfully", data=records
    )


@router.get(
    "/student/{student_id}",
    response_model=ApiResponse[StudentAttendanceSummary],
    dependencies=[Depends(require_roles(*ALL_ROLES))],
)
async def get_student_attendance(
    student_id: int,
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[StudentAttendanceSummary]:
    try:
        summary = await service.get_student_attendance(
            db, tenant, student_id, start_date=start_date, end_date=end_date
        )
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error fetching attendance of student %s", student_id)
        raise unexpected_error("Failed to fetch student attendance", e) from e
    if summary is None:
        raise ServiceError("Student not found", status.HTTP_404_NOT_FOUND)
    return ApiResponse[StudentAttendanceSummary](
        message="Student attendance records retrieved successfully", data=summary
    )


@router.get(
    "/stats",
    response_model=ApiResponse[AttendanceStats],
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def get_stats(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    class_name: Optional[str] = Query(None, alias="className"),
    section: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[AttendanceStats]:
    try:
        stats = await service.get_stats(db, tenant, start_date, end_date, class_name, section)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error fetching attendance statistics")
        raise unexpected_error("Failed to fetch attendance statistics", e) from e
    return ApiResponse[AttendanceStats](message="Attendance statistics retrieved successfully", data=stats)
