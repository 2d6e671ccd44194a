"""Teacher diary router."""

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
from app.core.schemas import ApiResponse, HealthResponse, MessageResponse
from app.db.session import get_db

from .schemas import ClassSections, DiaryEntryCreate, DiaryEntryPage, DiaryEntryResponse, DiaryEntryUpdate, DiaryStats
from . import service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/diary", tags=["diary"])

AUTHOR_ROLES = (UserRole.TEACHER.value,)
STAFF_ROLES = (UserRole.ADMIN.value, UserRole.SCHOOL.value, UserRole.TEACHER.value)
ALL_ROLES = tuple(role.value for role in UserRole)


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(message="Teacher Diary API is running", timestamp=datetime.now(timezone.utc))


@router.get(
    "/teacher/entries",
    response_model=ApiResponse[DiaryEntryPage],
    dependencies=[Depends(require_roles(*AUTHOR_ROLES))],
)
async def list_teacher_entries(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    class_name: Optional[str] = Query(None, alias="className"),
    section: Optional[str] = Query(None),
    subject: Optional[str] = Query(None),
    entry_type: Optional[str] = Query(None, alias="entryType"),
    priority: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[DiaryEntryPage]:
    try:
        result = await service.list_teacher_entries(
            db,
            tenant,
            page=page,
            limit=limit,
            start_date=start_date,
            end_date=end_date,
            class_name=class_name,
            section=section,
            subject=subject,
            entry_type=entry_type,
            priority=priority,
        )
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error fetching teacher diary entries")
        raise unexpected_error("Failed to fetch teacher diary entries", e) from e
    return ApiResponse[DiaryEntryPage](message="Teacher diary entries retrieved successfully", data=result)


@router.get(
    "/view",
    response_model=ApiResponse[DiaryEntryPage],
    dependencies=[Depends(require_roles(*ALL_ROLES))],
)
async def list_entries_for_view(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    class_name: Optional[str] = Query(None, alias="className"),
    section: Optional[str] = Query(None),
    subject: Optional[str] = Query(None),
    teacher_id: Optional[int] = Query(None, alias="teacherId"),
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[DiaryEntryPage]:
    try:
        result = await service.list_entries_for_view(
            db,
            tenant,
            page=page,
            limit=limit,
            start_date=start_date,
            end_date=end_date,
            class_name=class_name,
            section=section,
            subject=subject,
            teacher_id=teacher_id,
        )
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error fetching diary entries for view")
        raise unexpected_error("Failed to fetch diary entries", e) from e
    return ApiResponse[DiaryEntryPage](message="Diary entries retrieved successfully", data=result)


@router.post(
    "/create",
    response_model=ApiResponse[DiaryEntryResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*AUTHOR_ROLES))],
)
async def create_entry(
    payload: DiaryEntryCreate,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[DiaryEntryResponse]:
    try:
        entry = await service.create_entry(db, tenant, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error creating diary entry")
        raise unexpected_error("Failed to create diary entry", e) from e
    return ApiResponse[DiaryEntryResponse](message="Diary entry created successfully", data=entry)


@router.put(
    "/update/{entry_id}",
    response_model=ApiResponse[DiaryEntryResponse],
    dependencies=[Depends(require_roles(*AUTHOR_ROLES))],
)
async def update_entry(
    entry_id: int,
    payload: DiaryEntryUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[DiaryEntryResponse]:
    try:
        entry = await service.update_entry(db, tenant, entry_id, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error updating diary entry %s", entry_id)
        raise unexpected_error("Failed to update diary entry", e) from e
    if not entry:
        raise ServiceError(
            "Diary entry not found or you don't have permission to update it",
            status.HTTP_404_NOT_FOUND,
        )
    return ApiResponse[DiaryEntryResponse](message="Diary entry updated successfully", data=entry)


@router.delete(
    "/delete/{entry_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_roles(*AUTHOR_ROLES))],
)
async def delete_entry(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> MessageResponse:
    try:
        deleted = await service.delete_entry(db, tenant, entry_id)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error deleting diary entry %s", entry_id)
        raise unexpected_error("Failed to delete diary entry", e) from e
    if not deleted:
        raise ServiceError(
            "Diary entry not found or you don't have permission to delete it",
            status.HTTP_404_NOT_FOUND,
        )
    return MessageResponse(message="Diary entry deleted successfully")


@router.get(
    "/entry/{entry_id}",
    response_model=ApiResponse[DiaryEntryResponse],
    dependencies=[Depends(require_roles(*ALL_ROLES))],
)
async def get_entry(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[DiaryEntryResponse]:
    try:
        entry = await service.get_entry(db, tenant, entry_id)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error fetching diary entry %s", entry_id)
        raise unexpected_error("Failed to fetch diary entry", e) from e
    if not entry:
        raise ServiceError(
            "Diary entry not found or you don't have permission to view it",
            status.HTTP_404_NOT_FOUND,
        )
    return ApiResponse[DiaryEntryResponse](message="Diary entry retrieved successfully", data=entry)


@router.get(
    "/stats",
    response_model=ApiResponse[DiaryStats],
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def get_stats(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    teacher_id: Optional[int] = Query(None, alias="teacherId"),
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[DiaryStats]:
    try:
        stats = await service.get_stats(db, tenant, start_date=start_date, end_date=end_date, teacher_id=teacher_id)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error fetching diary statistics")
        raise unexpected_error("Failed to fetch diary statistics", e) from e
    return ApiResponse[DiaryStats](message="Diary statistics retrieved successfully", data=stats)


@router.get(
    "/classes",
    response_model=ApiResponse[List[ClassSections]],
    dependencies=[Depends(require_roles(*ALL_ROLES))],
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
        logger.exception("Error fetching diary classes")
        raise unexpected_error("Failed to fetch classes and sections", e) from e
    return ApiResponse[List[ClassSections]](message="Classes and sections retrieved successfully", data=classes)
