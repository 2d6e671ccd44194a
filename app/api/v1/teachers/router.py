"""Teachers router: the school's teacher directory."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_roles
from app.auth.schemas import TenantContext
from app.auth.tenant import get_tenant_context
from app.core.enums import UserRole
from app.core.exceptions import ServiceError, unexpected_error
from app.core.schemas import ApiResponse, MessageResponse
from app.db.session import get_db

from .schemas import TeacherCreate, TeacherResponse, TeacherUpdate
from . import service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/teachers", tags=["teachers"])

READ_ROLES = (UserRole.ADMIN.value, UserRole.SCHOOL.value, UserRole.TEACHER.value)
WRITE_ROLES = (UserRole.ADMIN.value, UserRole.SCHOOL.value)


@router.get(
    "",
    response_model=ApiResponse[List[TeacherResponse]],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def list_teachers(
    search: Optional[str] = Query(None, description="Matches name, email or designation"),
    teacher_status: Optional[str] = Query(None, alias="status", description="active, inactive"),
    class_filter: Optional[str] = Query(None, alias="classFilter"),
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[List[TeacherResponse]]:
    try:
        teachers = await service.list_teachers(
            db, tenant, search=search, status_filter=teacher_status, class_filter=class_filter
        )
    except Exception as e:
        logger.exception("Error fetching teachers")
        raise unexpected_error("Failed to fetch teachers", e) from e
    return ApiResponse[List[TeacherResponse]](message="Teachers retrieved successfully", data=teachers)


@router.get(
    "/{teacher_id}",
    response_model=ApiResponse[TeacherResponse],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def get_teacher(
    teacher_id: int,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[TeacherResponse]:
    try:
        teacher = await service.get_teacher(db, tenant, teacher_id)
    except Exception as e:
        logger.exception("Error fetching teacher %s", teacher_id)
        raise unexpected_error("Failed to fetch teacher", e) from e
    if not teacher:
        raise ServiceError("Teacher not found", status.HTTP_404_NOT_FOUND)
    return ApiResponse[TeacherResponse](message="Teacher retrieved successfully", data=teacher)


@router.post(
    "",
    response_model=ApiResponse[TeacherResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def create_teacher(
    payload: TeacherCreate,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[TeacherResponse]:
    try:
        teacher = await service.create_teacher(db, tenant, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error creating teacher")
        raise unexpected_error("Failed to create teacher", e) from e
    return ApiResponse[TeacherResponse](message="Teacher created successfully", data=teacher)


@router.put(
    "/{teacher_id}",
    response_model=ApiResponse[TeacherResponse],
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def update_teacher(
    teacher_id: int,
    payload: TeacherUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[TeacherResponse]:
    try:
        teacher = await service.update_teacher(db, tenant, teacher_id, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error updating teacher %s", teacher_id)
        raise unexpected_error("Failed to update teacher", e) from e
    if not teacher:
        raise ServiceError("Teacher not found", status.HTTP_404_NOT_FOUND)
    return ApiResponse[TeacherResponse](message="Teacher updated successfully", data=teacher)


@router.delete(
    "/{teacher_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def delete_teacher(
    teacher_id: int,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> MessageResponse:
    try:
        deleted = await service.delete_teacher(db, tenant, teacher_id)
    except Exception as e:
        logger.exception("Error deleting teacher %s", teacher_id)
        raise unexpected_error("Failed to delete teacher", e) from e
    if not deleted:
        raise ServiceError("Teacher not found", status.HTTP_404_NOT_FOUND)
    return MessageResponse(message="Teacher deleted successfully")
