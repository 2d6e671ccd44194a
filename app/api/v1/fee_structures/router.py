"""Fee structures router: per-class fee plans with their fee categories."""

import logging
from datetime import datetime, timezone
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_roles
from app.auth.schemas import TenantContext
from app.auth.tenant import get_tenant_context
from app.core.enums import UserRole
from app.core.exceptions import ServiceError, unexpected_error
from app.core.schemas import ApiResponse, HealthResponse, MessageResponse
from app.db.session import get_db

from .schemas import (
    FeeStructureCreate,
    FeeStructureListMeta,
    FeeStructureListResponse,
    FeeStructureResponse,
    FeeStructureUpdate,
)
from . import service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/fee-structures", tags=["fee-structures"])

READ_ROLES = (UserRole.ADMIN.value, UserRole.SCHOOL.value, UserRole.TEACHER.value)
WRITE_ROLES = (UserRole.ADMIN.value, UserRole.SCHOOL.value)


def _client_info(request: Request):
    ip_address = request.client.host if request.client else None
    return ip_address, request.headers.get("user-agent")


@router.get(
    "",
    response_model=FeeStructureListResponse,
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def list_fee_structures(
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> FeeStructureListResponse:
    try:
        structures = await service.list_fee_structures(db, tenant)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error fetching fee structures")
        raise unexpected_error("Failed to fetch fee structures", e) from e
    return FeeStructureListResponse(
        message="Fee structures retrieved successfully",
        data=structures,
        meta=FeeStructureListMeta(
            school_id=tenant.school_id,
            total_count=len(structures),
            user_role=tenant.user.role,
        ),
    )


# Static paths must be registered before /{fee_structure_id}.
@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        message="Fee structure service is running",
        timestamp=datetime.now(timezone.utc),
    )


@router.get(
    "/categories/all",
    response_model=ApiResponse[List[str]],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def list_fee_categories(
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[List[str]]:
    try:
        names = await service.list_fee_category_names(db)
    except Exception as e:
        logger.exception("Error fetching fee categories")
        raise unexpected_error("Failed to fetch fee categories", e) from e
    return ApiResponse[List[str]](message="Fee categories retrieved successfully", data=names)


@router.get(
    "/{fee_structure_id}",
    response_model=ApiResponse[FeeStructureResponse],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def get_fee_structure(
    fee_structure_id: UUID,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[FeeStructureResponse]:
    try:
        fs = await service.get_fee_structure(db, tenant, fee_structure_id)
    except Exception as e:
        logger.exception("Error fetching fee structure %s", fee_structure_id)
        raise unexpected_error("Failed to fetch fee structure", e) from e
    if not fs:
        raise ServiceError(
            "Fee structure not found or you do not have permission to access it",
            status.HTTP_404_NOT_FOUND,
        )
    return ApiResponse[FeeStructureResponse](message="Fee structure retrieved successfully", data=fs)


@router.post(
    "",
    response_model=ApiResponse[FeeStructureResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def create_fee_structure(
    payload: FeeStructureCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[FeeStructureResponse]:
    ip_address, user_agent = _client_info(request)
    try:
        fs = await service.create_fee_structure(
            db, tenant, payload, ip_address=ip_address, user_agent=user_agent
        )
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error creating fee structure")
        raise unexpected_error("Failed to create fee structure", e) from e
    return ApiResponse[FeeStructureResponse](message="Fee structure created successfully", data=fs)


@router.put(
    "/{fee_structure_id}",
    response_model=ApiResponse[FeeStructureResponse],
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def update_fee_structure(
    fee_structure_id: UUID,
    payload: FeeStructureUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[FeeStructureResponse]:
    ip_address, user_agent = _client_info(request)
    try:
        fs = await service.update_fee_structure(
            db, tenant, fee_structure_id, payload, ip_address=ip_address, user_agent=user_agent
        )
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error updating fee structure %s", fee_structure_id)
        raise unexpected_error("Failed to update fee structure", e) from e
    if not fs:
        raise ServiceError(
            "Fee structure not found or you do not have permission to update it",
            status.HTTP_404_NOT_FOUND,
        )
    return ApiResponse[FeeStructureResponse](message="Fee structure updated successfully", data=fs)


@router.delete(
    "/{fee_structure_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def delete_fee_structure(
    fee_structure_id: UUID,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> MessageResponse:
    try:
        deleted = await service.delete_fee_structure(db, tenant, fee_structure_id)
    except Exception as e:
        logger.exception("Error deleting fee structure %s", fee_structure_id)
        raise unexpected_error("Failed to delete fee structure", e) from e
    if not deleted:
        raise ServiceError("Fee structure not found", status.HTTP_404_NOT_FOUND)
    return MessageResponse(message="Fee structure deleted successfully")
