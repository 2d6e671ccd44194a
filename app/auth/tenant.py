"""
Tenant resolution: turn the authenticated caller into the school scope of a request.

- Non-admin callers are always scoped to the school embedded in their session;
  any schoolId they pass is ignored.
- Admins may pick a school with ?schoolId=, or ask for every school with ?all=true.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Query, status

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser, TenantContext
from app.core.enums import UserRole


SCHOOL_CONTEXT_REQUIRED_MESSAGE = "School context is required. Please ensure you're logged in properly."


def resolve_tenant(
    user: CurrentUser,
    school_id_override: Optional[int] = None,
    all_schools: bool = False,
) -> TenantContext:
    """Pure resolution rules; raises 400 when no tenant can be determined."""
    if user.role == UserRole.ADMIN.value:
        if school_id_override is not None:
            return TenantContext(school_id=school_id_override, user=user)
        if all_schools:
            return TenantContext(school_id=user.school_id, all_schools=True, user=user)

    if user.school_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=SCHOOL_CONTEXT_REQUIRED_MESSAGE,
        )
    return TenantContext(school_id=user.school_id, user=user)


async def get_tenant_context(
    school_id: Optional[int] = Query(None, alias="schoolId", description="Admin only: act on this school"),
    all_schools: bool = Query(False, alias="all", description="Admin only: list across all schools"),
    current_user: CurrentUser = Depends(get_current_user),
) -> TenantContext:
    return resolve_tenant(current_user, school_id_override=school_id, all_schools=all_schools)
