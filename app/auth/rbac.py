from fastapi import Depends, HTTPException, status

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser


def require_roles(*roles: str):
    """
    Dependency factory restricting a route to the given roles.

    Example:
        Depends(require_roles(UserRole.ADMIN.value, UserRole.SCHOOL.value))
    """

    allowed = {r.lower() for r in roles}

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role {current_user.role} is not authorized to access this route",
            )
        return current_user

    return _checker
