from typing import Optional

from pydantic import BaseModel

from app.core.enums import UserRole


class CurrentUser(BaseModel):
    """Lightweight representation of the authenticated caller, built from token claims.
    school_id is the tenant the session belongs to; None for platform admins without one.
    """

    id: str
    role: str
    school_id: Optional[int] = None
    email: Optional[str] = None


class TenantContext(BaseModel):
    """Resolved tenant scope for one request.

    all_schools is only ever True for admins that asked for the unscoped view.
    """

    school_id: Optional[int] = None
    all_schools: bool = False
    user: CurrentUser

    @property
    def is_admin(self) -> bool:
        return self.user.role == UserRole.ADMIN.value
