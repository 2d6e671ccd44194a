from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from app.auth.schemas import CurrentUser
from app.core.config import settings
from app.core.enums import UserRole


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def _parse_school_id(value) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """Resolve the authenticated caller from the access token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise credentials_exception

    user_id = payload.get("sub") or payload.get("id")
    role_name = payload.get("role")
    if user_id is None or not role_name:
        raise credentials_exception

    role = str(role_name).strip().lower()
    school_id = _parse_school_id(payload.get("school_id"))
    # A school account is its own tenant.
    if school_id is None and role == UserRole.SCHOOL.value:
        school_id = _parse_school_id(user_id)

    return CurrentUser(
        id=str(user_id),
        role=role,
        school_id=school_id,
        email=payload.get("email"),
    )
