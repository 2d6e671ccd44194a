"""
Activity logging for create/update actions. Only written in production and never
allowed to fail the request that triggered it.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.schemas import CurrentUser
from app.core.config import settings
from app.core.models import ActivityLog

logger = logging.getLogger(__name__)


async def log_activity(
    db: AsyncSession,
    action: str,
    entity_type: str,
    entity_id: str,
    *,
    school_id: Optional[int] = None,
    user: Optional[CurrentUser] = None,
    details: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> bool:
    """Append one activity row and commit it. Returns False when skipped or failed."""
    if not settings.is_production:
        return False
    try:
        entry = ActivityLog(
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id),
            user_id=user.id if user else None,
            user_role=user.role if user else None,
            school_id=school_id,
            details=details,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:512] or None,
            created_at=datetime.utcnow(),
        )
        db.add(entry)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to log %s activity for %s %s", action, entity_type, entity_id)
        return False
    return True
