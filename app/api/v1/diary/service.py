"""Teacher diary service: teachers keep daily class diaries; the school, students and parents read the public ones."""

import math
from datetime import date
from typing import Dict, List, Optional, Tuple

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.auth.schemas import CurrentUser, TenantContext
from app.auth.tenant import SCHOOL_CONTEXT_REQUIRED_MESSAGE
from app.core.enums import UserRole
from app.core.exceptions import ServiceError
from app.core.models import TeacherDiary

from .schemas import (
    ClassSections,
    DiaryEntryCreate,
    DiaryEntryPage,
    DiaryEntryResponse,
    DiaryEntryUpdate,
    DiaryStats,
    DiaryTeacher,
    Pagination,
    PriorityCount,
    TypeCount,
)

REQUIRED_FIELDS_MESSAGE = "Title, content, date, class name, section, and subject are required"
DUPLICATE_ENTRY_MESSAGE = "A diary entry already exists for this date, class, section, subject, and period"
RECENT_ENTRIES = 5


def _to_response(entry: TeacherDiary) -> DiaryEntryResponse:
    teacher = None
    if entry.teacher is not None:
        teacher = DiaryTeacher(
            id=entry.teacher.id,
            full_name=entry.teacher.full_name,
            email=entry.teacher.email,
            designation=entry.teacher.designation,
        )
    return DiaryEntryResponse(
        id=entry.id,
        school_id=entry.school_id,
        teacher_id=entry.teacher_id,
        title=entry.title,
        content=entry.content,
        date=entry.date,
        class_name=entry.class_name,
        section=entry.section,
        subject=entry.subject,
        period=entry.period,
        entry_type=entry.entry_type,
        homework=entry.homework,
        class_summary=entry.class_summary,
        notices=entry.notices,
        remarks=entry.remarks,
        is_public=entry.is_public,
        priority=entry.priority,
        attachments=list(entry.attachments or []),
        image_urls=list(entry.image_urls or []),
        teacher=teacher,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
    )


def _school_id(tenant: TenantContext) -> int:
    if tenant.school_id is None:
        raise ServiceError(SCHOOL_CONTEXT_REQUIRED_MESSAGE, status.HTTP_400_BAD_REQUEST)
    return tenant.school_id


def _teacher_id(user: CurrentUser) -> int:
    """Teacher sessions carry the teacher's row id as the subject."""
    try:
        return int(user.id)
    except (TypeError, ValueError):
        raise ServiceError("Invalid teacher account", status.HTTP_400_BAD_REQUEST)


def _entry_select():
    return select(TeacherDiary).options(selectinload(TeacherDiary.teacher))


def _date_range(stmt, start_date: Optional[date], end_date: Optional[date]):
    if start_date:
        stmt = stmt.where(TeacherDiary.date >= start_date)
    if end_date:
        stmt = stmt.where(TeacherDiary.date <= end_date)
    return stmt


async def _paginate(db: AsyncSession, stmt, page: int, limit: int) -> DiaryEntryPage:
    total = (await db.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()
    result = await db.execute(
        stmt.options(selectinload(TeacherDiary.teacher))
        .order_by(TeacherDiary.date.desc(), TeacherDiary.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    total_pages = math.ceil(total / limit) if total else 0
    return DiaryEntryPage(
        entries=[_to_response(e) for e in result.scalars().all()],
        pagination=Pagination(
            current_page=page,
            total_pages=total_pages,
            total_entries=total,
            limit=limit,
            has_next=page < total_pages,
            has_prev=page > 1,
        ),
    )


async def _ensure_not_duplicate(
    db: AsyncSession,
    school_id: int,
    teacher_id: int,
    key: Tuple[date, str, str, str, Optional[str]],
    exclude_id: Optional[int] = None,
) -> None:
    entry_date, class_name, section, subject, period = key
    stmt = select(TeacherDiary.id).where(
        TeacherDiary.school_id == school_id,
        TeacherDiary.teacher_id == teacher_id,
        TeacherDiary.date == entry_date,
        TeacherDiary.class_name == class_name,
        TeacherDiary.section == section,
        TeacherDiary.subject == subject,
        TeacherDiary.period.is_(None) if period is None else TeacherDiary.period == period,
    )
    if exclude_id is not None:
        stmt = stmt.where(TeacherDiary.id != exclude_id)
    result = await db.execute(stmt.limit(1))
    if result.scalar_one_or_none() is not None:
        raise ServiceError(DUPLICATE_ENTRY_MESSAGE, status.HTTP_409_CONFLICT)


async def _get_own_entry(db: AsyncSession, tenant: TenantContext, entry_id: int) -> Optional[TeacherDiary]:
    result = await db.execute(
        _entry_select()
        .where(
            TeacherDiary.id == entry_id,
            TeacherDiary.school_id == _school_id(tenant),
            TeacherDiary.teacher_id == _teacher_id(tenant.user),
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


# --- Reads ---
async def list_teacher_entries(
    db: AsyncSession,
    tenant: TenantContext,
    page: int = 1,
    limit: int = 10,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    class_name: Optional[str] = None,
    section: Optional[str] = None,
    subject: Optional[str] = None,
    entry_type: Optional[str] = None,
    priority: Optional[str] = None,
) -> DiaryEntryPage:
    """The calling teacher's own entries, public or not."""
    stmt = select(TeacherDiary).where(
        TeacherDiary.school_id == _school_id(tenant),
        TeacherDiary.teacher_id == _teacher_id(tenant.user),
    )
    stmt = _date_range(stmt, start_date, end_date)
    if class_name:
        stmt = stmt.where(TeacherDiary.class_name == class_name)
    if section:
        stmt = stmt.where(TeacherDiary.section == section)
    if subject:
        stmt = stmt.where(TeacherDiary.subject == subject)
    if entry_type:
        stmt = stmt.where(TeacherDiary.entry_type == entry_type.upper())
    if priority:
        stmt = stmt.where(TeacherDiary.priority == priority.upper())
    return await _paginate(db, stmt, page, limit)


async def list_entries_for_view(
    db: AsyncSession,
    tenant: TenantContext,
    page: int = 1,
    limit: int = 10,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    class_name: Optional[str] = None,
    section: Optional[str] = None,
    subject: Optional[str] = None,
    teacher_id: Optional[int] = None,
) -> DiaryEntryPage:
    """
    Public entries of the school.

    Students and parents must name their class and section and only see that one.
    School staff may filter by class, section and teacher.
    """
    stmt = select(TeacherDiary).where(
        TeacherDiary.school_id == _school_id(tenant),
        TeacherDiary.is_public.is_(True),
    )
    if tenant.user.role in (UserRole.STUDENT.value, UserRole.PARENT.value):
        if not class_name or not section:
            raise ServiceError(
                "Class and section are required for student/parent access",
                status.HTTP_400_BAD_REQUEST,
            )
        stmt = stmt.where(TeacherDiary.class_name == class_name, TeacherDiary.section == section)
    else:
        if class_name:
            stmt = stmt.where(TeacherDiary.class_name == class_name)
        if section:
            stmt = stmt.where(TeacherDiary.section == section)
        if teacher_id is not None:
            stmt = stmt.where(TeacherDiary.teacher_id == teacher_id)
    stmt = _date_range(stmt, start_date, end_date)
    if subject:
        stmt = stmt.where(TeacherDiary.subject == subject)
    return await _paginate(db, stmt, page, limit)


async def get_entry(db: AsyncSession, tenant: TenantContext, entry_id: int) -> Optional[DiaryEntryResponse]:
    """Teachers may open their own entries; everyone else only public ones."""
    stmt = _entry_select().where(TeacherDiary.id == entry_id, TeacherDiary.school_id == _school_id(tenant))
    if tenant.user.role == UserRole.TEACHER.value:
        stmt = stmt.where(TeacherDiary.teacher_id == _teacher_id(tenant.user))
    else:
        stmt = stmt.where(TeacherDiary.is_public.is_(True))
    result = await db.execute(stmt)
    entry = result.scalar_one_or_none()
    return _to_response(entry) if entry else None


async def get_stats(
    db: AsyncSession,
    tenant: TenantContext,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    teacher_id: Optional[int] = None,
) -> DiaryStats:
    conditions = [TeacherDiary.school_id == _school_id(tenant)]
    if tenant.user.role == UserRole.TEACHER.value:
        conditions.append(TeacherDiary.teacher_id == _teacher_id(tenant.user))
    elif teacher_id is not None:
        conditions.append(TeacherDiary.teacher_id == teacher_id)
    if start_date:
        conditions.append(TeacherDiary.date >= start_date)
    if end_date:
        conditions.append(TeacherDiary.date <= end_date)

    total = (await db.execute(select(func.count(TeacherDiary.id)).where(*conditions))).scalar_one()
    by_type = await db.execute(
        select(TeacherDiary.entry_type, func.count(TeacherDiary.id))
        .where(*conditions)
        .group_by(TeacherDiary.entry_type)
        .order_by(TeacherDiary.entry_type)
    )
    by_priority = await db.execute(
        select(TeacherDiary.priority, func.count(TeacherDiary.id))
        .where(*conditions)
        .group_by(TeacherDiary.priority)
        .order_by(TeacherDiary.priority)
    )
    recent = await db.execute(
        _entry_select()
        .where(*conditions)
        .order_by(TeacherDiary.created_at.desc(), TeacherDiary.id.desc())
        .limit(RECENT_ENTRIES)
    )
    return DiaryStats(
        total_entries=total,
        entries_by_type=[TypeCount(type=t, count=c) for t, c in by_type.all()],
        entries_by_priority=[PriorityCount(priority=p, count=c) for p, c in by_priority.all()],
        recent_entries=[_to_response(e) for e in recent.scalars().all()],
    )


async def list_classes(db: AsyncSession, tenant: TenantContext) -> List[ClassSections]:
    """Class/section pairs that have diary entries, sections sorted within each class."""
    result = await db.execute(
        select(TeacherDiary.class_name, TeacherDiary.section)
        .distinct()
        .where(TeacherDiary.school_id == _school_id(tenant))
    )
    grouped: Dict[str, set] = {}
    for class_name, section in result.all():
        grouped.setdefault(class_name, set()).add(section)
    return [ClassSections(class_name=name, sections=sorted(grouped[name])) for name in sorted(grouped)]


# --- Writes ---
async def create_entry(db: AsyncSession, tenant: TenantContext, payload: DiaryEntryCreate) -> DiaryEntryResponse:
    school_id = _school_id(tenant)
    teacher_id = _teacher_id(tenant.user)

    title = (payload.title or "").strip()
    content = (payload.content or "").strip()
    class_name = (payload.class_name or "").strip()
    section = (payload.section or "").strip()
    subject = (payload.subject or "").strip()
    if not (title and content and payload.date and class_name and section and subject):
        raise ServiceError(REQUIRED_FIELDS_MESSAGE, status.HTTP_400_BAD_REQUEST)
    period = (payload.period or "").strip() or None

    await _ensure_not_duplicate(db, school_id, teacher_id, (payload.date, class_name, section, subject, period))

    entry = TeacherDiary(
        school_id=school_id,
        teacher_id=teacher_id,
        title=title,
        content=content,
        date=payload.date,
        class_name=class_name,
        section=section,
        subject=subject,
        period=period,
        entry_type=payload.entry_type.value,
        homework=payload.homework,
        class_summary=payload.class_summary,
        notices=payload.notices,
        remarks=payload.remarks,
        is_public=payload.is_public,
        priority=payload.priority.value,
        attachments=list(payload.attachments),
        image_urls=list(payload.image_urls),
    )
    db.add(entry)
    await db.commit()
    result = await db.execute(
        _entry_select().where(TeacherDiary.id == entry.id).execution_options(populate_existing=True)
    )
    return _to_response(result.scalar_one())


async def update_entry(
    db: AsyncSession,
    tenant: TenantContext,
    entry_id: int,
    payload: DiaryEntryUpdate,
) -> Optional[DiaryEntryResponse]:
    """Only the author may update. Returns None when the entry is not theirs."""
    entry = await _get_own_entry(db, tenant, entry_id)
    if not entry:
        return None

    data = payload.model_dump(exclude_unset=True)
    # Non-nullable columns: an explicit null means "leave unchanged".
    for key in ("title", "content", "date", "class_name", "section", "subject",
                "entry_type", "is_public", "priority", "attachments", "image_urls"):
        if key in data and data[key] is None:
            data.pop(key)
    for key in ("entry_type", "priority"):
        if key in data:
            data[key] = data[key].value
    if "period" in data:
        data["period"] = (data["period"] or "").strip() or None

    key = (
        data.get("date", entry.date),
        data.get("class_name", entry.class_name),
        data.get("section", entry.section),
        data.get("subject", entry.subject),
        data.get("period", entry.period),
    )
    await _ensure_not_duplicate(db, entry.school_id, entry.teacher_id, key, exclude_id=entry.id)

    for field, value in data.items():
        setattr(entry, field, value)
    await db.commit()
    entry = await _get_own_entry(db, tenant, entry_id)
    return _to_response(entry)


async def delete_entry(db: AsyncSession, tenant: TenantContext, entry_id: int) -> bool:
    entry = await _get_own_entry(db, tenant, entry_id)
    if not entry:
        return False
    await db.delete(entry)
    await db.commit()
    return True
