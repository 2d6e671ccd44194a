"""Teacher service: tenant-scoped teacher directory."""

from datetime import date
from typing import List, Optional

from fastapi import status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.schemas import TenantContext
from app.auth.security import hash_password
from app.auth.tenant import SCHOOL_CONTEXT_REQUIRED_MESSAGE
from app.core.enums import TeacherStatus
from app.core.exceptions import ServiceError
from app.core.models import School, Teacher

from .schemas import TeacherCreate, TeacherResponse, TeacherSection, TeacherUpdate

DEFAULT_DESIGNATION = "Teacher"


def _sections_from_db(raw: list) -> List[TeacherSection]:
    return [TeacherSection.model_validate(item) for item in raw if isinstance(item, dict)]


def _sections_to_db(sections: List[TeacherSection]) -> list:
    return [s.model_dump(by_alias=True) for s in sections]


def _to_response(t: Teacher) -> TeacherResponse:
    return TeacherResponse(
        id=t.id,
        school_id=t.school_id,
        full_name=t.full_name,
        email=t.email,
        username=t.username,
        phone=t.phone,
        designation=t.designation or DEFAULT_DESIGNATION,
        subjects=list(t.subjects or []),
        classes=t.classes,
        sections=_sections_from_db(t.sections or []),
        join_date=t.join_date,
        address=t.address,
        education=t.education,
        experience=t.experience,
        profile_image=t.profile_image,
        is_class_incharge=t.is_class_incharge,
        incharge_class=t.incharge_class,
        incharge_section=t.incharge_section,
        status=t.status,
        created_at=t.created_at,
    )


def _scoped(stmt, tenant: TenantContext):
    if tenant.is_admin and (tenant.all_schools or tenant.school_id is None):
        return stmt
    return stmt.where(Teacher.school_id == tenant.school_id)


async def _get_teacher_row(
    db: AsyncSession,
    tenant: TenantContext,
    teacher_id: int,
) -> Optional[Teacher]:
    stmt = select(Teacher).where(Teacher.id == teacher_id)
    if not tenant.is_admin:
        stmt = stmt.where(Teacher.school_id == tenant.school_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def _ensure_incharge_slot_free(
    db: AsyncSession,
    school_id: int,
    incharge_class: str,
    incharge_section: str,
    exclude_teacher_id: Optional[int] = None,
) -> None:
    stmt = select(Teacher).where(
        Teacher.school_id == school_id,
        Teacher.is_class_incharge.is_(True),
        Teacher.incharge_class == incharge_class,
        Teacher.incharge_section == incharge_section,
    )
    if exclude_teacher_id is not None:
        stmt = stmt.where(Teacher.id != exclude_teacher_id)
    result = await db.execute(stmt.limit(1))
    holder = result.scalar_one_or_none()
    if holder is not None:
        raise ServiceError(
            f"{holder.full_name} is already incharge of Class {incharge_class} Section {incharge_section}",
            status.HTTP_400_BAD_REQUEST,
        )


async def list_teachers(
    db: AsyncSession,
    tenant: TenantContext,
    search: Optional[str] = None,
    status_filter: Optional[str] = None,
    class_filter: Optional[str] = None,
) -> List[TeacherResponse]:
    stmt = _scoped(select(Teacher), tenant)
    if status_filter:
        stmt = stmt.where(Teacher.status == status_filter.strip().lower())
    if search and search.strip():
        term = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                Teacher.full_name.ilike(term),
                Teacher.email.ilike(term),
                Teacher.designation.ilike(term),
            )
        )
    stmt = stmt.order_by(Teacher.created_at.desc(), Teacher.id.desc())
    result = await db.execute(stmt)
    teachers = [_to_response(t) for t in result.scalars().all()]

    # sections live in a JSON column, so the class filter runs here rather than in SQL
    if class_filter and class_filter != "all":
        teachers = [t for t in teachers if any(s.class_name == class_filter for s in t.sections)]
    return teachers


async def get_teacher(
    db: AsyncSession,
    tenant: TenantContext,
    teacher_id: int,
) -> Optional[TeacherResponse]:
    teacher = await _get_teacher_row(db, tenant, teacher_id)
    return _to_response(teacher) if teacher else None


async def create_teacher(
    db: AsyncSession,
    tenant: TenantContext,
    payload: TeacherCreate,
) -> TeacherResponse:
    school_id = tenant.school_id
    if school_id is None:
        raise ServiceError(SCHOOL_CONTEXT_REQUIRED_MESSAGE, status.HTTP_400_BAD_REQUEST)
    school = await db.get(School, school_id)
    if not school:
        raise ServiceError("School not found", status.HTTP_404_NOT_FOUND)

    email = payload.email.strip().lower()
    existing = await db.execute(select(Teacher.id).where(Teacher.email == email))
    if existing.scalar_one_or_none() is not None:
        raise ServiceError("Teacher with this email already exists", status.HTTP_400_BAD_REQUEST)

    if payload.is_class_incharge and payload.incharge_class and payload.incharge_section:
        await _ensure_incharge_slot_free(db, school_id, payload.incharge_class, payload.incharge_section)

    teacher = Teacher(
        school_id=school_id,
        full_name=payload.full_name.strip(),
        email=email,
        password_hash=hash_password(payload.password),
        username=email.split("@")[0],
        phone=payload.phone,
        designation=(payload.designation or "").strip() or DEFAULT_DESIGNATION,
        subjects=list(payload.subjects),
        classes=payload.classes,
        sections=_sections_to_db(payload.sections),
        join_date=payload.join_date or date.today(),
        address=payload.address,
        education=payload.education,
        experience=payload.experience,
        profile_image=payload.profile_image,
        is_class_incharge=payload.is_class_incharge,
        incharge_class=payload.incharge_class if payload.is_class_incharge else None,
        incharge_section=payload.incharge_section if payload.is_class_incharge else None,
        status=TeacherStatus.ACTIVE.value,
    )
    try:
        db.add(teacher)
        await db.commit()
        await db.refresh(teacher)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Teacher with this email already exists", status.HTTP_400_BAD_REQUEST)
    return _to_response(teacher)


async def update_teacher(
    db: AsyncSession,
    tenant: TenantContext,
    teacher_id: int,
    payload: TeacherUpdate,
) -> Optional[TeacherResponse]:
    teacher = await _get_teacher_row(db, tenant, teacher_id)
    if not teacher:
        return None

    data = payload.model_dump(exclude_unset=True)

    if payload.email is not None:
        email = payload.email.strip().lower()
        if email != teacher.email:
            taken = await db.execute(
                select(Teacher.id).where(Teacher.email == email, Teacher.id != teacher.id)
            )
            if taken.scalar_one_or_none() is not None:
                raise ServiceError("Email is already in use", status.HTTP_400_BAD_REQUEST)
        data["email"] = email

    # Non-nullable columns: an explicit null means "leave unchanged".
    for key in ("full_name", "email", "join_date", "status", "is_class_incharge"):
        if key in data and data[key] is None:
            data.pop(key)

    is_incharge = data.get("is_class_incharge", teacher.is_class_incharge)
    incharge_class = data.get("incharge_class", teacher.incharge_class)
    incharge_section = data.get("incharge_section", teacher.incharge_section)
    if is_incharge and incharge_class and incharge_section:
        await _ensure_incharge_slot_free(
            db, teacher.school_id, incharge_class, incharge_section, exclude_teacher_id=teacher.id
        )

    if "sections" in data:
        data["sections"] = _sections_to_db(payload.sections or [])
    if "subjects" in data:
        data["subjects"] = list(payload.subjects or [])
    if "status" in data and data["status"]:
        data["status"] = data["status"].strip().lower()
    if "designation" in data:
        data["designation"] = (data["designation"] or "").strip() or DEFAULT_DESIGNATION

    for key, value in data.items():
        setattr(teacher, key, value)
    teacher.is_class_incharge = bool(is_incharge)
    teacher.incharge_class = incharge_class if is_incharge else None
    teacher.incharge_section = incharge_section if is_incharge else None

    try:
        await db.commit()
        await db.refresh(teacher)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Email is already in use", status.HTTP_400_BAD_REQUEST)
    return _to_response(teacher)


async def delete_teacher(
    db: AsyncSession,
    tenant: TenantContext,
    teacher_id: int,
) -> bool:
    teacher = await _get_teacher_row(db, tenant, teacher_id)
    if not teacher:
        return False
    await db.delete(teacher)
    await db.commit()
    return True
