"""Fee structure service: tenant-scoped CRUD with transactional category writes."""

import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.auth.schemas import TenantContext
from app.auth.tenant import SCHOOL_CONTEXT_REQUIRED_MESSAGE
from app.core.activity_service import log_activity
from app.core.enums import ActivityAction, SchoolStatus
from app.core.exceptions import ServiceError
from app.core.models import FeeCategory, FeeStructure, School
from app.db.errors import is_unique_violation

from .schemas import (
    FeeCategoryInput,
    FeeCategoryResponse,
    FeeStructureCreate,
    FeeStructureResponse,
    FeeStructureUpdate,
    SchoolSummary,
)

logger = logging.getLogger(__name__)

# Offered for every school even before anyone has used them.
DEFAULT_FEE_CATEGORIES: List[str] = [
    "Registration Fee",
    "Admission Fee",
    "Tuition Fee",
    "Monthly Fee",
    "Annual Charges",
    "Development Fund",
    "Computer Lab Fee",
    "Transport Fee",
    "Library Fee",
    "Laboratory Fee",
    "Sports Fee",
    "Readmission Charge",
    "PTA Fee",
    "Smart Class Fee",
    "Security and Safety Fee",
    "Activities Fee",
    "Examination Fee",
    "Maintenance Fee",
]
DEFAULT_CATEGORY_FREQUENCY = "Monthly"
PLACEHOLDER_CLASS_NAME = "Sample Class"
PLACEHOLDER_DESCRIPTION = "Temporary structure for initial categories"

ENTITY_TYPE = "FEE_STRUCTURE"
DUPLICATE_CLASS_CONSTRAINT = "uq_fee_structure_school_class"


def _to_decimal(val) -> Decimal:
    if val is None:
        return Decimal("0")
    return val if isinstance(val, Decimal) else Decimal(str(val))


def _category_to_response(cat: FeeCategory) -> FeeCategoryResponse:
    return FeeCategoryResponse(
        id=cat.id,
        structure_id=cat.structure_id,
        name=cat.name,
        amount=_to_decimal(cat.amount),
        frequency=cat.frequency,
        description=cat.description,
        created_at=cat.created_at,
        updated_at=cat.updated_at,
    )


def _structure_to_response(fs: FeeStructure) -> FeeStructureResponse:
    school = None
    if fs.school is not None:
        school = SchoolSummary(id=fs.school.id, school_name=fs.school.school_name, code=fs.school.code)
    return FeeStructureResponse(
        id=fs.id,
        school_id=fs.school_id,
        class_name=fs.class_name,
        description=fs.description,
        total_annual_fee=_to_decimal(fs.total_annual_fee),
        categories=[_category_to_response(c) for c in fs.categories],
        school=school,
        created_at=fs.created_at,
        updated_at=fs.updated_at,
    )


def _new_category(structure_id: UUID, item: FeeCategoryInput) -> FeeCategory:
    return FeeCategory(
        structure_id=structure_id,
        name=item.name.strip(),
        amount=item.amount,
        frequency=item.frequency.strip(),
        description=item.description,
    )


def _duplicate_class_error(class_name: str) -> ServiceError:
    return ServiceError(
        f"Fee structure for class '{class_name}' already exists in your school",
        status.HTTP_400_BAD_REQUEST,
    )


def _structure_select():
    return select(FeeStructure).options(
        selectinload(FeeStructure.categories),
        selectinload(FeeStructure.school),
    )


async def _get_scoped_structure(
    db: AsyncSession,
    structure_id: UUID,
    tenant: Optional[TenantContext] = None,
) -> Optional[FeeStructure]:
    """Fetch one structure with categories and school. Non-admins only see their own school."""
    stmt = (
        _structure_select()
        .where(FeeStructure.id == structure_id)
        .execution_options(populate_existing=True)
    )
    if tenant is not None and not tenant.is_admin:
        stmt = stmt.where(FeeStructure.school_id == tenant.school_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


# --- Seeding ---
async def seed_fee_categories_for_school(db: AsyncSession, school_id: int) -> int:
    """
    Give a school the default category catalog on first access.

    Does nothing when the school already has any category. Failures are logged and
    swallowed; the caller's read must not fail because of seeding. Returns the number
    of categories created.
    """
    existing = await db.execute(
        select(FeeCategory.name)
        .distinct()
        .join(FeeStructure, FeeCategory.structure_id == FeeStructure.id)
        .where(FeeStructure.school_id == school_id)
    )
    existing_names = existing.scalars().all()
    if existing_names:
        logger.debug("Found %d existing fee categories for school %s", len(existing_names), school_id)
        return 0

    logger.info("No fee categories found for school %s, seeding default categories", school_id)
    try:
        first = await db.execute(
            select(FeeStructure.id)
            .where(FeeStructure.school_id == school_id)
            .order_by(FeeStructure.created_at)
            .limit(1)
        )
        structure_id = first.scalar_one_or_none()
        if structure_id is None:
            placeholder = FeeStructure(
                school_id=school_id,
                class_name=PLACEHOLDER_CLASS_NAME,
                description=PLACEHOLDER_DESCRIPTION,
                total_annual_fee=Decimal("0"),
            )
            db.add(placeholder)
            await db.flush()
            structure_id = placeholder.id

        for name in DEFAULT_FEE_CATEGORIES:
            db.add(
                FeeCategory(
                    structure_id=structure_id,
                    name=name,
                    amount=Decimal("0"),
                    frequency=DEFAULT_CATEGORY_FREQUENCY,
                )
            )
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Error seeding fee categories for school %s", school_id)
        return 0

    logger.info("Seeded %d default fee categories for school %s", len(DEFAULT_FEE_CATEGORIES), school_id)
    return len(DEFAULT_FEE_CATEGORIES)


# --- Reads ---
async def list_fee_structures(
    db: AsyncSession,
    tenant: TenantContext,
) -> List[FeeStructureResponse]:
    stmt = _structure_select().order_by(FeeStructure.class_name)
    if not tenant.all_schools:
        stmt = stmt.where(FeeStructure.school_id == tenant.school_id)
    result = await db.execute(stmt)
    structures = result.scalars().all()
    responses = [_structure_to_response(fs) for fs in structures]

    if not structures and not tenant.all_schools:
        await seed_fee_categories_for_school(db, tenant.school_id)

    return responses


async def get_fee_structure(
    db: AsyncSession,
    tenant: TenantContext,
    structure_id: UUID,
) -> Optional[FeeStructureResponse]:
    fs = await _get_scoped_structure(db, structure_id, tenant)
    return _structure_to_response(fs) if fs else None


async def list_fee_category_names(db: AsyncSession) -> List[str]:
    """Every category name used by any school, plus the default catalog, sorted."""
    result = await db.execute(select(FeeCategory.name).distinct())
    names = {name for name in result.scalars().all() if name}
    names.update(DEFAULT_FEE_CATEGORIES)
    return sorted(names)


# --- Writes ---
async def create_fee_structure(
    db: AsyncSession,
    tenant: TenantContext,
    payload: FeeStructureCreate,
    *,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> FeeStructureResponse:
    school_id = tenant.school_id
    if school_id is None:
        raise ServiceError(SCHOOL_CONTEXT_REQUIRED_MESSAGE, status.HTTP_400_BAD_REQUEST)

    class_name = (payload.class_name or "").strip()
    if not class_name:
        raise ServiceError("Class name is required", status.HTTP_400_BAD_REQUEST)

    school = await db.get(School, school_id)
    if not school:
        raise ServiceError("School not found", status.HTTP_404_NOT_FOUND)
    if school.status == SchoolStatus.INACTIVE.value:
        raise ServiceError("School is inactive. Contact administrator.", status.HTTP_403_FORBIDDEN)

    existing = await db.execute(
        select(FeeStructure.id).where(
            FeeStructure.school_id == school_id,
            FeeStructure.class_name == class_name,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise _duplicate_class_error(class_name)

    # Structure and categories commit together or not at all.
    try:
        fs = FeeStructure(
            school_id=school_id,
            class_name=class_name,
            description=payload.description,
            total_annual_fee=payload.total_annual_fee,
        )
        db.add(fs)
        await db.flush()
        for item in payload.categories:
            db.add(_new_category(fs.id, item))
        await db.flush()
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if is_unique_violation(e, FeeStructure.__table__, DUPLICATE_CLASS_CONSTRAINT):
            raise _duplicate_class_error(class_name)
        raise
    except Exception:
        await db.rollback()
        raise

    created = await _get_scoped_structure(db, fs.id)
    response = _structure_to_response(created)
    await log_activity(
        db,
        ActivityAction.FEE_STRUCTURE_CREATED.value,
        ENTITY_TYPE,
        str(response.id),
        school_id=school_id,
        user=tenant.user,
        details=f"Fee structure created for class {class_name} with {len(payload.categories)} categories",
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return response


async def update_fee_structure(
    db: AsyncSession,
    tenant: TenantContext,
    structure_id: UUID,
    payload: FeeStructureUpdate,
    *,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Optional[FeeStructureResponse]:
    fs = await _get_scoped_structure(db, structure_id, tenant)
    if not fs:
        return None

    provided = payload.model_fields_set
    new_class_name = (payload.class_name or "").strip()
    try:
        if new_class_name:
            fs.class_name = new_class_name
        if "description" in provided:
            fs.description = payload.description
        if payload.total_annual_fee is not None:
            fs.total_annual_fee = payload.total_annual_fee
        if payload.categories is not None:
            # Full replace; delete-orphan removes the previous rows.
            fs.categories = [_new_category(fs.id, item) for item in payload.categories]
        await db.flush()
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if new_class_name and is_unique_violation(e, FeeStructure.__table__, DUPLICATE_CLASS_CONSTRAINT):
            raise _duplicate_class_error(new_class_name)
        raise
    except Exception:
        await db.rollback()
        raise

    updated = await _get_scoped_structure(db, structure_id)
    response = _structure_to_response(updated)
    await log_activity(
        db,
        ActivityAction.FEE_STRUCTURE_UPDATED.value,
        ENTITY_TYPE,
        str(response.id),
        school_id=response.school_id,
        user=tenant.user,
        details=f"Fee structure updated for class {response.class_name}",
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return response


async def delete_fee_structure(
    db: AsyncSession,
    tenant: TenantContext,
    structure_id: UUID,
) -> bool:
    # TODO: decide with product whether deletes should write an activity row like create/update.
    stmt = select(FeeStructure.id).where(FeeStructure.id == structure_id)
    if not tenant.is_admin:
        stmt = stmt.where(FeeStructure.school_id == tenant.school_id)
    result = await db.execute(stmt)
    if result.scalar_one_or_none() is None:
        return False
    # Categories go with it through ON DELETE CASCADE.
    await db.execute(delete(FeeStructure).where(FeeStructure.id == structure_id))
    await db.commit()
    return True
