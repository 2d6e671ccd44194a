"""Fee structure schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from app.core.schemas import ApiResponse, CamelModel


# --- Requests ---
class FeeCategoryInput(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    frequency: str = Field(..., min_length=1, max_length=30, description="Monthly, Quarterly, Yearly, One Time")
    description: Optional[str] = None


class FeeStructureCreate(CamelModel):
    # Presence is checked by the service so the tenant/className/school checks keep their order.
    class_name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    categories: List[FeeCategoryInput] = Field(default_factory=list)
    total_annual_fee: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)


class FeeStructureUpdate(CamelModel):
    """Partial update. Only keys present in the body are applied.
    A categories array (even empty) replaces every existing category.
    """

    class_name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    categories: Optional[List[FeeCategoryInput]] = None
    total_annual_fee: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)


# --- Responses ---
class SchoolSummary(CamelModel):
    id: int
    school_name: str
    code: str


class FeeCategoryResponse(CamelModel):
    id: UUID
    structure_id: UUID
    name: str
    amount: Decimal
    frequency: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class FeeStructureResponse(CamelModel):
    id: UUID
    school_id: int
    class_name: str
    description: Optional[str] = None
    total_annual_fee: Decimal
    categories: List[FeeCategoryResponse]
    school: Optional[SchoolSummary] = None
    created_at: datetime
    updated_at: datetime


class FeeStructureListMeta(CamelModel):
    school_id: Optional[int] = None
    total_count: int
    user_role: str


class FeeStructureListResponse(ApiResponse[List[FeeStructureResponse]]):
    meta: FeeStructureListMeta
