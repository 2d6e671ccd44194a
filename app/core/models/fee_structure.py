"""Fee structure per class per school, with its fee category line items."""

import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.db.session import Base


class FeeStructure(Base):
    """Named tuition plan for one class within one school. At most one per (school, class)."""

    __tablename__ = "fee_structures"
    __table_args__ = (
        UniqueConstraint("school_id", "class_name", name="uq_fee_structure_school_class"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    class_name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    total_annual_fee = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    school = relationship("School")
    # Deleting a structure removes its categories through ON DELETE CASCADE.
    categories = relationship(
        "FeeCategory",
        back_populates="structure",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="FeeCategory.created_at",
    )


class FeeCategory(Base):
    """Line item (Tuition Fee, Transport Fee, ...) owned by exactly one fee structure."""

    __tablename__ = "fee_categories"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="chk_fee_category_amount"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    structure_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("fee_structures.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(100), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False, default=0)
    frequency = Column(String(30), nullable=False)  # Monthly, Quarterly, Yearly, One Time ...
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    structure = relationship("FeeStructure", back_populates="categories")
