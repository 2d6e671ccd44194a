from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from app.db.session import Base


class School(Base):
    """
    School (tenant) in the multi-tenant platform.

    - id: integer primary key. Every tenant-scoped table carries it as ``school_id``.
    - code: short public identifier shown in responses; never used as a foreign key.
    - status: ``active`` | ``inactive``. Inactive schools are read-only for fee setup.
    """

    __tablename__ = "schools"

    id = Column(Integer, primary_key=True, autoincrement=True)
    school_name = Column(String(255), nullable=False)
    code = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
