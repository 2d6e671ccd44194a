from datetime import date, datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.db.session import Base
from app.db.types import JSONEncodedList


class Teacher(Base):
    """Teacher belonging to one school. Email is unique across the platform."""

    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    school_id = Column(Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    username = Column(String(100), nullable=False)
    phone = Column(String(50), nullable=True)
    designation = Column(String(100), nullable=False, default="Teacher")
    # ["Mathematics", "Physics"]
    subjects = Column(JSONEncodedList, nullable=False, default=list)
    classes = Column(String(255), nullable=True)
    # [{"class": "5", "section": "A"}]
    sections = Column(JSONEncodedList, nullable=False, default=list)
    join_date = Column(Date, nullable=False, default=date.today)
    address = Column(Text, nullable=True)
    education = Column(String(255), nullable=True)
    experience = Column(String(100), nullable=True)
    profile_image = Column(String(512), nullable=True)
    is_class_incharge = Column(Boolean, nullable=False, default=False)
    incharge_class = Column(String(50), nullable=True)
    incharge_section = Column(String(50), nullable=True)
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    school = relationship("School")
