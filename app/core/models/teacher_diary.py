from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.db.session import Base
from app.db.types import JSONEncodedList


class TeacherDiary(Base):
    """
    Teacher's daily diary entry for one class, section and subject.

    - Only the authoring teacher may change or delete an entry.
    - is_public entries are visible to the school, other teachers, students and parents.
    """

    __tablename__ = "teacher_diary"

    id = Column(Integer, primary_key=True, autoincrement=True)
    school_id = Column(Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    date = Column(Date, nullable=False, index=True)
    class_name = Column(String(50), nullable=False)
    section = Column(String(20), nullable=False)
    subject = Column(String(100), nullable=False)
    period = Column(String(20), nullable=True)
    entry_type = Column(String(30), nullable=False, default="GENERAL")
    homework = Column(Text, nullable=True)
    class_summary = Column(Text, nullable=True)
    notices = Column(Text, nullable=True)
    remarks = Column(Text, nullable=True)
    is_public = Column(Boolean, nullable=False, default=True)
    priority = Column(String(20), nullable=False, default="NORMAL")
    attachments = Column(JSONEncodedList, nullable=False, default=list)
    image_urls = Column(JSONEncodedList, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    teacher = relationship("Teacher")
