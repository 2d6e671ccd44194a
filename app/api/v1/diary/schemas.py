"""Teacher diary schemas."""

import datetime as dt
from typing import Annotated, List, Optional

from pydantic import Field

from app.core.enums import DiaryEntryType, DiaryPriority
from app.core.schemas import CamelModel

Url = Annotated[str, Field(max_length=512)]


# --- Requests ---
class DiaryEntryCreate(CamelModel):
    # Presence of the required six is checked by the service so one message covers them all.
    title: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = None
    date: Optional[dt.date] = None
    class_name: Optional[str] = Field(None, max_length=50)
    section: Optional[str] = Field(None, max_length=20)
    subject: Optional[str] = Field(None, max_length=100)
    period: Optional[str] = Field(None, max_length=20)
    entry_type: DiaryEntryType = DiaryEntryType.GENERAL
    homework: Optional[str] = None
    class_summary: Optional[str] = None
    notices: Optional[str] = None
    remarks: Optional[str] = None
    is_public: bool = True
    priority: DiaryPriority = DiaryPriority.NORMAL
    attachments: List[Url] = Field(default_factory=list)
    image_urls: List[Url] = Field(default_factory=list)


class DiaryEntryUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    date: Optional[dt.date] = None
    class_name: Optional[str] = Field(None, min_length=1, max_length=50)
    section: Optional[str] = Field(None, min_length=1, max_length=20)
    subject: Optional[str] = Field(None, min_length=1, max_length=100)
    period: Optional[str] = Field(None, max_length=20)
    entry_type: Optional[DiaryEntryType] = None
    homework: Optional[str] = None
    class_summary: Optional[str] = None
    notices: Optional[str] = None
    remarks: Optional[str] = None
    is_public: Optional[bool] = None
    priority: Optional[DiaryPriority] = None
    attachments: Optional[List[Url]] = None
    image_urls: Optional[List[Url]] = None


# --- Responses ---
class DiaryTeacher(CamelModel):
    id: int
    full_name: str
    email: str
    designation: Optional[str] = None


class DiaryEntryResponse(CamelModel):
    id: int
    school_id: int
    teacher_id: int
    title: str
    content: str
    date: dt.date
    class_name: str
    section: str
    subject: str
    period: Optional[str] = None
    entry_type: str
    homework: Optional[str] = None
    class_summary: Optional[str] = None
    notices: Optional[str] = None
    remarks: Optional[str] = None
    is_public: bool
    priority: str
    attachments: List[str]
    image_urls: List[str]
    teacher: Optional[DiaryTeacher] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_entries: int
    limit: int
    has_next: bool
    has_prev: bool


class DiaryEntryPage(CamelModel):
    entries: List[DiaryEntryResponse]
    pagination: Pagination


class TypeCount(CamelModel):
    type: str
    count: int


class PriorityCount(CamelModel):
    priority: str
    count: int


class DiaryStats(CamelModel):
    total_entries: int
    entries_by_type: List[TypeCount]
    entries_by_priority: List[PriorityCount]
    recent_entries: List[DiaryEntryResponse]


class ClassSections(CamelModel):
    class_name: str
    sections: List[str]
