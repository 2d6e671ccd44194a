"""Teacher schemas."""

from datetime import date, datetime
from typing import Annotated, List, Optional

from pydantic import EmailStr, Field, field_validator

from app.core.enums import TeacherStatus
from app.core.schemas import CamelModel


class TeacherSection(CamelModel):
    """A class/section pair a teacher is assigned to. Serialized as {"class": ..., "section": ...}."""

    class_name: str = Field(..., alias="class", max_length=50)
    section: str = Field(..., max_length=50)


class TeacherCreate(CamelModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    phone: Optional[str] = Field(None, max_length=50)
    designation: Optional[str] = Field(None, max_length=100)
    subjects: List[Annotated[str, Field(max_length=100)]] = Field(default_factory=list)
    classes: Optional[str] = Field(None, max_length=255)
    sections: List[TeacherSection] = Field(default_factory=list)
    join_date: Optional[date] = None
    address: Optional[str] = None
    education: Optional[str] = Field(None, max_length=255)
    experience: Optional[str] = Field(None, max_length=100)
    profile_image: Optional[str] = Field(None, max_length=512)
    is_class_incharge: bool = False
    incharge_class: Optional[str] = Field(None, max_length=50)
    incharge_section: Optional[str] = Field(None, max_length=50)


class TeacherUpdate(CamelModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    designation: Optional[str] = Field(None, max_length=100)
    subjects: Optional[List[Annotated[str, Field(max_length=100)]]] = None
    classes: Optional[str] = Field(None, max_length=255)
    sections: Optional[List[TeacherSection]] = None
    join_date: Optional[date] = None
    address: Optional[str] = None
    education: Optional[str] = Field(None, max_length=255)
    experience: Optional[str] = Field(None, max_length=100)
    profile_image: Optional[str] = Field(None, max_length=512)
    is_class_incharge: Optional[bool] = None
    incharge_class: Optional[str] = Field(None, max_length=50)
    incharge_section: Optional[str] = Field(None, max_length=50)
    status: Optional[str] = Field(None, description="active, inactive")

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        value = str(v).strip().lower()
        if value not in {s.value for s in TeacherStatus}:
            raise ValueError("status must be active or inactive")
        return value


class TeacherResponse(CamelModel):
    id: int
    school_id: int
    full_name: str
    email: str
    username: str
    phone: Optional[str] = None
    designation: str
    subjects: List[str]
    classes: Optional[str] = None
    sections: List[TeacherSection]
    join_date: date
    address: Optional[str] = None
    education: Optional[str] = None
    experience: Optional[str] = None
    profile_image: Optional[str] = None
    is_class_incharge: bool
    incharge_class: Optional[str] = None
    incharge_section: Optional[str] = None
    status: str
    created_at: datetime
