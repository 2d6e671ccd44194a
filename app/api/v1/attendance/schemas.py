"""Student attendance schemas."""

import datetime as dt
from typing import List, Optional

from pydantic import Field

from app.core.enums import AttendanceStatus
from app.core.schemas import CamelModel


# --- Requests ---
class AttendanceMarkItem(CamelModel):
    student_id: int = Field(..., gt=0)
    status: AttendanceStatus
    notes: Optional[str] = None


class AttendanceMark(CamelModel):
    """One class (and optionally section) on one day. Replaces whatever was marked before."""

    date: Optional[dt.date] = None
    class_name: Optional[str] = Field(None, max_length=50)
    section: Optional[str] = Field(None, max_length=20)
    teacher_id: Optional[int] = Field(None, description="Ignored for teachers, who always mark as themselves")
    attendance: List[AttendanceMarkItem] = Field(default_factory=list)


# --- Responses ---
class StudentBrief(CamelModel):
    id: int
    name: str
    roll_number: Optional[str] = None
    admission_no: str


class ClassStudent(CamelModel):
    id: int
    name: str
    roll_number: Optional[str] = None
    admission_no: str
    class_name: str
    section: Optional[str] = None


class ClassSections(CamelModel):
    class_name: str
    sections: List[str]


class AttendanceMarkResult(CamelModel):
    date: dt.date
    class_name: str
    section: Optional[str] = None
    created_count: int


class AttendanceRecordResponse(CamelModel):
    id: int
    date: dt.date
    status: str
    notes: Optional[str] = None
    student: StudentBrief


class StudentAttendanceRecord(CamelModel):
    id: int
    date: dt.date
    status: str
    notes: Optional[str] = None
    class_name: str
    section: Optional[str] = None
    teacher_id: Optional[int] = None


class StudentAttendanceStatistics(CamelModel):
    total_days: int
    present_days: int
    absent_days: int
    late_days: int
    excused_days: int
    attendance_percentage: float


class StudentAttendanceSummary(CamelModel):
    records: List[StudentAttendanceRecord]
    statistics: StudentAttendanceStatistics


class DailyAttendanceStats(CamelModel):
    date: dt.date
    total: int
    present: int
    absent: int
    late: int
    excused: int


class OverallAttendanceStats(CamelModel):
    total_records: int
    total_present: int
    total_absent: int
    total_late: int
    total_excused: int
    overall_attendance_rate: float


class AttendanceStats(CamelModel):
    overall_stats: OverallAttendanceStats
    daily_stats: List[DailyAttendanceStats]
