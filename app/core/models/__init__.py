from app.core.models.school import School
from app.core.models.fee_structure import FeeCategory, FeeStructure
from app.core.models.activity_log import ActivityLog
from app.core.models.teacher import Teacher
from app.core.models.student import Student
from app.core.models.transport import Bus, Driver, Maintenance, Route, StudentTransport, Trip
from app.core.models.attendance import Attendance
from app.core.models.teacher_diary import TeacherDiary

__all__ = [
    "School",
    "FeeStructure",
    "FeeCategory",
    "ActivityLog",
    "Teacher",
    "Student",
    "Driver",
    "Bus",
    "Route",
    "Trip",
    "Maintenance",
    "StudentTransport",
    "Attendance",
    "TeacherDiary",
]
