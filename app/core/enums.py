from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    SCHOOL = "school"
    TEACHER = "teacher"
    PARENT = "parent"
    STUDENT = "student"


class SchoolStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class TeacherStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class ActivityAction(str, Enum):
    FEE_STRUCTURE_CREATED = "FEE_STRUCTURE_CREATED"
    FEE_STRUCTURE_UPDATED = "FEE_STRUCTURE_UPDATED"


class BusStatus(str, Enum):
    ACTIVE = "ACTIVE"
    MAINTENANCE = "MAINTENANCE"
    INACTIVE = "INACTIVE"


class TripStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    DELAYED = "DELAYED"
    CANCELLED = "CANCELLED"


class MaintenanceStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EXCUSED = "EXCUSED"


class DiaryEntryType(str, Enum):
    GENERAL = "GENERAL"
    HOMEWORK = "HOMEWORK"
    ANNOUNCEMENT = "ANNOUNCEMENT"
    ASSESSMENT = "ASSESSMENT"
    EVENT = "EVENT"
    NOTICE = "NOTICE"
    REMINDER = "REMINDER"


class DiaryPriority(str, Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"
