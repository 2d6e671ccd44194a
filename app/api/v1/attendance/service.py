"""Student attendance service: daily class registers, per-student history and class statistics."""

import logging
from collections import Counter
from datetime import date
from typing import Dict, List, Optional

from fastapi import status
from sqlalchemy import and_, delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.schemas import TenantContext
from app.auth.tenant import SCHOOL_CONTEXT_REQUIRED_MESSAGE
from app.core.enums import AttendanceStatus, UserRole
from app.core.exceptions import ServiceError
from app.core.models import Attendance, Student, Teacher

from .schemas import (
    AttendanceMark,
    AttendanceMarkResult,
    AttendanceRecordResponse,
    AttendanceStats,
    ClassSections,
    ClassStudent,
    DailyAttendanceStats,
    OverallAttendanceStats,
    StudentAttendanceRecord,
    StudentAttendanceStatistics,
    StudentAttendanceSummary,
    StudentBrief,
)

logger = logging.getLogger(__name__)

# Without a class filter the student list is capped.
UNFILTERED_STUDENT_LIMIT = 100


def _school_id(tenant: TenantContext) -> int:
    if tenant.school_id is None:
        raise ServiceError(SCHOOL_CONTEXT_REQUIRED_MESSAGE, status.HTTP_400_BAD_REQUEST)
    return tenant.school_id


def attendance_rate(counts: Counter, total: int) -> float:
    """Late arrivals count as attended."""
    if not total:
        return 0.0
    attended = counts[AttendanceStatus.PRESENT.value] + counts[AttendanceStatus.LATE.value]
    return round(attended / total * 100, 2)


# --- Students and classes ---
async def list_students(
    db: AsyncSession,
    tenant: TenantContext,
    class_name: Optional[str] = None,
    section: Optional[str] = None,
) -> List[ClassStudent]:
    stmt = select(Student).where(Student.school_id == _school_id(tenant))
    if class_name:
        stmt = stmt.where(Student.class_name == class_name)
        if section:
            stmt = stmt.where(Student.section == section)
        stmt = stmt.order_by(Student.roll_number, Student.id)
    else:
        stmt = stmt.order_by(Student.class_name, Student.roll_number, Student.id).limit(UNFILTERED_STUDENT_LIMIT)
    result = await db.execute(stmt)
    students = result.scalars().all()
    if not students:
        message = "No students found in the specified class" if class_name else "No students found in the database"
        raise ServiceError(message, status.HTTP_404_NOT_FOUND)
    return [
        ClassStudent(
            id=s.id,
            name=s.full_name,
            roll_number=s.roll_number,
            admission_no=s.admission_no,
            class_name=s.class_name,
            section=s.section,
        )
        for s in students
    ]


async def list_classes(db: AsyncSession, tenant: TenantContext) -> List[ClassSections]:
    result = await db.execute(
        select(Student.class_name, Student.section)
        .distinct()
        .where(Student.school_id == _school_id(tenant))
        .order_by(Student.class_name, Student.section)
    )
    grouped: Dict[str, List[str]] = {}
    for class_name, section in result.all():
        sections = grouped.setdefault(class_name, [])
        if section and section not in sections:
            sections.append(section)
    return [ClassSections(class_name=name, sections=sections) for name, sections in grouped.items()]


# --- Marking ---
async def _resolve_teacher_id(
    db: AsyncSession,
    tenant: TenantContext,
    school_id: int,
    requested: Optional[int],
) -> Optional[int]:
    """Teachers mark as themselves. Other staff may name a teacher of the school, or nobody."""
    if tenant.user.role == UserRole.TEACHER.value:
        try:
            teacher_id = int(tenant.user.id)
        except (TypeError, ValueError):
            raise ServiceError("Invalid teacher ID format", status.HTTP_400_BAD_REQUEST)
    elif requested is not None:
        teacher_id = requested
    else:
        return None
    result = await db.execute(
        select(Teacher.id).where(Teacher.id == teacher_id, Teacher.school_id == school_id)
    )
    if result.scalar_one_or_none() is None:
        raise ServiceError(f"Teacher with ID {teacher_id} does not exist", status.HTTP_400_BAD_REQUEST)
    return teacher_id


async def mark_attendance(
    db: AsyncSession,
    tenant: TenantContext,
    payload: AttendanceMark,
) -> AttendanceMarkResult:
    """
    Replace the register of one class (and section) for one day.

    All rows are written in one transaction: either every student's mark is stored or none is.
    """
    school_id = _school_id(tenant)
    class_name = (payload.class_name or "").strip()
    if not payload.date or not class_name:
        raise ServiceError("Date and class name are required", status.HTTP_400_BAD_REQUEST)
    if payload.date > date.today():
        raise ServiceError("Cannot mark attendance for future dates", status.HTTP_400_BAD_REQUEST)
    if not payload.attendance:
        raise ServiceError("No attendance data provided", status.HTTP_400_BAD_REQUEST)
    section = (payload.section or "").strip() or None

    student_ids = [item.student_id for item in payload.attendance]
    duplicates = sorted({sid for sid in student_ids if student_ids.count(sid) > 1})
    if duplicates:
        raise ServiceError(
            f"Student with ID {duplicates[0]} appears more than once",
            status.HTTP_400_BAD_REQUEST,
        )
    result = await db.execute(
        select(Student.id).where(Student.school_id == school_id, Student.id.in_(student_ids))
    )
    known = set(result.scalars().all())
    missing = [sid for sid in student_ids if sid not in known]
    if missing:
        raise ServiceError(f"Student with ID {missing[0]} does not exist", status.HTTP_400_BAD_REQUEST)

    teacher_id = await _resolve_teacher_id(db, tenant, school_id, payload.teacher_id)

    same_register = and_(
        Attendance.class_name == class_name,
        Attendance.section == section if section else Attendance.section.is_(None),
    )
    try:
        await db.execute(
            delete(Attendance).where(
                Attendance.school_id == school_id,
                Attendance.date == payload.date,
                or_(same_register, Attendance.student_id.in_(student_ids)),
            )
        )
        for item in payload.attendance:
            db.add(
                Attendance(
                    school_id=school_id,
                    student_id=item.student_id,
                    teacher_id=teacher_id,
                    date=payload.date,
                    status=item.status.value,
                    notes=item.notes,
                    class_name=class_name,
                    section=section,
                )
            )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise
    logger.info(
        "Marked attendance for %d students of %s %s on %s",
        len(student_ids), class_name, section or "", payload.date,
    )
    return AttendanceMarkResult(
        date=payload.date,
        class_name=class_name,
        section=section,
        created_count=len(student_ids),
    )


# --- Reports ---
async def get_records(
    db: AsyncSession,
    tenant: TenantContext,
    on_date: Optional[date],
    class_name: Optional[str],
    section: Optional[str] = None,
) -> List[AttendanceRecordResponse]:
    if not on_date or not class_name:
        raise ServiceError("Date and class name are required", status.HTTP_400_BAD_REQUEST)
    stmt = (
        select(Attendance, Student)
        .join(Student, Attendance.student_id == Student.id)
        .where(
            Attendance.school_id == _school_id(tenant),
            Attendance.date == on_date,
            Attendance.class_name == class_name,
        )
    )
    if section:
        stmt = stmt.where(Attendance.section == section)
    result = await db.execute(stmt.order_by(Student.roll_number, Student.id))
    return [
        AttendanceRecordResponse(
            id=record.id,
            date=record.date,
            status=record.status,
            notes=record.notes,
            student=StudentBrief(
                id=student.id,
                name=student.full_name,
                roll_number=student.roll_number,
                admission_no=student.admission_no,
            ),
        )
        for record, student in result.all()
    ]


async def get_student_attendance(
    db: AsyncSession,
    tenant: TenantContext,
    student_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Optional[StudentAttendanceSummary]:
    """A student's history with totals. Students may only read their own."""
    school_id = _school_id(tenant)
    if tenant.user.role == UserRole.STUDENT.value and tenant.user.id != str(student_id):
        raise ServiceError("You can only view your own attendance", status.HTTP_403_FORBIDDEN)
    student = await db.execute(
        select(Student.id).where(Student.id == student_id, Student.school_id == school_id)
    )
    if student.scalar_one_or_none() is None:
        return None

    stmt = select(Attendance).where(Attendance.student_id == student_id, Attendance.school_id == school_id)
    if start_date:
        stmt = stmt.where(Attendance.date >= start_date)
    if end_date:
        stmt = stmt.where(Attendance.date <= end_date)
    result = await db.execute(stmt.order_by(Attendance.date.desc()))
    records = result.scalars().all()

    counts = Counter(r.status for r in records)
    return StudentAttendanceSummary(
        records=[
            StudentAttendanceRecord(
                id=r.id,
                date=r.date,
                status=r.status,
                notes=r.notes,
                class_name=r.class_name,
                section=r.section,
                teacher_id=r.teacher_id,
            )
            for r in records
        ],
        statistics=StudentAttendanceStatistics(
            total_days=len(records),
            present_days=counts[AttendanceStatus.PRESENT.value],
            absent_days=counts[AttendanceStatus.ABSENT.value],
            late_days=counts[AttendanceStatus.LATE.value],
            excused_days=counts[AttendanceStatus.EXCUSED.value],
            attendance_percentage=attendance_rate(counts, len(records)),
        ),
    )


async def get_stats(
    db: AsyncSession,
    tenant: TenantContext,
    start_date: Optional[date],
    end_date: Optional[date],
    class_name: Optional[str],
    section: Optional[str] = None,
) -> AttendanceStats:
    if not start_date or not end_date or not class_name:
        raise ServiceError("Start date, end date, and class name are required", status.HTTP_400_BAD_REQUEST)
    stmt = select(Attendance.date, Attendance.status).where(
        Attendance.school_id == _school_id(tenant),
        Attendance.date >= start_date,
        Attendance.date <= end_date,
        Attendance.class_name == class_name,
    )
    if section:
        stmt = stmt.where(Attendance.section == section)
    result = await db.execute(stmt.order_by(Attendance.date))
    rows = result.all()

    daily: Dict[date, Counter] = {}
    for day, mark in rows:
        daily.setdefault(day, Counter())[mark] += 1
    overall = Counter(mark for _, mark in rows)

    return AttendanceStats(
        overall_stats=OverallAttendanceStats(
            total_records=len(rows),
            total_present=overall[AttendanceStatus.PRESENT.value],
            total_absent=overall[AttendanceStatus.ABSENT.value],
            total_late=overall[AttendanceStatus.LATE.value],
            total_excused=overall[AttendanceStatus.EXCUSED.value],
            overall_attendance_rate=attendance_rate(overall, len(rows)),
        ),
        daily_stats=[
            DailyAttendanceStats(
                date=day,
                total=sum(counts.values()),
                present=counts[AttendanceStatus.PRESENT.value],
                absent=counts[AttendanceStatus.ABSENT.value],
                late=counts[AttendanceStatus.LATE.value],
                excused=counts[AttendanceStatus.EXCUSED.value],
            )
            for day, counts in daily.items()
        ],
    )
