from dataclasses import dataclass
from datetime import date
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .models import (
    BLOCKING_EXCEPTION_TYPES,
    CONFIRMED_TIMETABLE_STATUSES,
    AcademicYear,
    CalendarException,
    LessonPlanRecord,
    Teacher,
    TimetableEntry,
    TimetablePeriod,
    Weekday,
)


@dataclass(frozen=True)
class ScheduleScope:
    school_id: int
    academic_year_id: int
    class_id: int
    section_id: int
    subject_id: int

    def as_key(self) -> tuple[int, int, int, int, int]:
        return (self.school_id, self.academic_year_id, self.class_id, self.section_id, self.subject_id)


def load_weekly_periods(db: Session, scope: ScheduleScope) -> dict[Weekday, list[str]]:
    """Period labels per weekday from the confirmed timetable, in start-time order."""
    stmt = (
        select(TimetableEntry.day, TimetablePeriod.name)
        .join(TimetablePeriod, TimetableEntry.period_id == TimetablePeriod.id)
        .where(
            TimetableEntry.school_id == scope.school_id,
            TimetableEntry.academic_year_id == scope.academic_year_id,
            TimetableEntry.class_id == scope.class_id,
            TimetableEntry.section_id == scope.section_id,
            TimetableEntry.subject_id == scope.subject_id,
            TimetableEntry.status.in_(CONFIRMED_TIMETABLE_STATUSES),
        )
        .order_by(TimetablePeriod.start_time, TimetablePeriod.id)
    )
    periods_by_day: dict[Weekday, list[str]] = {}
    for day, period_name in db.execute(stmt):
        periods_by_day.setdefault(day, []).append(period_name)
    return periods_by_day


def load_blocked_dates(db: Session, *, school_id: int, academic_year_id: int, start: date, end: date) -> set[date]:
    stmt = select(CalendarException.exception_date).where(
        CalendarException.school_id == school_id,
        CalendarException.academic_year_id == academic_year_id,
        CalendarException.exception_date >= start,
        CalendarException.exception_date <= end,
        CalendarException.type.in_(BLOCKING_EXCEPTION_TYPES),
    )
    return set(db.scalars(stmt))


def load_academic_year(db: Session, *, school_id: int, academic_year_id: int) -> AcademicYear | None:
    return (
        db.query(AcademicYear)
        .filter(AcademicYear.id == academic_year_id, AcademicYear.school_id == school_id)
        .first()
    )


def find_teacher(db: Session, *, school_id: int, teacher_id: int) -> Teacher | None:
    return db.query(Teacher).filter(Teacher.id == teacher_id, Teacher.school_id == school_id).first()


def _scope_filter(query, scope: ScheduleScope):
    return query.filter(
        LessonPlanRecord.school_id == scope.school_id,
        LessonPlanRecord.academic_year_id == scope.academic_year_id,
        LessonPlanRecord.class_id == scope.class_id,
        LessonPlanRecord.section_id == scope.section_id,
        LessonPlanRecord.subject_id == scope.subject_id,
    )


def find_scope_records(db: Session, scope: ScheduleScope) -> list[LessonPlanRecord]:
    query = _scope_filter(db.query(LessonPlanRecord), scope)
    return query.order_by(LessonPlanRecord.lesson_date, LessonPlanRecord.position, LessonPlanRecord.id).all()


def summarize_scope_records(db: Session, scope: ScheduleScope) -> tuple[int, date | None, date | None]:
    query = db.query(
        func.count(LessonPlanRecord.id),
        func.min(LessonPlanRecord.lesson_date),
        func.max(LessonPlanRecord.lesson_date),
    )
    count, first_date, last_date = _scope_filter(query, scope).one()
    return count, first_date, last_date


def delete_scope_records(db: Session, scope: ScheduleScope) -> int:
    """Deletes within the caller's transaction; the caller commits or rolls back."""
    return _scope_filter(db.query(LessonPlanRecord), scope).delete(synchronize_session=False)


def insert_records(db: Session, records: Iterable[LessonPlanRecord]) -> None:
    db.add_all(list(records))
    db.flush()
