import enum
from datetime import date, datetime, timezone

from sqlalchemy import Boolean, Date, DateTime, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Weekday(str, enum.Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def of(cls, day: date) -> "Weekday":
        return list(cls)[day.weekday()]


class TimetableStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    LOCKED = "LOCKED"


# Timetable states that count as teaching capacity.
CONFIRMED_TIMETABLE_STATUSES = (TimetableStatus.PUBLISHED, TimetableStatus.LOCKED)


class CalendarExceptionType(str, enum.Enum):
    HOLIDAY = "HOLIDAY"
    EVENT = "EVENT"
    EXAM = "EXAM"
    WORKING_DAY = "WORKING_DAY"


BLOCKING_EXCEPTION_TYPES = (CalendarExceptionType.HOLIDAY, CalendarExceptionType.EVENT)


class TaskKind(str, enum.Enum):
    TOPIC = "TOPIC"
    REVISION = "REVISION"
    PRACTICE = "PRACTICE"


class LessonPlanStatus(str, enum.Enum):
    PLANNED = "PLANNED"
    COMPLETED = "COMPLETED"


class Teacher(Base):
    __tablename__ = "teachers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    school_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class AcademicYear(Base):
    __tablename__ = "academic_years"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    school_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)


class TimetablePeriod(Base):
    __tablename__ = "timetable_periods"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    school_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)  # "HH:MM"
    end_time: Mapped[str | None] = mapped_column(String(5), nullable=True)


class TimetableEntry(Base):
    __tablename__ = "timetable_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    school_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    academic_year_id: Mapped[int] = mapped_column(ForeignKey("academic_years.id"), nullable=False, index=True)
    class_id: Mapped[int] = mapped_column(Integer, nullable=False)
    section_id: Mapped[int] = mapped_column(Integer, nullable=False)
    subject_id: Mapped[int] = mapped_column(Integer, nullable=False)
    teacher_id: Mapped[int | None] = mapped_column(ForeignKey("teachers.id"), nullable=True)
    period_id: Mapped[int] = mapped_column(ForeignKey("timetable_periods.id"), nullable=False)
    day: Mapped[Weekday] = mapped_column(Enum(Weekday), nullable=False)
    status: Mapped[TimetableStatus] = mapped_column(
        Enum(TimetableStatus), default=TimetableStatus.DRAFT, nullable=False
    )

    period: Mapped[TimetablePeriod] = relationship("TimetablePeriod")


class CalendarException(Base):
    __tablename__ = "calendar_exceptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    school_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    academic_year_id: Mapped[int] = mapped_column(ForeignKey("academic_years.id"), nullable=False, index=True)
    exception_date: Mapped[date] = mapped_column("date", Date, nullable=False, index=True)
    type: Mapped[CalendarExceptionType] = mapped_column(Enum(CalendarExceptionType), nullable=False)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)


class LessonPlanRecord(Base):
    __tablename__ = "lesson_plan_records"
    __table_args__ = (
        Index(
            "ix_lesson_plan_records_scope",
            "school_id",
            "academic_year_id",
            "class_id",
            "section_id",
            "subject_id",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    school_id: Mapped[int] = mapped_column(Integer, nullable=False)
    academic_year_id: Mapped[int] = mapped_column(ForeignKey("academic_years.id"), nullable=False)
    class_id: Mapped[int] = mapped_column(Integer, nullable=False)
    section_id: Mapped[int] = mapped_column(Integer, nullable=False)
    subject_id: Mapped[int] = mapped_column(Integer, nullable=False)
    teacher_id: Mapped[int] = mapped_column(ForeignKey("teachers.id"), nullable=False)
    lesson_date: Mapped[date] = mapped_column(Date, nullable=False)
    day_of_week: Mapped[Weekday] = mapped_column(Enum(Weekday), nullable=False)
    period_label: Mapped[str] = mapped_column(String(64), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    kind: Mapped[TaskKind] = mapped_column(Enum(TaskKind), default=TaskKind.TOPIC, nullable=False)
    unit_title: Mapped[str] = mapped_column(String(255), nullable=False)
    chapter_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    topic_title: Mapped[str] = mapped_column(String(512), nullable=False)
    status: Mapped[LessonPlanStatus] = mapped_column(
        Enum(LessonPlanStatus), default=LessonPlanStatus.PLANNED, nullable=False
    )
    # Size of the whole plan at commit time; some tasks may have found no slot.
    plan_total_tasks: Mapped[int] = mapped_column(Integer, nullable=False)
    plan_total_topics: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)

    teacher: Mapped[Teacher] = relationship("Teacher")
