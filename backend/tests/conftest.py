"""
Shared fixtures: an in-memory SQLite database seeded with one school,
academic year, teacher and three timetable periods.
"""

from dataclasses import dataclass
from datetime import date

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lesson_pacing import router
from lesson_pacing.database import Base, get_db_session
from lesson_pacing.models import (
    AcademicYear,
    CalendarException,
    CalendarExceptionType,
    Teacher,
    TimetableEntry,
    TimetablePeriod,
    TimetableStatus,
    Weekday,
)
from lesson_pacing.repositories import ScheduleScope
from lesson_pacing.security import create_access_token
from lesson_pacing.syllabus import SyllabusChapter, SyllabusTopic, SyllabusUnit

# Monday; the seeded year ends ten Mondays later.
START = date(2025, 6, 2)
YEAR_END = date(2025, 8, 4)


@dataclass
class SeededSchool:
    scope: ScheduleScope
    teacher: Teacher
    year: AcademicYear
    periods: dict[str, TimetablePeriod]


def make_syllabus(*units: tuple[str, list[tuple[str, list[str]]]]) -> tuple[SyllabusUnit, ...]:
    return tuple(
        SyllabusUnit(
            title=unit_title,
            chapters=tuple(
                SyllabusChapter(title=chapter_title, topics=tuple(SyllabusTopic(title=t) for t in topics))
                for chapter_title, topics in chapters
            ),
        )
        for unit_title, chapters in units
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def school(db) -> SeededSchool:
    teacher = Teacher(school_id=1, full_name="Asha Verma", email="asha@school.local", is_active=True)
    year = AcademicYear(school_id=1, name="2025/2026", start_date=START, end_date=YEAR_END)
    periods = {
        "Period 1": TimetablePeriod(school_id=1, name="Period 1", start_time="08:00", end_time="08:45"),
        "Period 2": TimetablePeriod(school_id=1, name="Period 2", start_time="08:50", end_time="09:35"),
        "Period 3": TimetablePeriod(school_id=1, name="Period 3", start_time="09:40", end_time="10:25"),
    }
    db.add_all([teacher, year, *periods.values()])
    db.commit()

    scope = ScheduleScope(school_id=1, academic_year_id=year.id, class_id=10, section_id=1, subject_id=5)
    return SeededSchool(scope=scope, teacher=teacher, year=year, periods=periods)


@pytest.fixture
def add_timetable_entry(db):
    def _add(
        school: SeededSchool,
        day: Weekday,
        period_name: str,
        status: TimetableStatus = TimetableStatus.PUBLISHED,
        section_id: int | None = None,
    ) -> TimetableEntry:
        scope = school.scope
        entry = TimetableEntry(
            school_id=scope.school_id,
            academic_year_id=scope.academic_year_id,
            class_id=scope.class_id,
            section_id=scope.section_id if section_id is None else section_id,
            subject_id=scope.subject_id,
            teacher_id=school.teacher.id,
            period_id=school.periods[period_name].id,
            day=day,
            status=status,
        )
        db.add(entry)
        db.commit()
        return entry

    return _add


@pytest.fixture
def add_calendar_exception(db):
    def _add(school: SeededSchool, on: date, kind: CalendarExceptionType) -> CalendarException:
        exception = CalendarException(
            school_id=school.scope.school_id,
            academic_year_id=school.scope.academic_year_id,
            exception_date=on,
            type=kind,
            title=f"{kind.value.title()} on {on.isoformat()}",
        )
        db.add(exception)
        db.commit()
        return exception

    return _add


@pytest.fixture
def client(session_factory):
    app = FastAPI()
    app.include_router(router)

    def override_session():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db_session] = override_session
    return TestClient(app)


@pytest.fixture
def auth_headers(school):
    def _headers(role: str = "teacher", user_id: int | None = None) -> dict[str, str]:
        token = create_access_token(
            subject=str(school.teacher.id if user_id is None else user_id),
            role=role,
            school_id=school.scope.school_id,
            academic_year_id=school.scope.academic_year_id,
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
