import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Collection, Mapping

from sqlalchemy.orm import Session

from .config import settings
from .models import AcademicYear, Weekday
from .repositories import ScheduleScope, load_academic_year, load_blocked_dates, load_weekly_periods

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TeachingSlot:
    date: date
    day_of_week: Weekday
    period_label: str


def resolve_end_date(year: AcademicYear | None, start_date: date, fallback_days: int | None = None) -> date:
    """End of the academic year, or ``start + fallback_days`` when the year is missing or malformed."""
    fallback_days = settings.fallback_year_days if fallback_days is None else fallback_days
    if year is not None and year.end_date is not None and year.end_date >= start_date:
        return year.end_date

    fallback = start_date + timedelta(days=fallback_days)
    logger.warning(
        f"Academic year bounds unavailable (year={getattr(year, 'id', None)}); "
        f"falling back to {fallback.isoformat()}"
    )
    return fallback


def expand_teaching_slots(
    *,
    start_date: date,
    end_date: date,
    periods_by_day: Mapping[Weekday, list[str]],
    blocked_dates: Collection[date],
    max_days: int | None = None,
) -> list[TeachingSlot]:
    max_days = settings.max_simulation_days if max_days is None else max_days
    slots: list[TeachingSlot] = []
    current = start_date
    days_processed = 0
    while current <= end_date and days_processed < max_days:
        if current not in blocked_dates:
            weekday = Weekday.of(current)
            for period_label in periods_by_day.get(weekday, ()):
                slots.append(TeachingSlot(date=current, day_of_week=weekday, period_label=period_label))
        current += timedelta(days=1)
        days_processed += 1
    return slots


def resolve_teaching_slots(db: Session, scope: ScheduleScope, start_date: date) -> list[TeachingSlot]:
    year = load_academic_year(db, school_id=scope.school_id, academic_year_id=scope.academic_year_id)
    end_date = resolve_end_date(year, start_date)
    periods_by_day = load_weekly_periods(db, scope)
    if not periods_by_day:
        logger.info(f"No confirmed timetable entries for scope {scope.as_key()}")
        return []

    blocked_dates = load_blocked_dates(
        db,
        school_id=scope.school_id,
        academic_year_id=scope.academic_year_id,
        start=start_date,
        end=end_date,
    )
    return expand_teaching_slots(
        start_date=start_date,
        end_date=end_date,
        periods_by_day=periods_by_day,
        blocked_dates=blocked_dates,
    )
