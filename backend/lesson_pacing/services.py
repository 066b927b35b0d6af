import logging
import threading
import weakref
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from typing import Sequence

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .assigner import ScheduledEntry, assign_slots
from .capacity import TeachingSlot, resolve_teaching_slots
from .models import LessonPlanRecord, LessonPlanStatus
from .planner import MODE_EMPTY, plan_distribution
from .repositories import (
    ScheduleScope,
    delete_scope_records,
    find_scope_records,
    find_teacher,
    insert_records,
    summarize_scope_records,
)
from .syllabus import SyllabusUnit, flatten_syllabus
from .timeline import UnitTimeline, summarize_timeline

logger = logging.getLogger(__name__)

MODE_COMMITTED = "committed"

# One lock per scope; serializes commits for the same scope within this process.
# Entries vanish once no commit holds or waits on the lock.
_scope_locks: "weakref.WeakValueDictionary[tuple[int, ...], threading.Lock]" = weakref.WeakValueDictionary()
_scope_locks_guard = threading.Lock()


@contextmanager
def _scope_lock(scope: ScheduleScope):
    key = scope.as_key()
    with _scope_locks_guard:
        lock = _scope_locks.get(key)
        if lock is None:
            lock = _scope_locks[key] = threading.Lock()
    with lock:
        yield


@dataclass
class SimulationResult:
    success: bool
    mode: str
    total_tasks: int
    total_topics: int
    scheduled_count: int
    remaining_tasks: int
    total_slots: int | None = None
    schedule: list[ScheduledEntry] = field(default_factory=list)
    unit_timelines: list[UnitTimeline] = field(default_factory=list)

    @property
    def first_date(self) -> date | None:
        return self.schedule[0].slot.date if self.schedule else None

    @property
    def last_date(self) -> date | None:
        return self.schedule[-1].slot.date if self.schedule else None


def simulate_schedule(
    db: Session, scope: ScheduleScope, syllabus: Sequence[SyllabusUnit], start_date: date
) -> SimulationResult:
    topics = flatten_syllabus(syllabus)
    if not topics:
        return SimulationResult(
            success=True, mode=MODE_EMPTY, total_tasks=0, total_topics=0, scheduled_count=0, remaining_tasks=0
        )

    slots = resolve_teaching_slots(db, scope, start_date)
    plan = plan_distribution(topics, len(slots))
    assignment = assign_slots(slots, plan.tasks)

    return SimulationResult(
        success=assignment.success,
        mode=plan.mode,
        total_tasks=assignment.total_tasks,
        total_topics=len(topics),
        scheduled_count=assignment.scheduled_count,
        remaining_tasks=assignment.remaining_tasks,
        total_slots=len(slots),
        schedule=assignment.entries,
        unit_timelines=summarize_timeline(assignment.entries),
    )


def _to_record(
    scope: ScheduleScope, teacher_id: int, result: SimulationResult, position: int, entry: ScheduledEntry
) -> LessonPlanRecord:
    return LessonPlanRecord(
        school_id=scope.school_id,
        academic_year_id=scope.academic_year_id,
        class_id=scope.class_id,
        section_id=scope.section_id,
        subject_id=scope.subject_id,
        teacher_id=teacher_id,
        lesson_date=entry.slot.date,
        day_of_week=entry.slot.day_of_week,
        period_label=entry.slot.period_label,
        position=position,
        kind=entry.kind,
        unit_title=entry.unit_title,
        chapter_title=entry.chapter_title,
        topic_title=entry.topic_title,
        status=LessonPlanStatus.PLANNED,
        plan_total_tasks=result.total_tasks,
        plan_total_topics=result.total_topics,
    )


def commit_schedule(
    db: Session,
    scope: ScheduleScope,
    syllabus: Sequence[SyllabusUnit],
    start_date: date,
    *,
    teacher_id: int,
) -> int:
    """Replace the persisted plan for ``scope`` with a freshly simulated one.

    Returns the number of records written. The delete and the insert share one
    transaction, so a failure leaves the previous plan in place.
    """
    teacher = find_teacher(db, school_id=scope.school_id, teacher_id=teacher_id)
    if not teacher or not teacher.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")

    with _scope_lock(scope):
        result = simulate_schedule(db, scope, syllabus, start_date)
        if result.total_topics == 0:
            return 0
        if result.scheduled_count == 0:
            raise HTTPException(status_code=400, detail="No valid slots found to schedule tasks.")

        try:
            removed = delete_scope_records(db, scope)
            insert_records(
                db,
                (
                    _to_record(scope, teacher.id, result, position, entry)
                    for position, entry in enumerate(result.schedule)
                ),
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Failed to commit lesson plan for scope {scope.as_key()}")
            raise

    logger.info(
        f"Committed {result.scheduled_count} lesson plan records for scope {scope.as_key()} "
        f"(replaced {removed}, teacher {teacher.id})"
    )
    return result.scheduled_count


def _to_entry(record: LessonPlanRecord) -> ScheduledEntry:
    return ScheduledEntry(
        slot=TeachingSlot(date=record.lesson_date, day_of_week=record.day_of_week, period_label=record.period_label),
        unit_title=record.unit_title,
        chapter_title=record.chapter_title,
        topic_title=record.topic_title,
        kind=record.kind,
    )


def load_existing_schedule(db: Session, scope: ScheduleScope) -> SimulationResult | None:
    """Rebuild the committed plan, including tasks that found no slot at commit time."""
    records = find_scope_records(db, scope)
    if not records:
        return None

    schedule = [_to_entry(record) for record in records]
    total_tasks = max(records[0].plan_total_tasks, len(schedule))
    remaining = total_tasks - len(schedule)
    return SimulationResult(
        success=remaining == 0,
        mode=MODE_COMMITTED,
        total_tasks=total_tasks,
        total_topics=records[0].plan_total_topics,
        scheduled_count=len(schedule),
        remaining_tasks=remaining,
        schedule=schedule,
        unit_timelines=summarize_timeline(schedule),
    )


def check_existing_schedule(db: Session, scope: ScheduleScope) -> dict:
    count, first_date, last_date = summarize_scope_records(db, scope)
    return {"exists": count > 0, "count": count, "first_date": first_date, "last_date": last_date}
