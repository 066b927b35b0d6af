from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from .assigner import ScheduledEntry
from .database import get_db_session
from .extraction import UnsupportedSyllabusFile, extract_syllabus_text
from .middleware import RequestContext, UserRole, require_roles
from .repositories import ScheduleScope
from .schemas import (
    ChapterTimelineOut,
    CommitResponse,
    ExistingScheduleOut,
    ExtractedTextOut,
    SchedulePreviewRequest,
    ScheduledEntryOut,
    ScheduleScopeRequest,
    SimulationResultOut,
    UnitTimelineOut,
)
from .services import (
    SimulationResult,
    check_existing_schedule,
    commit_schedule,
    load_existing_schedule,
    simulate_schedule,
)
from .syllabus import build_syllabus

router = APIRouter(prefix="/api/v1/teacher/scheduler", tags=["Teacher - Auto-Pilot Scheduler"])

teacher_access = require_roles(UserRole.TEACHER)


def _scope(context: RequestContext, payload: ScheduleScopeRequest) -> ScheduleScope:
    return ScheduleScope(
        school_id=context.school_id,
        academic_year_id=context.academic_year_id,
        class_id=payload.class_id,
        section_id=payload.section_id,
        subject_id=payload.subject_id,
    )


def _entry_out(entry: ScheduledEntry) -> ScheduledEntryOut:
    return ScheduledEntryOut(
        lesson_date=entry.slot.date,
        day_of_week=entry.slot.day_of_week,
        period_label=entry.slot.period_label,
        unit_title=entry.unit_title,
        chapter_title=entry.chapter_title,
        topic_title=entry.topic_title,
        kind=entry.kind,
    )


def _result_out(result: SimulationResult) -> SimulationResultOut:
    return SimulationResultOut(
        success=result.success,
        mode=result.mode,
        total_tasks=result.total_tasks,
        total_topics=result.total_topics,
        total_slots=result.total_slots,
        scheduled_count=result.scheduled_count,
        remaining_tasks=result.remaining_tasks,
        schedule=[_entry_out(entry) for entry in result.schedule],
        unit_timelines=[
            UnitTimelineOut(
                unit_title=unit.unit_title,
                start_date=unit.start_date,
                end_date=unit.end_date,
                entry_count=unit.entry_count,
                chapters=[
                    ChapterTimelineOut(
                        chapter_title=chapter.chapter_title,
                        start_date=chapter.start_date,
                        end_date=chapter.end_date,
                        entry_count=chapter.entry_count,
                        entries=[_entry_out(entry) for entry in chapter.entries],
                    )
                    for chapter in unit.chapters
                ],
            )
            for unit in result.unit_timelines
        ],
        first_date=result.first_date,
        last_date=result.last_date,
    )


@router.post("/preview", response_model=SimulationResultOut)
def preview(
    payload: SchedulePreviewRequest,
    db: Session = Depends(get_db_session),
    context: RequestContext = Depends(teacher_access),
):
    result = simulate_schedule(db, _scope(context, payload), build_syllabus(payload.units), payload.start_date)
    return _result_out(result)


@router.post("/commit", response_model=CommitResponse)
def commit(
    payload: SchedulePreviewRequest,
    db: Session = Depends(get_db_session),
    context: RequestContext = Depends(teacher_access),
):
    count = commit_schedule(
        db,
        _scope(context, payload),
        build_syllabus(payload.units),
        payload.start_date,
        teacher_id=context.user_id,
    )
    return CommitResponse(count=count)


@router.post("/check-existing", response_model=ExistingScheduleOut)
def check_existing(
    payload: ScheduleScopeRequest,
    db: Session = Depends(get_db_session),
    context: RequestContext = Depends(teacher_access),
):
    return ExistingScheduleOut(**check_existing_schedule(db, _scope(context, payload)))


@router.post("/load-existing", response_model=SimulationResultOut | None)
def load_existing(
    payload: ScheduleScopeRequest,
    db: Session = Depends(get_db_session),
    context: RequestContext = Depends(teacher_access),
):
    result = load_existing_schedule(db, _scope(context, payload))
    if result is None:
        return None
    return _result_out(result)


@router.post("/extract-text", response_model=ExtractedTextOut)
def extract_text(
    file: UploadFile = File(...),
    _: RequestContext = Depends(teacher_access),
):
    try:
        text = extract_syllabus_text(file.filename, file.content_type, file.file.read())
    except UnsupportedSyllabusFile as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ExtractedTextOut(text=text)
