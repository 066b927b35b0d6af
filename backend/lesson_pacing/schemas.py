from datetime import date

from pydantic import BaseModel, Field

from .models import TaskKind, Weekday


class SyllabusTopicIn(BaseModel):
    title: str = Field(min_length=1, max_length=512)


class SyllabusChapterIn(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    topics: list[SyllabusTopicIn] = Field(default_factory=list)


class SyllabusUnitIn(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    chapters: list[SyllabusChapterIn] = Field(default_factory=list)


class ScheduleScopeRequest(BaseModel):
    class_id: int
    section_id: int
    subject_id: int


class SchedulePreviewRequest(ScheduleScopeRequest):
    start_date: date
    units: list[SyllabusUnitIn] = Field(default_factory=list)


class ScheduledEntryOut(BaseModel):
    lesson_date: date
    day_of_week: Weekday
    period_label: str
    unit_title: str
    chapter_title: str | None = None
    topic_title: str
    kind: TaskKind


class ChapterTimelineOut(BaseModel):
    chapter_title: str
    start_date: date
    end_date: date
    entry_count: int
    entries: list[ScheduledEntryOut]


class UnitTimelineOut(BaseModel):
    unit_title: str
    start_date: date
    end_date: date
    entry_count: int
    chapters: list[ChapterTimelineOut]


class SimulationResultOut(BaseModel):
    success: bool
    mode: str
    total_tasks: int
    total_topics: int
    total_slots: int | None = None
    scheduled_count: int
    remaining_tasks: int
    schedule: list[ScheduledEntryOut]
    unit_timelines: list[UnitTimelineOut]
    first_date: date | None = None
    last_date: date | None = None


class CommitResponse(BaseModel):
    count: int


class ExistingScheduleOut(BaseModel):
    exists: bool
    count: int
    first_date: date | None = None
    last_date: date | None = None


class ExtractedTextOut(BaseModel):
    text: str

