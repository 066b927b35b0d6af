from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from .assigner import ScheduledEntry

REVIEW_BUCKET = "Review"


@dataclass
class ChapterTimeline:
    chapter_title: str
    start_date: date
    end_date: date
    entries: list[ScheduledEntry] = field(default_factory=list)

    @property
    def entry_count(self) -> int:
        return len(self.entries)


@dataclass
class UnitTimeline:
    unit_title: str
    start_date: date
    end_date: date
    chapters: list[ChapterTimeline] = field(default_factory=list)

    @property
    def entry_count(self) -> int:
        return sum(chapter.entry_count for chapter in self.chapters)


def summarize_timeline(entries: Iterable[ScheduledEntry]) -> list[UnitTimeline]:
    """Group date-ordered entries by unit, then chapter, in order of first appearance.

    Entries without a chapter (unit revisions) land in a ``"Review"`` chapter.
    """
    units: list[UnitTimeline] = []
    unit_index: dict[str, UnitTimeline] = {}
    chapter_index: dict[tuple[str, str], ChapterTimeline] = {}

    for entry in entries:
        entry_date = entry.slot.date
        unit = unit_index.get(entry.unit_title)
        if unit is None:
            unit = UnitTimeline(unit_title=entry.unit_title, start_date=entry_date, end_date=entry_date)
            unit_index[entry.unit_title] = unit
            units.append(unit)

        chapter_title = entry.chapter_title or REVIEW_BUCKET
        key = (entry.unit_title, chapter_title)
        chapter = chapter_index.get(key)
        if chapter is None:
            chapter = ChapterTimeline(chapter_title=chapter_title, start_date=entry_date, end_date=entry_date)
            chapter_index[key] = chapter
            unit.chapters.append(chapter)

        chapter.entries.append(entry)
        chapter.end_date = entry_date
        unit.end_date = entry_date

    return units
