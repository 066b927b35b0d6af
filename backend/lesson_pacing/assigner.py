from dataclasses import dataclass
from typing import Sequence

from .capacity import TeachingSlot
from .models import TaskKind
from .syllabus import Task


@dataclass(frozen=True)
class ScheduledEntry:
    slot: TeachingSlot
    unit_title: str
    chapter_title: str | None
    topic_title: str
    kind: TaskKind = TaskKind.TOPIC


@dataclass(frozen=True)
class Assignment:
    entries: list[ScheduledEntry]
    total_tasks: int

    @property
    def scheduled_count(self) -> int:
        return len(self.entries)

    @property
    def remaining_tasks(self) -> int:
        return self.total_tasks - self.scheduled_count

    @property
    def success(self) -> bool:
        return self.remaining_tasks == 0


def assign_slots(slots: Sequence[TeachingSlot], tasks: Sequence[Task]) -> Assignment:
    # Positional: all spacing decisions were made by the planner.
    entries = [
        ScheduledEntry(
            slot=slot,
            unit_title=task.unit_title,
            chapter_title=task.chapter_title,
            topic_title=task.display_title,
            kind=task.kind,
        )
        for slot, task in zip(slots, tasks)
    ]
    return Assignment(entries=entries, total_tasks=len(tasks))
