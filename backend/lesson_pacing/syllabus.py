from dataclasses import dataclass, field
from typing import Iterable

from .models import TaskKind


@dataclass(frozen=True)
class SyllabusTopic:
    title: str


@dataclass(frozen=True)
class SyllabusChapter:
    title: str
    topics: tuple[SyllabusTopic, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SyllabusUnit:
    title: str
    chapters: tuple[SyllabusChapter, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Task:
    """One unit of teaching work bound to a single slot.

    ``unit_index`` and ``chapter_index`` are tree positions, so boundaries are
    detected even when two chapters share a title. Unit-level revisions carry
    ``chapter_title=None`` and ``chapter_index=None``.
    """

    kind: TaskKind
    unit_title: str
    chapter_title: str | None
    display_title: str
    unit_index: int
    chapter_index: int | None
    weight: int = 1


def build_syllabus(units: Iterable) -> tuple[SyllabusUnit, ...]:
    """Convert request payload objects (anything with title/chapters/topics) to the immutable tree."""
    return tuple(
        SyllabusUnit(
            title=unit.title,
            chapters=tuple(
                SyllabusChapter(
                    title=chapter.title,
                    topics=tuple(SyllabusTopic(title=topic.title) for topic in chapter.topics),
                )
                for chapter in unit.chapters
            ),
        )
        for unit in units
    )


def flatten_syllabus(units: Iterable[SyllabusUnit]) -> list[Task]:
    tasks: list[Task] = []
    for unit_index, unit in enumerate(units):
        for chapter_index, chapter in enumerate(unit.chapters):
            for topic in chapter.topics:
                tasks.append(
                    Task(
                        kind=TaskKind.TOPIC,
                        unit_title=unit.title,
                        chapter_title=chapter.title,
                        display_title=topic.title,
                        unit_index=unit_index,
                        chapter_index=chapter_index,
                    )
                )
    return tasks
