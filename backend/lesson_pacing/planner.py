import logging
import math
from dataclasses import dataclass
from itertools import groupby
from typing import Sequence

from .config import settings
from .models import TaskKind
from .syllabus import Task

logger = logging.getLogger(__name__)

MODE_EMPTY = "empty"
MODE_TIGHT = "tight"
MODE_SPACED = "spaced"


@dataclass(frozen=True)
class DistributionPlan:
    mode: str
    target_usage: int
    surplus: int
    tasks: list[Task]

    @property
    def revision_count(self) -> int:
        return sum(1 for task in self.tasks if task.kind == TaskKind.REVISION)


def _chapter_revision(unit_index: int, chapter_index: int, unit_title: str, chapter_title: str) -> Task:
    return Task(
        kind=TaskKind.REVISION,
        unit_title=unit_title,
        chapter_title=chapter_title,
        display_title=f"Revision: {chapter_title}",
        unit_index=unit_index,
        chapter_index=chapter_index,
    )


def _unit_revision(unit_index: int, unit_title: str) -> Task:
    return Task(
        kind=TaskKind.REVISION,
        unit_title=unit_title,
        chapter_title=None,
        display_title=f"Unit Revision: {unit_title}",
        unit_index=unit_index,
        chapter_index=None,
    )


def plan_distribution(
    topics: Sequence[Task], capacity: int, utilization_ceiling: float | None = None
) -> DistributionPlan:
    """Decide between tight and spaced packing for ``topics`` over ``capacity`` slots.

    In spaced mode a revision task follows each chapter and each unit until the
    surplus (``floor(capacity * ceiling) - len(topics)``) is used up. Topics are
    never reordered.
    """
    ceiling = settings.utilization_ceiling if utilization_ceiling is None else utilization_ceiling
    topic_count = len(topics)
    target_usage = math.floor(capacity * ceiling)
    surplus = target_usage - topic_count

    if topic_count == 0:
        return DistributionPlan(mode=MODE_EMPTY, target_usage=target_usage, surplus=surplus, tasks=[])
    if surplus <= 0:
        logger.info(f"Tight mode: {topic_count} topics for {capacity} slots (target {target_usage})")
        return DistributionPlan(mode=MODE_TIGHT, target_usage=target_usage, surplus=surplus, tasks=list(topics))

    queue: list[Task] = []
    injected = 0

    for unit_index, unit_tasks in groupby(topics, key=lambda task: task.unit_index):
        unit_tasks = list(unit_tasks)
        unit_title = unit_tasks[0].unit_title
        for chapter_index, chapter_tasks in groupby(unit_tasks, key=lambda task: task.chapter_index):
            chapter_tasks = list(chapter_tasks)
            queue.extend(chapter_tasks)
            if injected < surplus:
                queue.append(
                    _chapter_revision(unit_index, chapter_index, unit_title, chapter_tasks[0].chapter_title)
                )
                injected += 1
        if injected < surplus:
            queue.append(_unit_revision(unit_index, unit_title))
            injected += 1

    plan = DistributionPlan(mode=MODE_SPACED, target_usage=target_usage, surplus=surplus, tasks=queue)
    logger.info(
        f"Spaced mode: {topic_count} topics, {plan.revision_count} revisions injected "
        f"for {capacity} slots (surplus {surplus})"
    )
    return plan
