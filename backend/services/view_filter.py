"""
Derived, read-only views over the task collection
"""
from typing import Dict, List, Sequence, Union

from backend.services.entities import StatusFilter, Task, TaskStatus


def _matches_query(task: Task, needle: str) -> bool:
    return needle in task.title.casefold() or needle in task.description.casefold()


def _matches_status(task: Task, status_filter: StatusFilter) -> bool:
    if status_filter == StatusFilter.ACTIVE:
        return task.status != TaskStatus.COMPLETED
    if status_filter == StatusFilter.COMPLETED:
        return task.status == TaskStatus.COMPLETED
    return True


def compute_visible(
    tasks: Sequence[Task],
    query: str = "",
    status_filter: Union[StatusFilter, str] = StatusFilter.ALL,
) -> List[Task]:
    """
    Filter tasks by free-text query and status, keeping the input order.

    The query is trimmed and matched case-insensitively against title and
    description. Raises ValueError for an unknown status filter.
    """
    status_filter = StatusFilter(status_filter)
    needle = (query or "").strip().casefold()

    return [
        task for task in tasks
        if (not needle or _matches_query(task, needle))
        and _matches_status(task, status_filter)
    ]


def count_by_status(tasks: Sequence[Task]) -> Dict[str, int]:
    """Counters shown next to each filter option"""
    completed = sum(1 for t in tasks if t.status == TaskStatus.COMPLETED)
    return {
        StatusFilter.ALL.value: len(tasks),
        StatusFilter.ACTIVE.value: len(tasks) - completed,
        StatusFilter.COMPLETED.value: completed,
    }
