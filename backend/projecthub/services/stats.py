"""
Derived statistics.

Nothing here is stored: counts are recomputed from the data access on
every load. Per-project task lists are fetched concurrently.
"""

import asyncio
import math
from collections import Counter
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Sequence

from projecthub.data.base import DataAccess
from projecthub.models.enums import ProjectStatus, TaskStatus
from projecthub.schemas import ProjectRecord, TaskRecord


def completion_rate(completed: int, total: int) -> int:
    """Percentage of completed tasks, rounded half up; 0 when there are none."""
    if total <= 0:
        return 0
    rate = math.floor(completed / total * 100 + 0.5)
    return max(0, min(100, rate))


@dataclass
class TaskStats:
    total_tasks: int = 0
    completed_tasks: int = 0
    in_progress_tasks: int = 0
    todo_tasks: int = 0

    @property
    def completion_rate(self) -> int:
        return completion_rate(self.completed_tasks, self.total_tasks)

    def to_dict(self) -> Dict[str, int]:
        return {**asdict(self), "completion_rate": self.completion_rate}


@dataclass
class DashboardStats:
    total_projects: int = 0
    active_projects: int = 0
    completed_projects: int = 0
    total_tasks: int = 0
    completed_tasks: int = 0

    @property
    def completion_rate(self) -> int:
        return completion_rate(self.completed_tasks, self.total_tasks)

    def to_dict(self) -> Dict[str, int]:
        return {**asdict(self), "completion_rate": self.completion_rate}


def task_stats(tasks: Iterable[TaskRecord]) -> TaskStats:
    counts = Counter(task.status for task in tasks)
    return TaskStats(
        total_tasks=sum(counts.values()),
        completed_tasks=counts[TaskStatus.DONE.value],
        in_progress_tasks=counts[TaskStatus.IN_PROGRESS.value],
        todo_tasks=counts[TaskStatus.TODO.value],
    )


async def tasks_by_project(
    data: DataAccess,
    projects: Sequence[ProjectRecord],
) -> Dict[str, List[TaskRecord]]:
    """Task lists of every project, fetched concurrently."""
    results = await asyncio.gather(*(data.tasks.list(p.id) for p in projects))
    return {project.id: tasks for project, tasks in zip(projects, results)}


async def dashboard_stats(data: DataAccess, user_id: str) -> DashboardStats:
    """Project and task totals across the projects the user owns."""
    projects = [p for p in await data.projects.list(user_id) if p.user_id == user_id]
    per_project = await tasks_by_project(data, projects)
    all_tasks = [task for tasks in per_project.values() for task in tasks]
    totals = task_stats(all_tasks)

    statuses = Counter(p.status for p in projects)
    return DashboardStats(
        total_projects=len(projects),
        active_projects=statuses[ProjectStatus.ACTIVE.value],
        completed_projects=statuses[ProjectStatus.COMPLETED.value],
        total_tasks=totals.total_tasks,
        completed_tasks=totals.completed_tasks,
    )
