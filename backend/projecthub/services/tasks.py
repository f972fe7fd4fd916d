"""
Task Service

Task CRUD across the user's projects. Creating, completing and assigning
a task each leave an entry in the project's activity feed.
"""

from collections import Counter
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from projecthub.core.logging import get_logger
from projecthub.data.base import DataAccess
from projecthub.middleware.exception import NotFoundException, ValidationException
from projecthub.models.enums import TaskStatus, UpdateType
from projecthub.schemas import (
    ProjectRecord,
    TaskAssign,
    TaskCreate,
    TaskRecord,
    TaskStatusChange,
    TaskUpdate,
    UserRecord,
)
from projecthub.services.access import require_project
from projecthub.services.activity import ActivityService
from projecthub.services.stats import tasks_by_project

logger = get_logger(__name__)


def is_overdue(task: TaskRecord, today: Optional[date] = None) -> bool:
    """Open task whose due date lies before today."""
    if task.due_date is None or task.status == TaskStatus.DONE.value:
        return False
    return task.due_date < (today or date.today())


def status_counts(tasks: Iterable[TaskRecord]) -> Dict[str, int]:
    counts = Counter(task.status for task in tasks)
    return {status.value: counts[status.value] for status in TaskStatus}


class TaskService:

    def __init__(self, data: DataAccess, user: UserRecord) -> None:
        self.data = data
        self.user = user
        self.activity = ActivityService(data, user)

    async def list_all(self) -> List[Tuple[ProjectRecord, TaskRecord]]:
        """Every task of every project the user can see, with its project."""
        projects = await self.data.projects.list(self.user.id)
        by_project = await tasks_by_project(self.data, projects)
        return [(project, task) for project in projects for task in by_project[project.id]]

    async def list_for_project(self, project_id: str) -> List[TaskRecord]:
        await require_project(self.data, self.user, project_id)
        return await self.data.tasks.list(project_id)

    async def _load(self, task_id: str) -> TaskRecord:
        task = await self.data.tasks.get(task_id)
        if task is None:
            raise NotFoundException("Task", task_id)
        await require_project(self.data, self.user, task.project_id)
        return task

    async def _check_assignee(self, user_id: Optional[str]) -> Optional[UserRecord]:
        if not user_id:
            return None
        assignee = await self.data.users.get(user_id)
        if assignee is None:
            raise ValidationException("Assignee does not exist", {"assigned_to": user_id})
        return assignee

    async def create(self, payload: TaskCreate) -> TaskRecord:
        await require_project(self.data, self.user, payload.project_id)
        await self._check_assignee(payload.assigned_to)
        task = await self.data.tasks.create(payload.model_dump())
        await self.activity.record(
            task.project_id,
            UpdateType.TASK_CREATED,
            f"Task created: {task.title}",
            {"task_id": task.id},
        )
        logger.info("Task created", task_id=task.id, project_id=task.project_id)
        return task

    async def update(self, task_id: str, payload: TaskUpdate) -> TaskRecord:
        current = await self._load(task_id)
        changes = payload.changes()
        if "assigned_to" in changes:
            await self._check_assignee(changes["assigned_to"])
        task = await self.data.tasks.update(task_id, changes)
        if task is None:
            raise NotFoundException("Task", task_id)
        await self._after_status_change(current, task)
        return task

    async def change_status(self, task_id: str, payload: TaskStatusChange) -> TaskRecord:
        return await self.update(task_id, TaskUpdate(status=payload.status))

    async def assign(self, task_id: str, payload: TaskAssign) -> TaskRecord:
        current = await self._load(task_id)
        assignee = await self._check_assignee(payload.assigned_to)
        task = await self.data.tasks.update(task_id, {"assigned_to": payload.assigned_to})
        if task is None:
            raise NotFoundException("Task", task_id)
        name = (assignee.full_name or assignee.email) if assignee else "nobody"
        await self.activity.record(
            current.project_id,
            UpdateType.TASK_ASSIGNED,
            f"Task assigned to {name}: {current.title}",
            {"task_id": task_id, "assigned_to": payload.assigned_to},
        )
        return task

    async def delete(self, task_id: str) -> None:
        await self._load(task_id)
        if not await self.data.tasks.delete(task_id):
            raise NotFoundException("Task", task_id)

    async def _after_status_change(self, before: TaskRecord, after: TaskRecord) -> None:
        if after.status == TaskStatus.DONE.value and before.status != TaskStatus.DONE.value:
            await self.activity.record(
                after.project_id,
                UpdateType.TASK_COMPLETED,
                f"Task completed: {after.title}",
                {"task_id": after.id},
            )
