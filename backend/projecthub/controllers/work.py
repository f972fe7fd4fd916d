"""Tasks and files pages: everything across the user's projects."""

from typing import Any, Dict, Optional

from projecthub.controllers.base import PageController, mutation_result
from projecthub.core.logging import get_logger
from projecthub.schemas import (
    FileCreate,
    TaskAssign,
    TaskCreate,
    TaskStatusChange,
    TaskUpdate,
)
from projecthub.services.files import FileService, category_counts, format_size, total_storage
from projecthub.services.tasks import TaskService, is_overdue, status_counts
from projecthub.session.context import AppState
from projecthub.widgets.project import task_card

logger = get_logger(__name__)

ALL = "all"


class TasksController(PageController):

    page = "tasks"

    def __init__(self, app: AppState) -> None:
        super().__init__(app)
        self.tasks = TaskService(app.data, app.user)

    async def render(
        self,
        status: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        pairs = await self.tasks.list_all()
        every_task = [task for _, task in pairs]
        shown = [
            (project, task) for project, task in pairs
            if status in (None, ALL) or task.status == status
            if project_id in (None, ALL) or project.id == project_id
        ]
        return self.view(
            tasks=[task_card(task, project) for project, task in shown],
            counts=status_counts(every_task),
            overdue=sum(1 for task in every_task if is_overdue(task)),
            total=len(every_task),
            projects=[{"id": p.id, "title": p.title} for p in {p.id: p for p, _ in pairs}.values()],
        )

    def _reload(self) -> str:
        return self.url("/tasks")

    async def create(self, payload: TaskCreate) -> Dict[str, Any]:
        task = await self.tasks.create(payload)
        return mutation_result(task.model_dump(mode="json"), f'Task "{task.title}" created', self._reload())

    async def update(self, task_id: str, payload: TaskUpdate) -> Dict[str, Any]:
        task = await self.tasks.update(task_id, payload)
        return mutation_result(task.model_dump(mode="json"), "Task updated", self._reload())

    async def change_status(self, task_id: str, payload: TaskStatusChange) -> Dict[str, Any]:
        task = await self.tasks.change_status(task_id, payload)
        label = task.status.replace("_", " ")
        return mutation_result(task.model_dump(mode="json"), f"Task moved to {label}", self._reload())

    async def assign(self, task_id: str, payload: TaskAssign) -> Dict[str, Any]:
        task = await self.tasks.assign(task_id, payload)
        message = "Task assigned" if task.assigned_to else "Task unassigned"
        return mutation_result(task.model_dump(mode="json"), message, self._reload())

    async def delete(self, task_id: str) -> Dict[str, Any]:
        await self.tasks.delete(task_id)
        return mutation_result({"id": task_id}, "Task deleted", self._reload())


class FilesController(PageController):

    page = "files"

    def __init__(self, app: AppState) -> None:
        super().__init__(app)
        self.files = FileService(app.data, app.user)

    async def render(self, category: Optional[str] = None) -> Dict[str, Any]:
        pairs = await self.files.list_all()
        every_file = [f for _, f in pairs]
        storage = total_storage(every_file)
        return self.view(
            files=[
                {
                    **f.model_dump(mode="json"),
                    "project_title": project.title,
                    "size_label": format_size(f.file_size or 0),
                }
                for project, f in pairs
                if category in (None, ALL) or f.category == category
            ],
            counts=category_counts(every_file),
            total=len(every_file),
            total_storage=storage,
            total_storage_label=format_size(storage),
        )

    async def upload(self, payload: FileCreate) -> Dict[str, Any]:
        project_file = await self.files.create(payload)
        return mutation_result(
            project_file.model_dump(mode="json"),
            f'File "{project_file.file_name}" uploaded',
            self.url("/files"),
        )

    async def delete(self, file_id: str) -> Dict[str, Any]:
        await self.files.delete(file_id)
        return mutation_result({"id": file_id}, "File deleted", self.url("/files"))
