"""Project details widgets: header, task board, file manager, timeline, members."""

from typing import Any, Dict, List, Optional

from projecthub.core.config import settings
from projecthub.models.enums import TaskStatus
from projecthub.schemas import ProjectRecord, TaskRecord
from projecthub.services.files import category_counts, total_storage
from projecthub.services.members import MemberService
from projecthub.services.stats import task_stats
from projecthub.services.tasks import is_overdue
from projecthub.services.timeline import TimelineStore, build_rows
from projecthub.session.context import AppState
from projecthub.widgets.base import Widget, page_url


def task_card(task: TaskRecord, project: Optional[ProjectRecord] = None) -> Dict[str, Any]:
    card = {**task.model_dump(mode="json"), "is_overdue": is_overdue(task)}
    if project is not None:
        card["project_title"] = project.title
    return card


class ProjectWidget(Widget):
    """A widget bound to one project; the project is loaded by the page."""

    def __init__(self, app: AppState, project: ProjectRecord, retry_url: Optional[str] = None) -> None:
        self.project = project
        super().__init__(
            app,
            retry_url or page_url(f"{settings.API_V1_STR}/projects/{project.id}/details", app),
        )


class ProjectHeaderWidget(ProjectWidget):
    name = "project_header"
    title = "Project"

    async def load(self) -> Dict[str, Any]:
        tasks = await self.data.tasks.list(self.project.id)
        return {
            "project": self.project.model_dump(mode="json"),
            "is_owner": self.project.user_id == self.user.id,
            "stats": task_stats(tasks).to_dict(),
        }


class TaskBoardWidget(ProjectWidget):
    name = "task_board"
    title = "Task board"

    async def load(self) -> Dict[str, List[Dict[str, Any]]]:
        tasks = await self.data.tasks.list(self.project.id)
        columns: Dict[str, List[Dict[str, Any]]] = {status.value: [] for status in TaskStatus}
        for task in tasks:
            columns.setdefault(task.status, []).append(task_card(task))
        return columns


class FileManagerWidget(ProjectWidget):
    name = "file_manager"
    title = "Files"

    def __init__(self, app: AppState, project: ProjectRecord, category: Optional[str] = None) -> None:
        super().__init__(app, project)
        self.category = category

    async def load(self) -> Dict[str, Any]:
        files = await self.data.files.list(self.project.id)
        shown = [f for f in files if self.category in (None, "all") or f.category == self.category]
        return {
            "files": [f.model_dump(mode="json") for f in shown],
            "counts": category_counts(files),
            "total_storage": total_storage(files),
        }


class TimelineWidget(ProjectWidget):
    name = "timeline"
    title = "Timeline"

    async def load(self) -> Dict[str, Any]:
        saved = TimelineStore(self.app.state).load(self.project.id)
        if saved is not None:
            rows, source = saved, "saved"
        else:
            rows, source = build_rows(self.project, await self.data.tasks.list(self.project.id)), "tasks"
        return {"rows": [row.model_dump(mode="json") for row in rows], "source": source}


class MembersWidget(ProjectWidget):
    name = "members"
    title = "Team"

    async def load(self) -> List[Dict[str, Any]]:
        members = await MemberService(self.data, self.user).list(self.project.id)
        return [m.model_dump(mode="json") for m in members]


class ProjectActivityWidget(ProjectWidget):
    name = "project_activity"
    title = "Activity"

    async def load(self) -> List[Dict[str, Any]]:
        updates = await self.data.updates.list(self.project.id)
        return [u.model_dump(mode="json") for u in updates]
