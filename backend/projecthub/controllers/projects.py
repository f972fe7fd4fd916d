"""Projects list and project details pages."""

from dataclasses import asdict
from typing import Any, Dict, Optional

from projecthub.controllers.base import PageController, mutation_result
from projecthub.core.logging import get_logger
from projecthub.schemas import (
    MemberAdd,
    ProjectCreate,
    ProjectUpdate,
    TimelineSave,
    UpdateCreate,
)
from projecthub.services.activity import ActivityService
from projecthub.services.members import MemberService
from projecthub.services.projects import SORTS, ProjectFilters, ProjectService
from projecthub.services.timeline import TimelineStore
from projecthub.session.context import AppState
from projecthub.widgets import (
    FileManagerWidget,
    MembersWidget,
    ProjectActivityWidget,
    ProjectHeaderWidget,
    TaskBoardWidget,
    TimelineWidget,
)
from projecthub.widgets.dashboard import project_card

logger = get_logger(__name__)


class ProjectsController(PageController):

    page = "projects"

    def __init__(self, app: AppState) -> None:
        super().__init__(app)
        self.projects = ProjectService(app.data, app.user)

    async def render(self, filters: Optional[ProjectFilters] = None) -> Dict[str, Any]:
        filters = filters or ProjectFilters()
        projects = await self.projects.list(filters)
        return self.view(
            projects=[project_card(p) for p in projects],
            total=len(projects),
            filters=asdict(filters),
            sorts=list(SORTS),
        )

    async def create(self, payload: ProjectCreate) -> Dict[str, Any]:
        project = await self.projects.create(payload)
        logger.info("Project created", project_id=project.id)
        return mutation_result(
            project.model_dump(mode="json"),
            f'Project "{project.title}" created',
            self.url("/projects"),
        )

    async def update(self, project_id: str, payload: ProjectUpdate) -> Dict[str, Any]:
        project = await self.projects.update(project_id, payload)
        return mutation_result(
            project.model_dump(mode="json"),
            "Project updated",
            self.url(f"/projects/{project_id}"),
        )

    async def delete(self, project_id: str) -> Dict[str, Any]:
        await self.projects.delete(project_id)
        return mutation_result({"id": project_id}, "Project deleted", self.url("/projects"))


class ProjectDetailsController(PageController):
    """One project: header, board, files, activity, team and timeline."""

    page = "project_details"

    def __init__(self, app: AppState, project_id: str) -> None:
        super().__init__(app)
        self.project_id = project_id
        self.projects = ProjectService(app.data, app.user)

    async def render(self, category: Optional[str] = None) -> Dict[str, Any]:
        project = await self.projects.get(self.project_id)
        widgets = await self.render_widgets([
            ProjectHeaderWidget(self.app, project),
            TaskBoardWidget(self.app, project),
            FileManagerWidget(self.app, project, category),
            ProjectActivityWidget(self.app, project),
            MembersWidget(self.app, project),
            TimelineWidget(self.app, project),
        ])
        return self.view(project_id=project.id, title=project.title, widgets=widgets)

    async def save_timeline(self, payload: TimelineSave) -> Dict[str, Any]:
        await self.projects.get(self.project_id)
        TimelineStore(self.app.state).save(self.project_id, payload.rows)
        return mutation_result(
            {"rows": [row.model_dump(mode="json") for row in payload.rows]},
            "Timeline saved",
            self.url(f"/projects/{self.project_id}"),
        )

    async def reset_timeline(self) -> Dict[str, Any]:
        await self.projects.get(self.project_id)
        TimelineStore(self.app.state).clear()
        return mutation_result(None, "Timeline reset", self.url(f"/projects/{self.project_id}"))

    async def post_update(self, payload: UpdateCreate) -> Dict[str, Any]:
        update = await ActivityService(self.data, self.user).post(payload)
        return mutation_result(update.model_dump(mode="json"), "Update posted")

    async def add_member(self, payload: MemberAdd) -> Dict[str, Any]:
        member = await MemberService(self.data, self.user).add(self.project_id, payload)
        name = member.user.full_name if member.user and member.user.full_name else "Member"
        return mutation_result(
            member.model_dump(mode="json"),
            f"{name} added to the project",
            self.url(f"/projects/{self.project_id}"),
        )

    async def remove_member(self, user_id: str) -> Dict[str, Any]:
        await MemberService(self.data, self.user).remove(self.project_id, user_id)
        return mutation_result(
            {"user_id": user_id},
            "Member removed",
            self.url(f"/projects/{self.project_id}"),
        )
