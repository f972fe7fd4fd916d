"""
Project Service

Listing with filters and sorting, plus create/update/delete with the
owner checks. Filtering and sorting happen here, after the data access
has returned, so both modes behave identically.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from projecthub.core.logging import get_logger
from projecthub.data.base import DataAccess
from projecthub.middleware.exception import NotFoundException
from projecthub.models.enums import UpdateType
from projecthub.schemas import ProjectCreate, ProjectRecord, ProjectUpdate, UserRecord
from projecthub.services.access import require_project
from projecthub.services.activity import ActivityService

logger = get_logger(__name__)

ALL = "all"

SORTS: Dict[str, Tuple[Callable[[ProjectRecord], Any], bool]] = {
    "newest": (lambda p: p.created_at, True),
    "oldest": (lambda p: p.created_at, False),
    "name-asc": (lambda p: p.title.lower(), False),
    "progress-desc": (lambda p: p.progress_percentage, True),
}
DEFAULT_SORT = "newest"


@dataclass
class ProjectFilters:
    project_type: Optional[str] = None
    status: Optional[str] = None
    search: Optional[str] = None
    sort: str = DEFAULT_SORT

    def matches(self, project: ProjectRecord) -> bool:
        if self.project_type and self.project_type != ALL and project.project_type != self.project_type:
            return False
        if self.status and self.status != ALL and project.status != self.status:
            return False
        if self.search:
            needle = self.search.strip().lower()
            haystack = f"{project.title} {project.description or ''}".lower()
            if needle not in haystack:
                return False
        return True


def filter_projects(projects: List[ProjectRecord], filters: ProjectFilters) -> List[ProjectRecord]:
    key, reverse = SORTS.get(filters.sort, SORTS[DEFAULT_SORT])
    return sorted((p for p in projects if filters.matches(p)), key=key, reverse=reverse)


class ProjectService:

    def __init__(self, data: DataAccess, user: UserRecord) -> None:
        self.data = data
        self.user = user
        self.activity = ActivityService(data, user)

    async def list(self, filters: Optional[ProjectFilters] = None) -> List[ProjectRecord]:
        projects = await self.data.projects.list(self.user.id)
        return filter_projects(projects, filters or ProjectFilters())

    async def get(self, project_id: str) -> ProjectRecord:
        return await require_project(self.data, self.user, project_id)

    async def create(self, payload: ProjectCreate) -> ProjectRecord:
        project = await self.data.projects.create(self.user.id, payload.model_dump())
        logger.info("Project created", project_id=project.id, mode=self.data.mode.value)
        return project

    async def update(self, project_id: str, payload: ProjectUpdate) -> ProjectRecord:
        current = await require_project(self.data, self.user, project_id, owner_only=True)
        changes = payload.changes()
        project = await self.data.projects.update(project_id, changes)
        if project is None:
            raise NotFoundException("Project", project_id)

        if "status" in changes and project.status != current.status:
            await self.activity.record(
                project_id,
                UpdateType.STATUS_CHANGED,
                f"Project status changed to {project.status}",
                {"old_status": current.status, "new_status": project.status},
            )
        return project

    async def delete(self, project_id: str) -> None:
        await require_project(self.data, self.user, project_id, owner_only=True)
        if not await self.data.projects.delete(project_id, self.user.id):
            raise NotFoundException("Project", project_id)
        logger.info("Project deleted", project_id=project_id, mode=self.data.mode.value)
