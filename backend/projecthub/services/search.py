"""
Global Search

One query across the user's projects, tasks, files and contacts. Records
are fetched through the data access and matched here, like the project
filters, so both modes return the same hits. Each category is ordered by
relevance: an exact title match beats a prefix match, which beats a
substring match; a match in the secondary text and a record younger than
a week add a point each.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from projecthub.core.logging import get_logger
from projecthub.data.base import DataAccess
from projecthub.schemas import ProjectRecord, UserRecord
from projecthub.services.projects import ALL

logger = get_logger(__name__)

MIN_QUERY_LENGTH = 2
RECENT = timedelta(days=7)
CATEGORIES = ("projects", "tasks", "files", "contacts")


def relevance(
    query: str,
    title: Optional[str],
    secondary: Optional[str] = None,
    created_at: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> int:
    """Score one hit; ``query`` is already lowercased."""
    score = 0
    title = (title or "").lower()
    if title == query:
        score += 10
    elif title.startswith(query):
        score += 5
    elif query in title:
        score += 2
    if query in (secondary or "").lower():
        score += 1
    if created_at is not None and (now or datetime.now(timezone.utc)) - created_at < RECENT:
        score += 1
    return score


def _matches(query: str, *fields: Optional[str]) -> bool:
    return any(query in (value or "").lower() for value in fields)


@dataclass
class SearchHit:
    kind: str
    id: str
    title: str
    subtitle: str
    relevance: int
    project_id: Optional[str] = None
    project_title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SearchResults:
    query: str
    projects: List[SearchHit] = field(default_factory=list)
    tasks: List[SearchHit] = field(default_factory=list)
    files: List[SearchHit] = field(default_factory=list)
    contacts: List[SearchHit] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(len(getattr(self, name)) for name in CATEGORIES)

    def to_dict(self, limit: Optional[int] = None) -> Dict[str, Any]:
        """Hits per category, each list cut to ``limit``; counts stay complete."""
        return {
            "query": self.query,
            "total": self.total,
            "counts": {name: len(getattr(self, name)) for name in CATEGORIES},
            **{
                name: [hit.to_dict() for hit in getattr(self, name)[:limit]]
                for name in CATEGORIES
            },
        }


class SearchService:

    def __init__(self, data: DataAccess, user: UserRecord) -> None:
        self.data = data
        self.user = user

    async def search(
        self,
        query: str,
        project_type: Optional[str] = None,
        status: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> SearchResults:
        """
        Search every category.

        Args:
            query: Free text; shorter than two characters finds nothing
            project_type: Only projects of this type (``all`` for any)
            status: Only projects and tasks in this status (``all`` for any)
            now: Reference time for the recency bonus
        """
        needle = (query or "").strip().lower()
        results = SearchResults(query=needle)
        if len(needle) < MIN_QUERY_LENGTH:
            return results

        now = now or datetime.now(timezone.utc)
        projects = await self.data.projects.list(self.user.id)

        for project in projects:
            if not self._project_selected(project, project_type, status):
                continue
            if _matches(needle, project.title, project.description):
                results.projects.append(SearchHit(
                    kind="project",
                    id=project.id,
                    title=project.title,
                    subtitle=f"{project.project_type} · {project.status}",
                    relevance=relevance(needle, project.title, project.description, project.created_at, now),
                    project_id=project.id,
                    project_title=project.title,
                ))

        for project in projects:
            for task in await self.data.tasks.list(project.id):
                if status and status != ALL and task.status != status:
                    continue
                if _matches(needle, task.title, task.description):
                    results.tasks.append(SearchHit(
                        kind="task",
                        id=task.id,
                        title=task.title,
                        subtitle=f"{project.title} · {task.status}",
                        relevance=relevance(needle, task.title, task.description, task.created_at, now),
                        project_id=project.id,
                        project_title=project.title,
                    ))
            for project_file in await self.data.files.list(project.id):
                if _matches(needle, project_file.file_name, project_file.caption):
                    results.files.append(SearchHit(
                        kind="file",
                        id=project_file.id,
                        title=project_file.file_name,
                        subtitle=project.title,
                        relevance=relevance(
                            needle,
                            project_file.file_name,
                            project_file.caption,
                            project_file.uploaded_at,
                            now,
                        ),
                        project_id=project.id,
                        project_title=project.title,
                    ))

        for contact in await self.data.users.list_contacts(self.user.id):
            if _matches(needle, contact.full_name, contact.email):
                results.contacts.append(SearchHit(
                    kind="contact",
                    id=contact.id,
                    title=contact.full_name or contact.email,
                    subtitle=contact.email,
                    relevance=relevance(needle, contact.full_name, contact.email, contact.created_at, now),
                ))

        for name in CATEGORIES:
            getattr(results, name).sort(key=lambda hit: hit.relevance, reverse=True)
        logger.debug("Search finished", mode=self.data.mode.value, hits=results.total)
        return results

    @staticmethod
    def _project_selected(project: ProjectRecord, project_type: Optional[str], status: Optional[str]) -> bool:
        if project_type and project_type != ALL and project.project_type != project_type:
            return False
        if status and status != ALL and project.status != status:
            return False
        return True
