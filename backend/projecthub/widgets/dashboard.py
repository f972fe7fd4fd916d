"""Dashboard widgets: navigation chrome, statistics, recent projects, activity, charts."""

import math
from collections import Counter
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from projecthub.core.config import settings
from projecthub.models.enums import TaskStatus
from projecthub.schemas import ProjectRecord, TaskRecord, UpdateRecord
from projecthub.services.activity import ActivityService
from projecthub.services.stats import dashboard_stats, tasks_by_project
from projecthub.widgets.base import Widget, page_url

ACTIVITY_ACTIONS = {
    "general": "posted an update",
    "milestone": "reached a milestone",
    "task_completed": "completed a task",
    "task_created": "created a task",
    "task_assigned": "assigned a task",
    "file_uploaded": "uploaded a file",
    "status_changed": "changed the status",
    "member_added": "added a member",
    "member_removed": "removed a member",
}

TREND_DAYS = 7


def project_card(project: ProjectRecord) -> Dict[str, Any]:
    return {
        **project.model_dump(mode="json", include={
            "id", "title", "description", "project_type", "status",
            "progress_percentage", "end_date", "updated_at",
        }),
        "url": f"/projects/{project.id}",
    }


class NavbarWidget(Widget):
    name = "navbar"
    title = "Navigation"

    async def load(self) -> Dict[str, Any]:
        return {
            "user": self.user.model_dump(mode="json", include={"id", "email", "full_name", "role", "avatar_url"}),
            "demo_badge": self.app.is_demo,
            "links": {
                page: page_url(f"/{page}", self.app)
                for page in ("dashboard", "projects", "tasks", "files", "chats", "profile", "notifications")
            },
        }


class StatsWidget(Widget):
    name = "stats"
    title = "Statistics"

    async def load(self) -> Dict[str, int]:
        stats = await dashboard_stats(self.data, self.user.id)
        return stats.to_dict()


class RecentProjectsWidget(Widget):
    name = "recent_projects"
    title = "Recent projects"

    async def load(self) -> List[Dict[str, Any]]:
        projects = await self.with_timeout(self.data.projects.list(self.user.id))
        projects = sorted(projects, key=lambda p: p.updated_at, reverse=True)
        return [project_card(p) for p in projects[:settings.RECENT_PROJECTS_LIMIT]]


class ActivityFeedWidget(Widget):
    name = "activity_feed"
    title = "Recent activity"

    async def load(self) -> List[Dict[str, Any]]:
        projects = await self.data.projects.list(self.user.id)
        titles = {p.id: p.title for p in projects}
        updates = await ActivityService(self.data, self.user).recent(
            projects, settings.ACTIVITY_FEED_LIMIT
        )
        names = await self._user_names(updates)
        return [
            {
                **update.model_dump(mode="json"),
                "user_name": names.get(update.user_id, "Someone"),
                "action": ACTIVITY_ACTIONS.get(update.update_type, "updated the project"),
                "project_title": titles.get(update.project_id, ""),
            }
            for update in updates
        ]

    async def _user_names(self, updates: List[UpdateRecord]) -> Dict[str, str]:
        names: Dict[str, str] = {}
        for user_id in {u.user_id for u in updates if u.user_id}:
            profile = self.user if user_id == self.user.id else await self.data.users.get(user_id)
            if profile is not None:
                names[user_id] = profile.full_name or profile.email
        return names


class ChartsWidget(Widget):
    name = "charts"
    title = "Charts"

    async def load(self) -> Dict[str, Any]:
        projects = await self.with_timeout(self.data.projects.list(self.user.id))
        per_project = await tasks_by_project(self.data, projects)
        tasks = [task for group in per_project.values() for task in group]
        return {
            "project_types": self._series(Counter(p.project_type for p in projects)),
            "project_status": self._series(
                Counter(p.status for p in projects), label=lambda s: s.capitalize()
            ),
            "task_trend": task_trend(tasks),
            "progress_overview": progress_overview(projects),
        }

    @staticmethod
    def _series(counts: Counter, label=None) -> Dict[str, List[Any]]:
        keys = list(counts)
        return {
            "labels": [label(k) if label else k for k in keys],
            "data": [counts[k] for k in keys],
        }


def task_trend(tasks: List[TaskRecord], today: Optional[date] = None) -> Dict[str, List[Any]]:
    """Tasks created and completed per day over the last week."""
    today = today or date.today()
    days = [today - timedelta(days=offset) for offset in range(TREND_DAYS - 1, -1, -1)]
    created = Counter(t.created_at.date() for t in tasks)
    completed = Counter(t.updated_at.date() for t in tasks if t.status == TaskStatus.DONE.value)
    return {
        "labels": [day.strftime("%a") for day in days],
        "created": [created[day] for day in days],
        "completed": [completed[day] for day in days],
    }


def progress_overview(projects: List[ProjectRecord]) -> Dict[str, Any]:
    if not projects:
        average = 0
    else:
        average = math.floor(sum(p.progress_percentage for p in projects) / len(projects) + 0.5)
    return {"labels": ["Completed", "Remaining"], "data": [average, 100 - average], "average": average}
