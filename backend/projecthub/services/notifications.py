"""
Notifications

The feed is derived, never stored: recent project activity plus overdue
tasks. Which entries the user has read is kept in the client state store.
"""

from dataclasses import asdict, dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Iterable, List, Optional, Set

from projecthub.core.config import settings
from projecthub.core.logging import get_logger
from projecthub.data.base import DataAccess
from projecthub.schemas import UserRecord
from projecthub.services.activity import ActivityService
from projecthub.services.tasks import TaskService, is_overdue
from projecthub.session.state import StateStore, encode_json

logger = get_logger(__name__)

FEED_LIMIT = 20
MAX_READ_IDS = 200
READ_IDS_TRIM_STEP = 10

TITLES = {
    "general": "Project update",
    "milestone": "Milestone reached",
    "task_completed": "Task completed",
    "task_created": "New task",
    "task_assigned": "Task assigned",
    "file_uploaded": "File uploaded",
    "status_changed": "Status changed",
    "member_added": "Member added",
    "member_removed": "Member removed",
    "task_overdue": "Task overdue",
}


@dataclass
class Notification:
    id: str
    kind: str
    title: str
    message: str
    project_id: str
    project_title: str
    created_at: datetime
    read: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        return data


class NotificationService:

    def __init__(self, data: DataAccess, user: UserRecord, state: StateStore) -> None:
        self.data = data
        self.user = user
        self.state = state

    def _stored_ids(self) -> List[str]:
        try:
            stored = self.state.get_json(settings.STATE_NOTIFICATIONS_READ_KEY)
        except ValueError:
            logger.warning("Discarding malformed notification read-state")
            return []
        return [str(i) for i in stored] if isinstance(stored, list) else []

    def read_ids(self) -> Set[str]:
        return set(self._stored_ids())

    async def feed(self, today: Optional[date] = None) -> List[Notification]:
        projects = await self.data.projects.list(self.user.id)
        titles = {p.id: p.title for p in projects}
        read = self.read_ids()

        notifications = [
            Notification(
                id=f"update-{update.id}",
                kind=update.update_type,
                title=TITLES.get(update.update_type, "Project update"),
                message=update.update_text,
                project_id=update.project_id,
                project_title=titles.get(update.project_id, ""),
                created_at=update.created_at,
            )
            for update in await ActivityService(self.data, self.user).recent(projects, FEED_LIMIT)
        ]

        for project, task in await TaskService(self.data, self.user).list_all():
            if is_overdue(task, today):
                notifications.append(Notification(
                    id=f"overdue-{task.id}",
                    kind="task_overdue",
                    title=TITLES["task_overdue"],
                    message=f"{task.title} was due {task.due_date.isoformat()}",
                    project_id=project.id,
                    project_title=project.title,
                    created_at=datetime.combine(task.due_date, time.min, tzinfo=timezone.utc),
                ))

        for notification in notifications:
            notification.read = notification.id in read
        notifications.sort(key=lambda n: n.created_at, reverse=True)
        return notifications

    async def unread_count(self) -> int:
        return sum(1 for n in await self.feed() if not n.read)

    def mark_read(self, notification_ids: Iterable[str]) -> None:
        """Remember ids as read, keeping only the most recent ones that fit in a cookie."""
        ids = self._stored_ids()
        for notification_id in notification_ids:
            if notification_id not in ids:
                ids.append(notification_id)
        ids = ids[-MAX_READ_IDS:]
        value = encode_json(ids)
        while ids and not self.state.fits(settings.STATE_NOTIFICATIONS_READ_KEY, value):
            ids = ids[READ_IDS_TRIM_STEP:]
            value = encode_json(ids)
        self.state.set(settings.STATE_NOTIFICATIONS_READ_KEY, value)

    async def mark_all_read(self) -> int:
        """Mark the whole current feed as read; returns how many were unread."""
        notifications = await self.feed()
        unread = [n.id for n in notifications if not n.read]
        if unread:
            self.mark_read(unread)
        return len(unread)
