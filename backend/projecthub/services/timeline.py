"""
Project timeline rows for the Gantt view.

Rows are derived from the project's tasks unless the user saved an
edited set, which is kept in the client state store.
"""

from datetime import timedelta
from typing import List, Optional, Sequence

from projecthub.core.config import settings
from projecthub.core.logging import get_logger
from projecthub.middleware.exception import ValidationException
from projecthub.models.enums import TaskStatus
from projecthub.schemas import GanttRow, ProjectRecord, TaskRecord
from projecthub.session.state import StateStore, encode_json

logger = get_logger(__name__)

DEFAULT_DURATION = timedelta(days=7)

PROGRESS_BY_STATUS = {
    TaskStatus.TODO.value: 0,
    TaskStatus.IN_PROGRESS.value: 50,
    TaskStatus.DONE.value: 100,
}


def build_rows(project: ProjectRecord, tasks: Sequence[TaskRecord]) -> List[GanttRow]:
    """One row per task, oldest first."""
    rows = []
    for task in sorted(tasks, key=lambda t: t.created_at):
        start = task.created_at.date()
        if project.start_date and start < project.start_date:
            start = project.start_date
        end = task.due_date or start + DEFAULT_DURATION
        if end < start:
            start = end
        rows.append(GanttRow(
            id=task.id,
            name=task.title,
            start=start,
            end=end,
            progress=PROGRESS_BY_STATUS.get(task.status, 0),
        ))
    return rows


class TimelineStore:
    """The one saved timeline, keyed by project."""

    def __init__(self, state: StateStore) -> None:
        self.state = state

    def load(self, project_id: str) -> Optional[List[GanttRow]]:
        try:
            saved = self.state.get_json(settings.STATE_GANTT_KEY)
            if not isinstance(saved, dict) or saved.get("project_id") != project_id:
                return None
            return [GanttRow.model_validate(row) for row in saved.get("rows", [])]
        except ValueError:
            logger.warning("Discarding malformed saved timeline", project_id=project_id)
            return None

    def save(self, project_id: str, rows: Sequence[GanttRow]) -> None:
        """
        Keep ``rows`` as the project's timeline.

        Raises:
            ValidationException: If the rows would not fit in one cookie
        """
        value = encode_json({
            "project_id": project_id,
            "rows": [row.model_dump(mode="json") for row in rows],
        })
        if not self.state.fits(settings.STATE_GANTT_KEY, value):
            logger.warning("Timeline too large to save", project_id=project_id, rows=len(rows))
            raise ValidationException(
                "Timeline is too large to save. Remove some rows and try again.",
                details={"rows": len(rows), "max_bytes": settings.STATE_COOKIE_MAX_BYTES},
            )
        self.state.set(settings.STATE_GANTT_KEY, value)
        logger.info("Timeline saved", project_id=project_id, rows=len(rows))

    def clear(self) -> None:
        self.state.delete(settings.STATE_GANTT_KEY)
