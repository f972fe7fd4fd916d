"""Project activity feed."""

import asyncio
from typing import Any, Dict, List, Optional, Sequence

from projecthub.core.errors import log_error
from projecthub.core.logging import get_logger
from projecthub.data.base import DataAccess
from projecthub.middleware.exception import AppException
from projecthub.models.enums import UpdateType
from projecthub.schemas import ProjectRecord, UpdateCreate, UpdateRecord, UserRecord
from projecthub.services.access import require_project

logger = get_logger(__name__)


class ActivityService:

    def __init__(self, data: DataAccess, user: UserRecord) -> None:
        self.data = data
        self.user = user

    async def record(
        self,
        project_id: str,
        update_type: UpdateType,
        text: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[UpdateRecord]:
        """
        Append an activity entry.

        The change that triggered the entry has already been saved, so a
        failure here is logged and does not fail the request.
        """
        try:
            return await self.data.updates.create(self.user.id, {
                "project_id": project_id,
                "update_type": update_type.value,
                "update_text": text,
                "metadata": metadata or {},
            })
        except AppException as e:
            log_error(
                e,
                page="activity",
                action=update_type.value,
                user_id=self.user.id,
                mode=self.data.mode.value,
            )
            return None

    async def recent(
        self,
        projects: Sequence[ProjectRecord],
        limit: Optional[int] = None,
    ) -> List[UpdateRecord]:
        """Latest activity across the given projects, newest first."""
        per_project = await asyncio.gather(
            *(self.data.updates.list(p.id, limit=limit) for p in projects)
        )
        merged = [update for updates in per_project for update in updates]
        merged.sort(key=lambda u: u.created_at, reverse=True)
        return merged[:limit] if limit else merged

    async def post(self, payload: UpdateCreate) -> UpdateRecord:
        """Publish an update written by the user on a project they can see."""
        await require_project(self.data, self.user, payload.project_id)
        return await self.data.updates.create(self.user.id, payload.model_dump())
