"""Project membership."""

from typing import List

from projecthub.data.base import DataAccess
from projecthub.middleware.exception import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
)
from projecthub.models.enums import UpdateType
from projecthub.schemas import MemberAdd, MemberRecord, UserRecord
from projecthub.services.access import require_project
from projecthub.services.activity import ActivityService


class MemberService:

    def __init__(self, data: DataAccess, user: UserRecord) -> None:
        self.data = data
        self.user = user
        self.activity = ActivityService(data, user)

    async def list(self, project_id: str) -> List[MemberRecord]:
        await require_project(self.data, self.user, project_id)
        return await self.data.members.list(project_id)

    async def add(self, project_id: str, payload: MemberAdd) -> MemberRecord:
        project = await require_project(self.data, self.user, project_id, owner_only=True)

        if payload.user_id:
            invitee = await self.data.users.get(payload.user_id)
        else:
            invitee = await self.data.users.get_by_email(payload.email)
        if invitee is None:
            raise NotFoundException("User", payload.user_id or payload.email)

        if invitee.id == project.user_id:
            raise ConflictException("The owner is already part of this project")
        members = await self.data.members.list(project_id)
        if any(m.user_id == invitee.id for m in members):
            raise ConflictException("User is already a member of this project")

        member = await self.data.members.add(project_id, invitee.id)
        await self.activity.record(
            project_id,
            UpdateType.MEMBER_ADDED,
            f"{invitee.full_name or invitee.email} joined the project",
            {"user_id": invitee.id},
        )
        return member

    async def remove(self, project_id: str, user_id: str) -> None:
        project = await require_project(self.data, self.user, project_id, owner_only=True)
        if user_id == project.user_id:
            raise ForbiddenException("The project owner cannot be removed")
        removed = await self.data.users.get(user_id)
        if not await self.data.members.remove(project_id, user_id):
            raise NotFoundException("Member", user_id)
        name = (removed.full_name or removed.email) if removed else user_id
        await self.activity.record(
            project_id,
            UpdateType.MEMBER_REMOVED,
            f"{name} was removed from the project",
            {"user_id": user_id},
        )
