"""User profile."""

from projecthub.data.base import DataAccess
from projecthub.middleware.exception import NotFoundException, ValidationException
from projecthub.schemas import ProfileUpdate, UserRecord
from projecthub.services.stats import DashboardStats, dashboard_stats


class ProfileService:

    def __init__(self, data: DataAccess, user: UserRecord) -> None:
        self.data = data
        self.user = user

    async def get(self) -> UserRecord:
        """The stored profile, falling back to the session's user."""
        return await self.data.users.get(self.user.id) or self.user

    async def update(self, payload: ProfileUpdate) -> UserRecord:
        changes = payload.changes()
        if not changes:
            raise ValidationException("Nothing to update")
        profile = await self.data.users.update(self.user.id, changes)
        if profile is None:
            raise NotFoundException("Profile", self.user.id)
        return profile

    async def stats(self) -> DashboardStats:
        return await dashboard_stats(self.data, self.user.id)
