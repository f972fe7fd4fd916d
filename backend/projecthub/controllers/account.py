"""Profile and notifications pages."""

from typing import Any, Dict, List

from projecthub.controllers.base import PageController, mutation_result
from projecthub.core.config import settings
from projecthub.core.logging import get_logger
from projecthub.schemas import ProfileUpdate
from projecthub.services.notifications import NotificationService
from projecthub.services.profile import ProfileService
from projecthub.session.context import AppState

logger = get_logger(__name__)


class ProfileController(PageController):

    page = "profile"

    def __init__(self, app: AppState) -> None:
        super().__init__(app)
        self.profiles = ProfileService(app.data, app.user)

    async def render(self) -> Dict[str, Any]:
        profile = await self.profiles.get()
        stats = await self.profiles.stats()
        return self.view(profile=profile.model_dump(mode="json"), stats=stats.to_dict())

    async def update(self, payload: ProfileUpdate) -> Dict[str, Any]:
        profile = await self.profiles.update(payload)
        if not self.app.is_demo:
            # cached user must follow the stored profile
            self.app.state.set_json_if_fits(settings.STATE_USER_KEY, profile.model_dump(mode="json"))
        logger.info("Profile updated", user_id=profile.id)
        return mutation_result(profile.model_dump(mode="json"), "Profile updated", self.url("/profile"))


class NotificationsController(PageController):

    page = "notifications"

    def __init__(self, app: AppState) -> None:
        super().__init__(app)
        self.notifications = NotificationService(app.data, app.user, app.state)

    async def render(self) -> Dict[str, Any]:
        feed = await self.notifications.feed()
        return self.view(
            notifications=[n.to_dict() for n in feed],
            unread=sum(1 for n in feed if not n.read),
        )

    async def mark_read(self, notification_ids: List[str]) -> Dict[str, Any]:
        self.notifications.mark_read(notification_ids)
        return mutation_result({"ids": notification_ids}, "Marked as read")

    async def mark_all_read(self) -> Dict[str, Any]:
        count = await self.notifications.mark_all_read()
        message = f"{count} notifications marked as read" if count else "No unread notifications"
        return mutation_result({"count": count}, message, self.url("/notifications"))
