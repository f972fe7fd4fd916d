"""Team chat page."""

from typing import Any, Dict, Optional

from projecthub.controllers.base import PageController, mutation_result
from projecthub.core.config import settings
from projecthub.schemas import ChatRoomCreate, MessageCreate
from projecthub.services.chat import ChatService
from projecthub.session.context import AppState


class ChatsController(PageController):

    page = "chats"

    def __init__(self, app: AppState) -> None:
        super().__init__(app)
        self.chat = ChatService(app.data, app.user)

    def stream_url(self, room_id: str) -> str:
        return self.url(f"{settings.API_V1_STR}/chats/rooms/{room_id}/stream")

    async def render(self, room_id: Optional[str] = None) -> Dict[str, Any]:
        rooms = await self.chat.list_rooms()
        contacts = await self.data.users.list_contacts(self.user.id)
        active = None
        if room_id is None and rooms:
            room_id = rooms[0].id
        if room_id is not None:
            active = await self.room(room_id)
        return self.view(
            rooms=[room.model_dump(mode="json") for room in rooms],
            contacts=[c.model_dump(mode="json", include={"id", "email", "full_name", "avatar_url"}) for c in contacts],
            active_room=active,
        )

    async def room(self, room_id: str) -> Dict[str, Any]:
        room = await self.chat.get_room(room_id)
        messages = await self.chat.messages(room_id)
        return {
            "room": room.model_dump(mode="json"),
            "messages": [m.model_dump(mode="json") for m in messages],
            "stream_url": self.stream_url(room_id),
        }

    async def send(self, room_id: str, payload: MessageCreate) -> Dict[str, Any]:
        message = await self.chat.send(room_id, payload)
        return mutation_result(message.model_dump(mode="json"), "Message sent")

    async def create_room(self, payload: ChatRoomCreate) -> Dict[str, Any]:
        room = await self.chat.create_room(payload)
        return mutation_result(
            room.model_dump(mode="json"),
            f'Room "{room.name}" created',
            self.url(f"/chats?room={room.id}"),
        )
