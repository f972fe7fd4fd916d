"""Team chat."""

from typing import List, Optional

from projecthub.core.config import settings
from projecthub.data.base import DataAccess
from projecthub.middleware.exception import (
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from projecthub.models.enums import RoomType
from projecthub.schemas import (
    ChatMessageRecord,
    ChatRoomCreate,
    ChatRoomRecord,
    MessageCreate,
    UserRecord,
)
from projecthub.services.access import require_project


class ChatService:

    def __init__(self, data: DataAccess, user: UserRecord) -> None:
        self.data = data
        self.user = user

    async def list_rooms(self) -> List[ChatRoomRecord]:
        return await self.data.chat.list_rooms(self.user.id)

    async def get_room(self, room_id: str) -> ChatRoomRecord:
        room = await self.data.chat.get_room(room_id)
        if room is None:
            raise NotFoundException("Chat room", room_id)
        if self.user.id not in room.participant_ids and room.created_by != self.user.id:
            raise ForbiddenException("You are not a participant of this room")
        return room

    async def messages(self, room_id: str, limit: Optional[int] = None) -> List[ChatMessageRecord]:
        await self.get_room(room_id)
        return await self.data.chat.list_messages(room_id, limit or settings.CHAT_MESSAGE_LIMIT)

    async def send(self, room_id: str, payload: MessageCreate) -> ChatMessageRecord:
        await self.get_room(room_id)
        if payload.reply_to_id:
            recent = await self.data.chat.list_messages(room_id, limit=0)
            if not any(m.id == payload.reply_to_id for m in recent):
                raise ValidationException(
                    "Replied-to message is not in this room",
                    {"reply_to_id": payload.reply_to_id},
                )
        return await self.data.chat.send_message(
            room_id,
            self.user.id,
            payload.message,
            payload.reply_to_id,
        )

    async def create_room(self, payload: ChatRoomCreate) -> ChatRoomRecord:
        if payload.room_type == RoomType.PROJECT.value:
            await require_project(self.data, self.user, payload.project_id)
        for participant_id in payload.participant_ids:
            if await self.data.users.get(participant_id) is None:
                raise ValidationException(
                    "Unknown participant",
                    {"participant_id": participant_id},
                )
        if payload.room_type == RoomType.DIRECT.value and len(set(payload.participant_ids) - {self.user.id}) != 1:
            raise ValidationException("Direct rooms have exactly one other participant")
        return await self.data.chat.create_room(self.user.id, payload.model_dump())
