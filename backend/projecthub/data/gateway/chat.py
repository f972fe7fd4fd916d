"""Relational chat repository."""

from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func, or_, select

from projecthub.data.base import ChatRepository
from projecthub.data.gateway.base import GatewayMixin, to_record
from projecthub.db.base_class import utcnow
from projecthub.models import ChatMessage, ChatParticipant, ChatRoom
from projecthub.schemas import ChatMessageRecord, ChatRoomRecord


class GatewayChatRepository(GatewayMixin, ChatRepository):

    async def _participants(self, room_ids: Sequence[str]) -> Dict[str, List[str]]:
        if not room_ids:
            return {}
        query = (
            select(ChatParticipant.room_id, ChatParticipant.user_id)
            .where(ChatParticipant.room_id.in_(room_ids))
            .order_by(ChatParticipant.joined_at)
        )
        by_room: Dict[str, List[str]] = defaultdict(list)
        for room_id, user_id in (await self.db.execute(query)).all():
            by_room[room_id].append(user_id)
        return by_room

    async def list_rooms(self, user_id: str) -> List[ChatRoomRecord]:
        self._log_call("list_rooms", user_id=user_id)
        joined = select(ChatParticipant.room_id).where(ChatParticipant.user_id == user_id)
        query = (
            select(ChatRoom)
            .where(or_(ChatRoom.id.in_(joined), ChatRoom.created_by == user_id))
            .order_by(func.coalesce(ChatRoom.last_message_at, ChatRoom.created_at).desc())
        )

        async def fetch():
            rooms = (await self.db.execute(query)).scalars().all()
            return rooms, await self._participants([room.id for room in rooms])

        rooms, participants = await self._read(fetch)
        return [
            to_record(ChatRoomRecord, room, participant_ids=participants.get(room.id, []))
            for room in rooms
        ]

    async def get_room(self, room_id: str) -> Optional[ChatRoomRecord]:
        self._log_call("get_room", room_id=room_id)

        async def fetch():
            room = await self.db.get(ChatRoom, room_id)
            if room is None:
                return None, {}
            return room, await self._participants([room_id])

        room, participants = await self._read(fetch)
        if room is None:
            return None
        return to_record(ChatRoomRecord, room, participant_ids=participants.get(room_id, []))

    async def create_room(self, creator_id: str, fields: Dict[str, Any]) -> ChatRoomRecord:
        self._log_call("create_room", creator_id=creator_id)
        values = dict(fields)
        participant_ids = list(dict.fromkeys([creator_id, *values.pop("participant_ids", [])]))

        async def insert():
            room = ChatRoom(**values, created_by=creator_id)
            self.db.add(room)
            await self.db.flush()
            for participant_id in participant_ids:
                self.db.add(ChatParticipant(room_id=room.id, user_id=participant_id))
            await self.db.flush()
            return room

        room = await self._write(insert, refresh=True)
        return to_record(ChatRoomRecord, room, participant_ids=participant_ids)

    async def list_messages(self, room_id: str, limit: int = 50) -> List[ChatMessageRecord]:
        self._log_call("list_messages", room_id=room_id, limit=limit)
        query = (
            select(ChatMessage)
            .where(ChatMessage.room_id == room_id)
            .order_by(ChatMessage.created_at.desc())
        )
        if limit:
            query = query.limit(limit)

        async def fetch():
            return (await self.db.execute(query)).scalars().all()

        latest = [to_record(ChatMessageRecord, m) for m in await self._read(fetch)]
        return list(reversed(latest))

    async def send_message(
        self,
        room_id: str,
        user_id: str,
        message: str,
        reply_to_id: Optional[str] = None,
    ) -> ChatMessageRecord:
        self._log_call("send_message", room_id=room_id)

        async def insert():
            now = utcnow()
            entry = ChatMessage(
                room_id=room_id,
                user_id=user_id,
                message=message,
                reply_to_id=reply_to_id,
                created_at=now,
            )
            self.db.add(entry)
            room = await self.db.get(ChatRoom, room_id)
            if room is not None:
                room.last_message_at = now
            await self.db.flush()
            return entry

        entry = await self._write(insert, refresh=True)
        record = to_record(ChatMessageRecord, entry)
        self._publish("chat_messages", record)
        return record
