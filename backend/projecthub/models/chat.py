"""
Team chat models: rooms, their participants, and messages.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
)

from projecthub.db.base_class import Base, TimestampMixin, new_uuid, utcnow
from projecthub.models.enums import RoomType, values


class ChatRoom(TimestampMixin, Base):
    __tablename__ = "chat_rooms"
    __table_args__ = (
        CheckConstraint(f"room_type IN ({values(RoomType)})", name="ck_chat_rooms_type"),
    )

    id = Column(String(64), primary_key=True, default=new_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    room_type = Column(String(16), nullable=False)
    project_id = Column(
        String(64),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    created_by = Column(
        String(64),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    last_message_at = Column(DateTime(timezone=True), nullable=True)
    is_archived = Column(Boolean, nullable=False, default=False)


class ChatParticipant(Base):
    __tablename__ = "chat_participants"
    __table_args__ = (
        UniqueConstraint("room_id", "user_id", name="uq_chat_participants_room_user"),
    )

    id = Column(String(64), primary_key=True, default=new_uuid)
    room_id = Column(
        String(64),
        ForeignKey("chat_rooms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        String(64),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    joined_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_read_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class ChatMessage(Base):
    """Append-only chat message."""

    __tablename__ = "chat_messages"

    id = Column(String(64), primary_key=True, default=new_uuid)
    room_id = Column(
        String(64),
        ForeignKey("chat_rooms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        String(64),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    message = Column(Text, nullable=False)
    reply_to_id = Column(
        String(64),
        ForeignKey("chat_messages.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
