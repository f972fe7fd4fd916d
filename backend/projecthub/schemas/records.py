"""
Entity records.

Both data-access implementations return these classes, so a demo-mode
project and a backend project always have the same fields.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from typing_extensions import Annotated

from projecthub.models.enums import (
    FileCategory,
    MemberRole,
    ProjectStatus,
    ProjectType,
    RoomType,
    TaskPriority,
    TaskStatus,
    UpdateType,
    UserRole,
    Visibility,
)


def _ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UTCDateTime = Annotated[datetime, AfterValidator(_ensure_utc)]


class Record(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True, validate_default=True)


class UserRecord(Record):
    id: str
    email: str
    full_name: Optional[str] = None
    role: UserRole = UserRole.USER
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    created_at: Optional[UTCDateTime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


class ProjectRecord(Record):
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    project_type: ProjectType
    status: ProjectStatus = ProjectStatus.PLANNING
    visibility: Visibility = Visibility.PRIVATE
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[float] = None
    funding_source: Optional[str] = None
    cover_image_url: Optional[str] = None
    progress_percentage: int = Field(default=0, ge=0, le=100)
    created_at: UTCDateTime
    updated_at: UTCDateTime

    @field_validator("budget", mode="before")
    @classmethod
    def coerce_budget(cls, v: Any) -> Any:
        if isinstance(v, Decimal):
            return float(v)
        return v


class TaskRecord(Record):
    id: str
    project_id: str
    title: str
    description: Optional[str] = ""
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None
    assigned_to: Optional[str] = None
    created_at: UTCDateTime
    updated_at: UTCDateTime


class FileRecord(Record):
    id: str
    project_id: str
    task_id: Optional[str] = None
    file_name: str
    category: FileCategory = FileCategory.OTHER
    file_size: Optional[int] = None
    file_type: str
    file_url: str
    caption: Optional[str] = None
    uploaded_by: Optional[str] = None
    uploaded_at: UTCDateTime


class UpdateRecord(Record):
    id: str
    project_id: str
    user_id: Optional[str] = None
    update_type: UpdateType = UpdateType.GENERAL
    update_text: str
    metadata: Optional[Dict[str, Any]] = None
    created_at: UTCDateTime


class MemberRecord(Record):
    id: str
    project_id: str
    user_id: str
    role: MemberRole = MemberRole.MEMBER
    created_at: Optional[UTCDateTime] = None
    user: Optional[UserRecord] = None


class ChatRoomRecord(Record):
    id: str
    name: str
    description: Optional[str] = None
    room_type: RoomType
    project_id: Optional[str] = None
    created_by: str
    participant_ids: List[str] = Field(default_factory=list)
    created_at: UTCDateTime
    last_message_at: Optional[UTCDateTime] = None


class ChatMessageRecord(Record):
    id: str
    room_id: str
    user_id: str
    message: str
    reply_to_id: Optional[str] = None
    created_at: UTCDateTime
