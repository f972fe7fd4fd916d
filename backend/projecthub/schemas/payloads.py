"""
Create/update payloads.

Validation happens here, before any data access is touched. Update
payloads are partial: only fields the client actually sent are applied
(``model_dump(exclude_unset=True)``).
"""

from datetime import date
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from projecthub.models.enums import (
    FileCategory,
    ProjectStatus,
    ProjectType,
    RoomType,
    TaskPriority,
    TaskStatus,
    UpdateType,
    Visibility,
)
from projecthub.services.priority import normalize_priority


class Payload(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True, str_strip_whitespace=True)

    def changes(self) -> Dict[str, Any]:
        """Fields explicitly provided by the caller."""
        return self.model_dump(exclude_unset=True)


def _check_date_range(start: Optional[date], end: Optional[date]) -> None:
    if start and end and end < start:
        raise ValueError("end_date must not be before start_date")


def _reject_nulls(payload: Payload, fields: Tuple[str, ...]) -> None:
    """An update may omit a required column but may not clear it."""
    cleared = [
        name for name in fields
        if name in payload.model_fields_set and getattr(payload, name) is None
    ]
    if cleared:
        raise ValueError(f"{', '.join(cleared)} cannot be null")


# =============================================================================
# Projects
# =============================================================================

class ProjectCreate(Payload):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    project_type: ProjectType
    status: ProjectStatus = ProjectStatus.PLANNING
    visibility: Visibility = Visibility.PRIVATE
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[float] = Field(None, ge=0)
    funding_source: Optional[str] = Field(None, max_length=255)
    cover_image_url: Optional[str] = None
    progress_percentage: int = Field(0, ge=0, le=100)

    @model_validator(mode="after")
    def check_dates(self) -> "ProjectCreate":
        _check_date_range(self.start_date, self.end_date)
        return self


class ProjectUpdate(Payload):
    REQUIRED: ClassVar[Tuple[str, ...]] = (
        "title", "project_type", "status", "visibility", "progress_percentage",
    )

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    project_type: Optional[ProjectType] = None
    status: Optional[ProjectStatus] = None
    visibility: Optional[Visibility] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[float] = Field(None, ge=0)
    funding_source: Optional[str] = Field(None, max_length=255)
    cover_image_url: Optional[str] = None
    progress_percentage: Optional[int] = Field(None, ge=0, le=100)

    @model_validator(mode="after")
    def check_dates(self) -> "ProjectUpdate":
        _reject_nulls(self, self.REQUIRED)
        _check_date_range(self.start_date, self.end_date)
        return self


# =============================================================================
# Tasks
# =============================================================================

class TaskCreate(Payload):
    project_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=5000)
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None
    assigned_to: Optional[str] = None

    @field_validator("priority", mode="before")
    @classmethod
    def parse_priority(cls, v: Any) -> Any:
        return normalize_priority(v)


class TaskUpdate(Payload):
    REQUIRED: ClassVar[Tuple[str, ...]] = ("title", "status", "priority")

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None
    assigned_to: Optional[str] = None

    @field_validator("priority", mode="before")
    @classmethod
    def parse_priority(cls, v: Any) -> Any:
        return normalize_priority(v) if v is not None else v

    @model_validator(mode="after")
    def check_required(self) -> "TaskUpdate":
        _reject_nulls(self, self.REQUIRED)
        return self


class TaskAssign(Payload):
    assigned_to: Optional[str] = None


class TaskStatusChange(Payload):
    status: TaskStatus


# =============================================================================
# Files, activity, members
# =============================================================================

class FileCreate(Payload):
    project_id: str = Field(..., min_length=1)
    task_id: Optional[str] = None
    file_name: str = Field(..., min_length=1, max_length=255)
    file_type: str = Field(..., min_length=1, max_length=127)
    file_size: int = Field(..., ge=0)
    category: FileCategory = FileCategory.OTHER
    caption: Optional[str] = Field(None, max_length=1000)
    file_url: Optional[str] = None


class UpdateCreate(Payload):
    project_id: str = Field(..., min_length=1)
    update_type: UpdateType = UpdateType.GENERAL
    update_text: str = Field(..., min_length=1, max_length=5000)
    metadata: Optional[Dict[str, Any]] = None


class MemberAdd(Payload):
    user_id: Optional[str] = None
    email: Optional[EmailStr] = None

    @model_validator(mode="after")
    def check_identifier(self) -> "MemberAdd":
        if not self.user_id and not self.email:
            raise ValueError("user_id or email is required")
        return self


# =============================================================================
# Chat
# =============================================================================

class ChatRoomCreate(Payload):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    room_type: RoomType = RoomType.GROUP
    project_id: Optional[str] = None
    participant_ids: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_project(self) -> "ChatRoomCreate":
        if self.room_type == RoomType.PROJECT.value and not self.project_id:
            raise ValueError("project rooms require project_id")
        return self


class MessageCreate(Payload):
    message: str = Field(..., min_length=1, max_length=5000)
    reply_to_id: Optional[str] = None


# =============================================================================
# Profile & auth
# =============================================================================

class ProfileUpdate(Payload):
    full_name: Optional[str] = Field(None, min_length=1, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    avatar_url: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class RegisterRequest(Payload):
    full_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


# =============================================================================
# Timeline
# =============================================================================

class GanttRow(Payload):
    """One bar of the project timeline, in the Gantt library's shape."""
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    start: date
    end: date
    progress: int = Field(0, ge=0, le=100)
    dependencies: str = ""

    @model_validator(mode="after")
    def check_dates(self) -> "GanttRow":
        if self.end < self.start:
            raise ValueError("end must not be before start")
        return self


class TimelineSave(Payload):
    rows: List[GanttRow] = Field(default_factory=list, max_length=100)


# =============================================================================
# Notifications
# =============================================================================

class NotificationsRead(Payload):
    ids: List[str] = Field(..., min_length=1, max_length=200)
