"""Request payloads and entity records."""

from projecthub.schemas.payloads import (
    ChatRoomCreate,
    FileCreate,
    GanttRow,
    LoginRequest,
    MemberAdd,
    MessageCreate,
    NotificationsRead,
    ProfileUpdate,
    ProjectCreate,
    ProjectUpdate,
    RegisterRequest,
    TaskAssign,
    TaskCreate,
    TaskStatusChange,
    TaskUpdate,
    TimelineSave,
    UpdateCreate,
)
from projecthub.schemas.records import (
    ChatMessageRecord,
    ChatRoomRecord,
    FileRecord,
    MemberRecord,
    ProjectRecord,
    TaskRecord,
    UpdateRecord,
    UserRecord,
)

__all__ = [
    "ChatMessageRecord",
    "ChatRoomCreate",
    "ChatRoomRecord",
    "FileCreate",
    "FileRecord",
    "GanttRow",
    "LoginRequest",
    "MemberAdd",
    "MemberRecord",
    "MessageCreate",
    "NotificationsRead",
    "ProfileUpdate",
    "ProjectCreate",
    "ProjectRecord",
    "ProjectUpdate",
    "RegisterRequest",
    "TaskAssign",
    "TaskCreate",
    "TaskRecord",
    "TaskStatusChange",
    "TaskUpdate",
    "TimelineSave",
    "UpdateCreate",
    "UpdateRecord",
    "UserRecord",
]
