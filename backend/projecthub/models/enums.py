import enum


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class ProjectType(str, enum.Enum):
    ACADEMIC = "Academic & Research"
    CORPORATE = "Corporate/Business"
    EU_FUNDED = "EU-Funded Project"
    PUBLIC = "Public Initiative"
    PERSONAL = "Personal/Other"


class ProjectStatus(str, enum.Enum):
    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"
    ARCHIVED = "archived"


class Visibility(str, enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class TaskStatus(str, enum.Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FileCategory(str, enum.Enum):
    IMAGE = "image"
    DOCUMENT = "document"
    DELIVERABLE = "deliverable"
    REPORT = "report"
    OTHER = "other"


class UpdateType(str, enum.Enum):
    GENERAL = "general"
    MILESTONE = "milestone"
    TASK_COMPLETED = "task_completed"
    TASK_CREATED = "task_created"
    TASK_ASSIGNED = "task_assigned"
    FILE_UPLOADED = "file_uploaded"
    STATUS_CHANGED = "status_changed"
    MEMBER_ADDED = "member_added"
    MEMBER_REMOVED = "member_removed"


class MemberRole(str, enum.Enum):
    OWNER = "owner"
    MEMBER = "member"


class RoomType(str, enum.Enum):
    PROJECT = "project"
    DIRECT = "direct"
    GROUP = "group"


def values(enum_cls) -> str:
    """Render enum values for a SQL ``IN (...)`` check constraint."""
    return ", ".join(f"'{member.value}'" for member in enum_cls)
