"""Models package."""

from projecthub.models.chat import ChatMessage, ChatParticipant, ChatRoom
from projecthub.models.file import ProjectFile
from projecthub.models.profile import Profile
from projecthub.models.project import Project, ProjectMember
from projecthub.models.task import Task
from projecthub.models.update import ProjectUpdate

__all__ = [
    "ChatMessage",
    "ChatParticipant",
    "ChatRoom",
    "Profile",
    "Project",
    "ProjectFile",
    "ProjectMember",
    "ProjectUpdate",
    "Task",
]
