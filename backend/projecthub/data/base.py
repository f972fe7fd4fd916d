"""
Data Access Interface

Every page talks to exactly one :class:`DataAccess` per request: the
in-memory demo store or the relational gateway. Both expose the same
repositories and return the same record classes, so nothing above this
layer needs to know which mode is active.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from projecthub.core.logging import get_logger
from projecthub.schemas import (
    ChatMessageRecord,
    ChatRoomRecord,
    FileRecord,
    MemberRecord,
    ProjectRecord,
    TaskRecord,
    UpdateRecord,
    UserRecord,
)

logger = get_logger(__name__)


class SessionMode(str, Enum):
    """Which data source a request is served from."""
    DEMO = "demo"
    REAL = "real"


class Repository(ABC):
    """Common bookkeeping for every repository."""

    collection: str = "base"

    def __init__(self, mode: SessionMode) -> None:
        self.mode = mode
        self._call_count = 0
        self._last_called: Optional[str] = None

    def _log_call(self, method: str, **kwargs: Any) -> None:
        self._call_count += 1
        self._last_called = datetime.now(timezone.utc).isoformat()
        logger.debug(
            "Data access call",
            collection=self.collection,
            method=method,
            mode=self.mode.value,
            **kwargs,
        )

    def stats(self) -> Dict[str, Any]:
        return {
            "collection": self.collection,
            "calls": self._call_count,
            "last_called": self._last_called,
        }


class UserRepository(Repository):
    collection = "profiles"

    @abstractmethod
    async def get(self, user_id: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def get_credentials(self, email: str) -> Optional[Tuple[UserRecord, Optional[str]]]:
        """The account for an email together with its stored password hash."""

    @abstractmethod
    async def create(self, fields: Dict[str, Any]) -> UserRecord:
        """Store a new profile; ``fields`` may carry ``password_hash``."""

    @abstractmethod
    async def list_contacts(self, user_id: str) -> List[UserRecord]:
        """Every other user the given user can collaborate with."""

    @abstractmethod
    async def update(self, user_id: str, changes: Dict[str, Any]) -> Optional[UserRecord]:
        ...


class ProjectRepository(Repository):
    collection = "projects"

    @abstractmethod
    async def list(self, owner_id: str) -> List[ProjectRecord]:
        """Projects the user owns or is a member of, newest first."""

    @abstractmethod
    async def get(self, project_id: str) -> Optional[ProjectRecord]:
        ...

    @abstractmethod
    async def create(self, owner_id: str, fields: Dict[str, Any]) -> ProjectRecord:
        ...

    @abstractmethod
    async def update(self, project_id: str, changes: Dict[str, Any]) -> Optional[ProjectRecord]:
        ...

    @abstractmethod
    async def delete(self, project_id: str, owner_id: str) -> bool:
        """
        Delete a project the caller owns together with its tasks, files,
        activity, memberships and project chat rooms.

        Returns False when the project does not exist or belongs to
        somebody else.
        """


class TaskRepository(Repository):
    collection = "tasks"

    @abstractmethod
    async def list(self, project_id: str) -> List[TaskRecord]:
        """Tasks of one project, oldest first."""

    @abstractmethod
    async def get(self, task_id: str) -> Optional[TaskRecord]:
        ...

    @abstractmethod
    async def create(self, fields: Dict[str, Any]) -> TaskRecord:
        ...

    @abstractmethod
    async def update(self, task_id: str, changes: Dict[str, Any]) -> Optional[TaskRecord]:
        ...

    @abstractmethod
    async def delete(self, task_id: str) -> bool:
        """Delete a task; files attached to it are kept and detached."""


class FileRepository(Repository):
    collection = "project_files"

    @abstractmethod
    async def list(self, project_id: str, category: Optional[str] = None) -> List[FileRecord]:
        """Files of one project, newest first."""

    @abstractmethod
    async def get(self, file_id: str) -> Optional[FileRecord]:
        ...

    @abstractmethod
    async def create(self, uploader_id: str, fields: Dict[str, Any]) -> FileRecord:
        ...

    @abstractmethod
    async def update(self, file_id: str, changes: Dict[str, Any]) -> Optional[FileRecord]:
        ...

    @abstractmethod
    async def delete(self, file_id: str) -> bool:
        ...


class UpdateRepository(Repository):
    """Project activity. Append-only: there is no update or delete."""

    collection = "project_updates"

    @abstractmethod
    async def list(self, project_id: str, limit: Optional[int] = None) -> List[UpdateRecord]:
        """Activity of one project, newest first."""

    @abstractmethod
    async def create(self, user_id: str, fields: Dict[str, Any]) -> UpdateRecord:
        ...


class MemberRepository(Repository):
    collection = "project_members"

    @abstractmethod
    async def list(self, project_id: str) -> List[MemberRecord]:
        """The owner (first, role ``owner``) followed by the members."""

    @abstractmethod
    async def add(self, project_id: str, user_id: str) -> MemberRecord:
        ...

    @abstractmethod
    async def remove(self, project_id: str, user_id: str) -> bool:
        ...


class ChatRepository(Repository):
    collection = "chat_rooms"

    @abstractmethod
    async def list_rooms(self, user_id: str) -> List[ChatRoomRecord]:
        """Rooms the user participates in, most recently active first."""

    @abstractmethod
    async def get_room(self, room_id: str) -> Optional[ChatRoomRecord]:
        ...

    @abstractmethod
    async def create_room(self, creator_id: str, fields: Dict[str, Any]) -> ChatRoomRecord:
        ...

    @abstractmethod
    async def list_messages(self, room_id: str, limit: int = 50) -> List[ChatMessageRecord]:
        """The latest ``limit`` messages, oldest first."""

    @abstractmethod
    async def send_message(
        self,
        room_id: str,
        user_id: str,
        message: str,
        reply_to_id: Optional[str] = None,
    ) -> ChatMessageRecord:
        ...


class DataAccess(ABC):
    """
    One request's view of the data.

    Attributes are the per-collection repositories; ``mode`` says which
    implementation is behind them.
    """

    mode: SessionMode

    users: UserRepository
    projects: ProjectRepository
    tasks: TaskRepository
    files: FileRepository
    updates: UpdateRepository
    members: MemberRepository
    chat: ChatRepository

    @property
    def is_demo(self) -> bool:
        return self.mode == SessionMode.DEMO

    def repositories(self) -> Sequence[Repository]:
        return (
            self.users,
            self.projects,
            self.tasks,
            self.files,
            self.updates,
            self.members,
            self.chat,
        )

    def health_check(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "healthy": True,
            "repositories": [repo.stats() for repo in self.repositories()],
        }

    async def close(self) -> None:
        """Release per-request resources."""
