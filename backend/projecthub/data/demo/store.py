"""
Demo Data Store

In-memory implementation of :class:`~projecthub.data.base.DataAccess`.
A store is built from the seed for every request, so whatever a demo
visitor creates or deletes disappears with the next page load.
"""

import secrets
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel

from projecthub.data.base import (
    ChatRepository,
    DataAccess,
    FileRepository,
    MemberRepository,
    ProjectRepository,
    SessionMode,
    TaskRepository,
    UpdateRepository,
    UserRepository,
)
from projecthub.data.demo.seed import build_seed
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
from projecthub.services.realtime import ChangeBroker

R = TypeVar("R", bound=BaseModel)

PROFILE_FIELDS = ("full_name", "bio", "avatar_url")


class DemoStore:
    """The raw demo collections, keyed by id in insertion order."""

    def __init__(
        self,
        seed: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        broker: Optional[ChangeBroker] = None,
    ) -> None:
        seed = seed if seed is not None else build_seed()
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {
            name: {row["id"]: row for row in rows}
            for name, rows in seed.items()
        }
        self.broker = broker

    def __getitem__(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self.collections.setdefault(name, {})

    @staticmethod
    def new_id(prefix: str) -> str:
        """``<prefix>-<epoch ms>-<random>``; unique within a store."""
        return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(3)}"

    @staticmethod
    def now() -> datetime:
        return datetime.now(timezone.utc)

    def publish(self, table: str, record: BaseModel) -> None:
        if self.broker is not None:
            self.broker.publish(SessionMode.DEMO.value, table, record.model_dump(mode="json"))

    def counts(self) -> Dict[str, int]:
        return {name: len(rows) for name, rows in self.collections.items()}


def _records(model: Type[R], rows: List[Dict[str, Any]]) -> List[R]:
    return [model.model_validate(row) for row in rows]


def _sorted(records: List[R], key: Callable[[R], Any], newest_first: bool) -> List[R]:
    return sorted(records, key=key, reverse=newest_first)


# =============================================================================
# Repositories
# =============================================================================

class DemoUserRepository(UserRepository):

    def __init__(self, store: DemoStore) -> None:
        super().__init__(SessionMode.DEMO)
        self.store = store

    async def get(self, user_id: str) -> Optional[UserRecord]:
        self._log_call("get", user_id=user_id)
        row = self.store["users"].get(user_id)
        return UserRecord.model_validate(row) if row else None

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        self._log_call("get_by_email")
        email = email.strip().lower()
        for row in self.store["users"].values():
            if row["email"].lower() == email:
                return UserRecord.model_validate(row)
        return None

    async def get_credentials(self, email: str) -> Optional[Tuple[UserRecord, Optional[str]]]:
        self._log_call("get_credentials")
        email = email.strip().lower()
        for row in self.store["users"].values():
            if row["email"].lower() == email:
                return UserRecord.model_validate(row), row.get("password_hash")
        return None

    async def create(self, fields: Dict[str, Any]) -> UserRecord:
        now = self.store.now()
        row = {
            "id": self.store.new_id("user"),
            "email": fields["email"].strip().lower(),
            "full_name": fields.get("full_name"),
            "password_hash": fields.get("password_hash"),
            "role": "user",
            "created_at": now,
        }
        self._log_call("create", user_id=row["id"])
        self.store["users"][row["id"]] = row
        return UserRecord.model_validate(row)

    async def list_contacts(self, user_id: str) -> List[UserRecord]:
        self._log_call("list_contacts", user_id=user_id)
        rows = [row for uid, row in self.store["users"].items() if uid != user_id]
        return sorted(_records(UserRecord, rows), key=lambda u: (u.full_name or u.email).lower())

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Optional[UserRecord]:
        self._log_call("update", user_id=user_id)
        row = self.store["users"].get(user_id)
        if row is None:
            return None
        row.update({k: v for k, v in changes.items() if k in PROFILE_FIELDS})
        return UserRecord.model_validate(row)


class DemoProjectRepository(ProjectRepository):

    def __init__(self, store: DemoStore) -> None:
        super().__init__(SessionMode.DEMO)
        self.store = store

    def _visible_ids(self, user_id: str) -> set:
        member_of = {
            m["project_id"] for m in self.store["members"].values() if m["user_id"] == user_id
        }
        return {
            pid for pid, row in self.store["projects"].items()
            if row["user_id"] == user_id or pid in member_of
        }

    async def list(self, owner_id: str) -> List[ProjectRecord]:
        self._log_call("list", owner_id=owner_id)
        visible = self._visible_ids(owner_id)
        rows = [row for pid, row in self.store["projects"].items() if pid in visible]
        return _sorted(_records(ProjectRecord, rows), lambda p: p.created_at, newest_first=True)

    async def get(self, project_id: str) -> Optional[ProjectRecord]:
        self._log_call("get", project_id=project_id)
        row = self.store["projects"].get(project_id)
        return ProjectRecord.model_validate(row) if row else None

    async def create(self, owner_id: str, fields: Dict[str, Any]) -> ProjectRecord:
        now = self.store.now()
        row = {
            "status": "planning",
            "visibility": "private",
            "progress_percentage": 0,
            **fields,
            "id": self.store.new_id("proj"),
            "user_id": owner_id,
            "created_at": now,
            "updated_at": now,
        }
        self._log_call("create", project_id=row["id"])
        record = ProjectRecord.model_validate(row)
        self.store["projects"][record.id] = row
        return record

    async def update(self, project_id: str, changes: Dict[str, Any]) -> Optional[ProjectRecord]:
        self._log_call("update", project_id=project_id)
        row = self.store["projects"].get(project_id)
        if row is None:
            return None
        candidate = {**row, **changes, "id": row["id"], "user_id": row["user_id"],
                     "updated_at": self.store.now()}
        record = ProjectRecord.model_validate(candidate)
        self.store["projects"][project_id] = candidate
        return record

    async def delete(self, project_id: str, owner_id: str) -> bool:
        self._log_call("delete", project_id=project_id)
        row = self.store["projects"].get(project_id)
        if row is None or row["user_id"] != owner_id:
            return False

        for name in ("tasks", "files", "updates", "members"):
            collection = self.store[name]
            for rid in [rid for rid, r in collection.items() if r["project_id"] == project_id]:
                del collection[rid]

        rooms = self.store["rooms"]
        room_ids = [rid for rid, r in rooms.items() if r.get("project_id") == project_id]
        messages = self.store["messages"]
        for mid in [mid for mid, m in messages.items() if m["room_id"] in room_ids]:
            del messages[mid]
        for rid in room_ids:
            del rooms[rid]

        del self.store["projects"][project_id]
        return True


class DemoTaskRepository(TaskRepository):

    def __init__(self, store: DemoStore) -> None:
        super().__init__(SessionMode.DEMO)
        self.store = store

    async def list(self, project_id: str) -> List[TaskRecord]:
        self._log_call("list", project_id=project_id)
        rows = [r for r in self.store["tasks"].values() if r["project_id"] == project_id]
        return _sorted(_records(TaskRecord, rows), lambda t: t.created_at, newest_first=False)

    async def get(self, task_id: str) -> Optional[TaskRecord]:
        self._log_call("get", task_id=task_id)
        row = self.store["tasks"].get(task_id)
        return TaskRecord.model_validate(row) if row else None

    async def create(self, fields: Dict[str, Any]) -> TaskRecord:
        now = self.store.now()
        row = {
            "description": "",
            "status": "todo",
            "priority": "medium",
            **fields,
            "id": self.store.new_id("task"),
            "created_at": now,
            "updated_at": now,
        }
        self._log_call("create", task_id=row["id"], project_id=row.get("project_id"))
        record = TaskRecord.model_validate(row)
        self.store["tasks"][record.id] = row
        return record

    async def update(self, task_id: str, changes: Dict[str, Any]) -> Optional[TaskRecord]:
        self._log_call("update", task_id=task_id)
        row = self.store["tasks"].get(task_id)
        if row is None:
            return None
        candidate = {**row, **changes, "id": row["id"], "project_id": row["project_id"],
                     "updated_at": self.store.now()}
        record = TaskRecord.model_validate(candidate)
        self.store["tasks"][task_id] = candidate
        return record

    async def delete(self, task_id: str) -> bool:
        self._log_call("delete", task_id=task_id)
        if self.store["tasks"].pop(task_id, None) is None:
            return False
        for row in self.store["files"].values():
            if row.get("task_id") == task_id:
                row["task_id"] = None
        return True


class DemoFileRepository(FileRepository):

    def __init__(self, store: DemoStore) -> None:
        super().__init__(SessionMode.DEMO)
        self.store = store

    async def list(self, project_id: str, category: Optional[str] = None) -> List[FileRecord]:
        self._log_call("list", project_id=project_id, category=category)
        rows = [
            r for r in self.store["files"].values()
            if r["project_id"] == project_id and (category is None or r["category"] == category)
        ]
        return _sorted(_records(FileRecord, rows), lambda f: f.uploaded_at, newest_first=True)

    async def get(self, file_id: str) -> Optional[FileRecord]:
        self._log_call("get", file_id=file_id)
        row = self.store["files"].get(file_id)
        return FileRecord.model_validate(row) if row else None

    async def create(self, uploader_id: str, fields: Dict[str, Any]) -> FileRecord:
        row = {
            "category": "other",
            "caption": "",
            "task_id": None,
            **fields,
            "id": self.store.new_id("file"),
            "uploaded_by": uploader_id,
            "uploaded_at": self.store.now(),
        }
        if not row.get("file_url"):
            row["file_url"] = "#"
        self._log_call("create", file_id=row["id"], project_id=row.get("project_id"))
        record = FileRecord.model_validate(row)
        self.store["files"][record.id] = row
        return record

    async def update(self, file_id: str, changes: Dict[str, Any]) -> Optional[FileRecord]:
        self._log_call("update", file_id=file_id)
        row = self.store["files"].get(file_id)
        if row is None:
            return None
        candidate = {**row, **changes, "id": row["id"], "project_id": row["project_id"]}
        record = FileRecord.model_validate(candidate)
        self.store["files"][file_id] = candidate
        return record

    async def delete(self, file_id: str) -> bool:
        self._log_call("delete", file_id=file_id)
        return self.store["files"].pop(file_id, None) is not None


class DemoUpdateRepository(UpdateRepository):

    def __init__(self, store: DemoStore) -> None:
        super().__init__(SessionMode.DEMO)
        self.store = store

    async def list(self, project_id: str, limit: Optional[int] = None) -> List[UpdateRecord]:
        self._log_call("list", project_id=project_id, limit=limit)
        rows = [r for r in self.store["updates"].values() if r["project_id"] == project_id]
        records = _sorted(_records(UpdateRecord, rows), lambda u: u.created_at, newest_first=True)
        return records[:limit] if limit else records

    async def create(self, user_id: str, fields: Dict[str, Any]) -> UpdateRecord:
        row = {
            "update_type": "general",
            **fields,
            "metadata": fields.get("metadata") or {},
            "id": self.store.new_id("upd"),
            "user_id": user_id,
            "created_at": self.store.now(),
        }
        self._log_call("create", update_id=row["id"], project_id=row.get("project_id"))
        record = UpdateRecord.model_validate(row)
        self.store["updates"][record.id] = row
        self.store.publish("project_updates", record)
        return record


class DemoMemberRepository(MemberRepository):

    def __init__(self, store: DemoStore) -> None:
        super().__init__(SessionMode.DEMO)
        self.store = store

    def _user(self, user_id: str) -> Optional[UserRecord]:
        row = self.store["users"].get(user_id)
        return UserRecord.model_validate(row) if row else None

    async def list(self, project_id: str) -> List[MemberRecord]:
        self._log_call("list", project_id=project_id)
        project = self.store["projects"].get(project_id)
        if project is None:
            return []
        owner = MemberRecord(
            id=f"owner-{project_id}",
            project_id=project_id,
            user_id=project["user_id"],
            role="owner",
            created_at=project["created_at"],
            user=self._user(project["user_id"]),
        )
        rows = [r for r in self.store["members"].values() if r["project_id"] == project_id]
        members = sorted(
            (
                MemberRecord.model_validate({**row, "user": self._user(row["user_id"])})
                for row in rows
            ),
            key=lambda m: m.created_at,
        )
        return [owner] + members

    async def add(self, project_id: str, user_id: str) -> MemberRecord:
        self._log_call("add", project_id=project_id, user_id=user_id)
        for row in self.store["members"].values():
            if row["project_id"] == project_id and row["user_id"] == user_id:
                return MemberRecord.model_validate({**row, "user": self._user(user_id)})
        row = {
            "id": self.store.new_id("member"),
            "project_id": project_id,
            "user_id": user_id,
            "role": "member",
            "created_at": self.store.now(),
        }
        self.store["members"][row["id"]] = row
        return MemberRecord.model_validate({**row, "user": self._user(user_id)})

    async def remove(self, project_id: str, user_id: str) -> bool:
        self._log_call("remove", project_id=project_id, user_id=user_id)
        for rid, row in list(self.store["members"].items()):
            if row["project_id"] == project_id and row["user_id"] == user_id:
                del self.store["members"][rid]
                return True
        return False


class DemoChatRepository(ChatRepository):

    def __init__(self, store: DemoStore) -> None:
        super().__init__(SessionMode.DEMO)
        self.store = store

    async def list_rooms(self, user_id: str) -> List[ChatRoomRecord]:
        self._log_call("list_rooms", user_id=user_id)
        rows = [
            r for r in self.store["rooms"].values()
            if user_id in r.get("participant_ids", []) or r["created_by"] == user_id
        ]
        return _sorted(
            _records(ChatRoomRecord, rows),
            lambda r: r.last_message_at or r.created_at,
            newest_first=True,
        )

    async def get_room(self, room_id: str) -> Optional[ChatRoomRecord]:
        self._log_call("get_room", room_id=room_id)
        row = self.store["rooms"].get(room_id)
        return ChatRoomRecord.model_validate(row) if row else None

    async def create_room(self, creator_id: str, fields: Dict[str, Any]) -> ChatRoomRecord:
        participants = list(dict.fromkeys([creator_id, *fields.get("participant_ids", [])]))
        row = {
            **fields,
            "id": self.store.new_id("room"),
            "created_by": creator_id,
            "participant_ids": participants,
            "created_at": self.store.now(),
            "last_message_at": None,
        }
        self._log_call("create_room", room_id=row["id"])
        record = ChatRoomRecord.model_validate(row)
        self.store["rooms"][record.id] = row
        return record

    async def list_messages(self, room_id: str, limit: int = 50) -> List[ChatMessageRecord]:
        self._log_call("list_messages", room_id=room_id, limit=limit)
        rows = [m for m in self.store["messages"].values() if m["room_id"] == room_id]
        records = _sorted(_records(ChatMessageRecord, rows), lambda m: m.created_at, newest_first=False)
        return records[-limit:] if limit else records

    async def send_message(
        self,
        room_id: str,
        user_id: str,
        message: str,
        reply_to_id: Optional[str] = None,
    ) -> ChatMessageRecord:
        now = self.store.now()
        row = {
            "id": self.store.new_id("msg"),
            "room_id": room_id,
            "user_id": user_id,
            "message": message,
            "reply_to_id": reply_to_id,
            "created_at": now,
        }
        self._log_call("send_message", room_id=room_id, message_id=row["id"])
        record = ChatMessageRecord.model_validate(row)
        self.store["messages"][record.id] = row
        room = self.store["rooms"].get(room_id)
        if room is not None:
            room["last_message_at"] = now
        self.store.publish("chat_messages", record)
        return record


class DemoDataAccess(DataAccess):
    """Demo-mode data access over a private :class:`DemoStore`."""

    mode = SessionMode.DEMO

    def __init__(self, store: Optional[DemoStore] = None, broker: Optional[ChangeBroker] = None) -> None:
        self.store = store or DemoStore(broker=broker)
        self.users = DemoUserRepository(self.store)
        self.projects = DemoProjectRepository(self.store)
        self.tasks = DemoTaskRepository(self.store)
        self.files = DemoFileRepository(self.store)
        self.updates = DemoUpdateRepository(self.store)
        self.members = DemoMemberRepository(self.store)
        self.chat = DemoChatRepository(self.store)

    def health_check(self) -> Dict[str, Any]:
        return {**super().health_check(), "collections": self.store.counts()}
