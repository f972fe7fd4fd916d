"""
Relational repositories for users, projects and everything hanging off a
project (tasks, files, activity, memberships).
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, or_, select, update

from projecthub.data.base import (
    FileRepository,
    MemberRepository,
    ProjectRepository,
    TaskRepository,
    UpdateRepository,
    UserRepository,
)
from projecthub.data.gateway.base import GatewayMixin, row_to_dict, to_record
from projecthub.db.base_class import utcnow
from projecthub.models import (
    ChatMessage,
    ChatParticipant,
    ChatRoom,
    Profile,
    Project,
    ProjectFile,
    ProjectMember,
    ProjectUpdate,
    Task,
)
from projecthub.models.enums import MemberRole, UserRole
from projecthub.schemas import (
    FileRecord,
    MemberRecord,
    ProjectRecord,
    TaskRecord,
    UpdateRecord,
    UserRecord,
)

PROFILE_FIELDS = ("full_name", "bio", "avatar_url")


def _apply(obj: Any, changes: Dict[str, Any], protected: tuple = ("id",)) -> None:
    for key, value in changes.items():
        if key not in protected:
            setattr(obj, key, value)


class GatewayUserRepository(GatewayMixin, UserRepository):

    async def get(self, user_id: str) -> Optional[UserRecord]:
        self._log_call("get", user_id=user_id)
        profile = await self._read(lambda: self.db.get(Profile, user_id))
        return to_record(UserRecord, profile) if profile else None

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        self._log_call("get_by_email")
        profile = await self._profile_by_email(email)
        return to_record(UserRecord, profile) if profile else None

    async def get_credentials(self, email: str) -> Optional[Tuple[UserRecord, Optional[str]]]:
        self._log_call("get_credentials")
        profile = await self._profile_by_email(email)
        if profile is None:
            return None
        return to_record(UserRecord, profile), profile.password_hash

    async def _profile_by_email(self, email: str) -> Optional[Profile]:
        query = select(Profile).where(func.lower(Profile.email) == email.strip().lower())

        async def fetch():
            return (await self.db.execute(query)).scalar_one_or_none()

        return await self._read(fetch)

    async def create(self, fields: Dict[str, Any]) -> UserRecord:
        self._log_call("create")

        async def insert():
            profile = Profile(
                email=fields["email"].strip().lower(),
                full_name=fields.get("full_name"),
                password_hash=fields.get("password_hash"),
                role=UserRole.USER.value,
            )
            self.db.add(profile)
            await self.db.flush()
            return profile

        profile = await self._write(insert, refresh=True)
        return to_record(UserRecord, profile)

    async def list_contacts(self, user_id: str) -> List[UserRecord]:
        self._log_call("list_contacts", user_id=user_id)
        query = select(Profile).where(Profile.id != user_id)

        async def fetch():
            return (await self.db.execute(query)).scalars().all()

        profiles = await self._read(fetch)
        records = [to_record(UserRecord, p) for p in profiles]
        return sorted(records, key=lambda u: (u.full_name or u.email).lower())

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Optional[UserRecord]:
        self._log_call("update", user_id=user_id)

        async def apply():
            profile = await self.db.get(Profile, user_id)
            if profile is not None:
                _apply(profile, {k: v for k, v in changes.items() if k in PROFILE_FIELDS})
            return profile

        profile = await self._write(apply, refresh=True)
        return to_record(UserRecord, profile) if profile else None


class GatewayProjectRepository(GatewayMixin, ProjectRepository):

    async def list(self, owner_id: str) -> List[ProjectRecord]:
        self._log_call("list", owner_id=owner_id)
        member_of = select(ProjectMember.project_id).where(ProjectMember.user_id == owner_id)
        query = (
            select(Project)
            .where(or_(Project.user_id == owner_id, Project.id.in_(member_of)))
            .order_by(Project.created_at.desc())
        )

        async def fetch():
            return (await self.db.execute(query)).scalars().all()

        return [to_record(ProjectRecord, p) for p in await self._read(fetch)]

    async def get(self, project_id: str) -> Optional[ProjectRecord]:
        self._log_call("get", project_id=project_id)
        project = await self._read(lambda: self.db.get(Project, project_id))
        return to_record(ProjectRecord, project) if project else None

    async def create(self, owner_id: str, fields: Dict[str, Any]) -> ProjectRecord:
        self._log_call("create", owner_id=owner_id)

        async def insert():
            project = Project(**fields, user_id=owner_id)
            self.db.add(project)
            await self.db.flush()
            return project

        project = await self._write(insert, refresh=True)
        return to_record(ProjectRecord, project)

    async def update(self, project_id: str, changes: Dict[str, Any]) -> Optional[ProjectRecord]:
        self._log_call("update", project_id=project_id)

        async def apply():
            project = await self.db.get(Project, project_id)
            if project is not None:
                _apply(project, changes, protected=("id", "user_id"))
                project.updated_at = utcnow()
            return project

        project = await self._write(apply, refresh=True)
        return to_record(ProjectRecord, project) if project else None

    async def delete(self, project_id: str, owner_id: str) -> bool:
        self._log_call("delete", project_id=project_id)

        async def remove():
            project = await self.db.get(Project, project_id)
            if project is None or project.user_id != owner_id:
                return False
            room_ids = select(ChatRoom.id).where(ChatRoom.project_id == project_id)
            await self.db.execute(delete(ChatMessage).where(ChatMessage.room_id.in_(room_ids)))
            await self.db.execute(delete(ChatParticipant).where(ChatParticipant.room_id.in_(room_ids)))
            await self.db.execute(delete(ChatRoom).where(ChatRoom.project_id == project_id))
            for model in (ProjectFile, ProjectUpdate, ProjectMember, Task):
                await self.db.execute(delete(model).where(model.project_id == project_id))
            await self.db.delete(project)
            return True

        return await self._write(remove)


class GatewayTaskRepository(GatewayMixin, TaskRepository):

    async def list(self, project_id: str) -> List[TaskRecord]:
        self._log_call("list", project_id=project_id)
        query = select(Task).where(Task.project_id == project_id).order_by(Task.created_at)

        async def fetch():
            return (await self.db.execute(query)).scalars().all()

        return [to_record(TaskRecord, t) for t in await self._read(fetch)]

    async def get(self, task_id: str) -> Optional[TaskRecord]:
        self._log_call("get", task_id=task_id)
        task = await self._read(lambda: self.db.get(Task, task_id))
        return to_record(TaskRecord, task) if task else None

    async def create(self, fields: Dict[str, Any]) -> TaskRecord:
        self._log_call("create", project_id=fields.get("project_id"))

        async def insert():
            task = Task(**fields)
            self.db.add(task)
            await self.db.flush()
            return task

        task = await self._write(insert, refresh=True)
        return to_record(TaskRecord, task)

    async def update(self, task_id: str, changes: Dict[str, Any]) -> Optional[TaskRecord]:
        self._log_call("update", task_id=task_id)

        async def apply():
            task = await self.db.get(Task, task_id)
            if task is not None:
                _apply(task, changes, protected=("id", "project_id"))
                task.updated_at = utcnow()
            return task

        task = await self._write(apply, refresh=True)
        return to_record(TaskRecord, task) if task else None

    async def delete(self, task_id: str) -> bool:
        self._log_call("delete", task_id=task_id)

        async def remove():
            task = await self.db.get(Task, task_id)
            if task is None:
                return False
            await self.db.execute(
                update(ProjectFile).where(ProjectFile.task_id == task_id).values(task_id=None)
            )
            await self.db.delete(task)
            return True

        return await self._write(remove)


class GatewayFileRepository(GatewayMixin, FileRepository):

    async def list(self, project_id: str, category: Optional[str] = None) -> List[FileRecord]:
        self._log_call("list", project_id=project_id, category=category)
        query = select(ProjectFile).where(ProjectFile.project_id == project_id)
        if category is not None:
            query = query.where(ProjectFile.category == category)
        query = query.order_by(ProjectFile.uploaded_at.desc())

        async def fetch():
            return (await self.db.execute(query)).scalars().all()

        return [to_record(FileRecord, f) for f in await self._read(fetch)]

    async def get(self, file_id: str) -> Optional[FileRecord]:
        self._log_call("get", file_id=file_id)
        project_file = await self._read(lambda: self.db.get(ProjectFile, file_id))
        return to_record(FileRecord, project_file) if project_file else None

    async def create(self, uploader_id: str, fields: Dict[str, Any]) -> FileRecord:
        self._log_call("create", project_id=fields.get("project_id"))

        async def insert():
            project_file = ProjectFile(**{**fields, "file_url": fields.get("file_url") or "#"},
                                       uploaded_by=uploader_id)
            self.db.add(project_file)
            await self.db.flush()
            return project_file

        project_file = await self._write(insert, refresh=True)
        return to_record(FileRecord, project_file)

    async def update(self, file_id: str, changes: Dict[str, Any]) -> Optional[FileRecord]:
        self._log_call("update", file_id=file_id)

        async def apply():
            project_file = await self.db.get(ProjectFile, file_id)
            if project_file is not None:
                _apply(project_file, changes, protected=("id", "project_id"))
            return project_file

        project_file = await self._write(apply, refresh=True)
        return to_record(FileRecord, project_file) if project_file else None

    async def delete(self, file_id: str) -> bool:
        self._log_call("delete", file_id=file_id)

        async def remove():
            project_file = await self.db.get(ProjectFile, file_id)
            if project_file is None:
                return False
            await self.db.delete(project_file)
            return True

        return await self._write(remove)


class GatewayUpdateRepository(GatewayMixin, UpdateRepository):

    async def list(self, project_id: str, limit: Optional[int] = None) -> List[UpdateRecord]:
        self._log_call("list", project_id=project_id, limit=limit)
        query = (
            select(ProjectUpdate)
            .where(ProjectUpdate.project_id == project_id)
            .order_by(ProjectUpdate.created_at.desc())
        )
        if limit:
            query = query.limit(limit)

        async def fetch():
            return (await self.db.execute(query)).scalars().all()

        return [to_record(UpdateRecord, u) for u in await self._read(fetch)]

    async def create(self, user_id: str, fields: Dict[str, Any]) -> UpdateRecord:
        self._log_call("create", project_id=fields.get("project_id"))
        values = dict(fields)
        meta = values.pop("metadata", None) or {}

        async def insert():
            entry = ProjectUpdate(**values, meta=meta, user_id=user_id)
            self.db.add(entry)
            await self.db.flush()
            return entry

        entry = await self._write(insert, refresh=True)
        record = to_record(UpdateRecord, entry)
        self._publish("project_updates", record)
        return record


class GatewayMemberRepository(GatewayMixin, MemberRepository):

    async def _member(self, project_id: str, user_id: str) -> Optional[ProjectMember]:
        query = select(ProjectMember).where(
            ProjectMember.project_id == project_id,
            ProjectMember.user_id == user_id,
        )
        return (await self.db.execute(query)).scalar_one_or_none()

    async def _record(self, member: ProjectMember) -> MemberRecord:
        profile = await self.db.get(Profile, member.user_id)
        user = to_record(UserRecord, profile) if profile else None
        return to_record(MemberRecord, member, user=user)

    async def list(self, project_id: str) -> List[MemberRecord]:
        self._log_call("list", project_id=project_id)

        async def fetch():
            project = await self.db.get(Project, project_id)
            if project is None:
                return None, []
            query = (
                select(ProjectMember, Profile)
                .outerjoin(Profile, Profile.id == ProjectMember.user_id)
                .where(ProjectMember.project_id == project_id)
                .order_by(ProjectMember.created_at)
            )
            rows = (await self.db.execute(query)).all()
            owner = await self.db.get(Profile, project.user_id)
            return (project, owner), rows

        head, rows = await self._read(fetch)
        if head is None:
            return []
        project, owner = head
        owner_record = MemberRecord(
            id=f"owner-{project_id}",
            project_id=project_id,
            user_id=project.user_id,
            role=MemberRole.OWNER,
            created_at=project.created_at,
            user=to_record(UserRecord, owner) if owner else None,
        )
        members = [
            MemberRecord.model_validate({
                **row_to_dict(member),
                "user": to_record(UserRecord, profile) if profile else None,
            })
            for member, profile in rows
        ]
        return [owner_record] + members

    async def add(self, project_id: str, user_id: str) -> MemberRecord:
        self._log_call("add", project_id=project_id, user_id=user_id)

        async def insert():
            member = await self._member(project_id, user_id)
            if member is None:
                member = ProjectMember(project_id=project_id, user_id=user_id)
                self.db.add(member)
                await self.db.flush()
            return member

        member = await self._write(insert, refresh=True)
        return await self._read(lambda: self._record(member))

    async def remove(self, project_id: str, user_id: str) -> bool:
        self._log_call("remove", project_id=project_id, user_id=user_id)

        async def drop():
            member = await self._member(project_id, user_id)
            if member is None:
                return False
            await self.db.delete(member)
            return True

        return await self._write(drop)
