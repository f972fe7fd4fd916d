"""
Unit Tests for Services

Business rules exercised against the demo data access: access checks,
activity entries, validation, notifications and the project timeline.
"""

from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from projecthub.core.config import settings
from projecthub.middleware.exception import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from projecthub.schemas import (
    ChatRoomCreate,
    FileCreate,
    GanttRow,
    MemberAdd,
    MessageCreate,
    ProfileUpdate,
    ProjectCreate,
    ProjectUpdate,
    TaskAssign,
    TaskCreate,
    TaskStatusChange,
    TaskUpdate,
    UpdateCreate,
)
from projecthub.services.activity import ActivityService
from projecthub.services.chat import ChatService
from projecthub.services.files import FileService, format_size, validate_upload
from projecthub.services.members import MemberService
from projecthub.services.notifications import NotificationService
from projecthub.services.profile import ProfileService
from projecthub.services.projects import ProjectFilters, ProjectService
from projecthub.services.search import SearchService, relevance
from projecthub.services.tasks import TaskService, is_overdue, status_counts
from projecthub.services.timeline import TimelineStore, build_rows
from projecthub.session.state import cookie_size


@pytest.fixture
async def collaborator(demo_data):
    """Dr. Maria Petrova, a member of proj-1 only."""
    return await demo_data.users.get("contact-1")


async def latest_update(data, project_id):
    return (await data.updates.list(project_id, limit=1))[0]


def timeline_rows(count):
    return [
        GanttRow(
            id=f"task-{i:04d}",
            name=f"Field visit {i}, site survey",
            start=date(2026, 1, 1),
            end=date(2026, 1, 8),
            progress=50,
        )
        for i in range(count)
    ]


class TestProjectService:
    """Tests for listing, filtering and owner-only changes."""

    @pytest.fixture
    def service(self, demo_data, demo_user):
        return ProjectService(demo_data, demo_user)

    async def test_search(self, service):
        projects = await service.list(ProjectFilters(search="website"))

        assert {p.id for p in projects} == {"proj-2", "proj-5"}

    async def test_filter_by_type_and_status(self, service):
        projects = await service.list(ProjectFilters(project_type="Academic & Research", status="active"))

        assert [p.id for p in projects] == ["proj-1"]

    async def test_all_filter_keeps_everything(self, service):
        projects = await service.list(ProjectFilters(project_type="all", status="all"))

        assert len(projects) == 5

    async def test_sorts(self, service):
        by_name = await service.list(ProjectFilters(sort="name-asc"))
        by_progress = await service.list(ProjectFilters(sort="progress-desc"))
        oldest = await service.list(ProjectFilters(sort="oldest"))

        assert by_name[0].title == "Corporate Website Redesign"
        assert by_progress[0].id == "proj-5"
        assert oldest[0].id == "proj-5"

    async def test_unknown_sort_falls_back_to_newest(self, service):
        projects = await service.list(ProjectFilters(sort="bogus"))

        assert projects[0].id == "proj-3"

    async def test_create(self, service):
        project = await service.create(ProjectCreate(title="Thesis", project_type="Academic & Research"))

        assert project.user_id == "demo-user-123"
        assert len(await service.list()) == 6

    async def test_status_change_is_recorded(self, service, demo_data):
        await service.update("proj-3", ProjectUpdate(status="active"))

        update = await latest_update(demo_data, "proj-3")
        assert update.update_type == "status_changed"
        assert update.metadata == {"old_status": "planning", "new_status": "active"}

    async def test_member_cannot_edit_or_delete(self, demo_data, collaborator):
        service = ProjectService(demo_data, collaborator)

        assert (await service.get("proj-1")).id == "proj-1"
        with pytest.raises(ForbiddenException):
            await service.update("proj-1", ProjectUpdate(title="Mine now"))
        with pytest.raises(ForbiddenException):
            await service.delete("proj-1")

    async def test_outsider_cannot_view(self, demo_data, collaborator):
        with pytest.raises(ForbiddenException):
            await ProjectService(demo_data, collaborator).get("proj-2")

    async def test_missing_project(self, service):
        with pytest.raises(NotFoundException):
            await service.get("proj-missing")

    async def test_delete(self, service):
        await service.delete("proj-4")

        with pytest.raises(NotFoundException):
            await service.get("proj-4")

    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValidationError):
            ProjectCreate(
                title="Backwards",
                project_type="Personal/Other",
                start_date=date(2026, 5, 1),
                end_date=date(2026, 4, 1),
            )

    @pytest.mark.parametrize(
        "field", ["title", "project_type", "status", "visibility", "progress_percentage"]
    )
    def test_required_columns_cannot_be_cleared(self, field):
        with pytest.raises(ValidationError, match=f"{field} cannot be null"):
            ProjectUpdate(**{field: None})

    def test_optional_columns_can_be_cleared(self):
        update = ProjectUpdate(description=None, budget=None)

        assert update.changes() == {"description": None, "budget": None}


class TestTaskService:
    """Tests for task CRUD and the activity it leaves behind."""

    @pytest.fixture
    def service(self, demo_data, demo_user):
        return TaskService(demo_data, demo_user)

    async def test_seeded_project_board(self, service):
        counts = status_counts(await service.list_for_project("proj-1"))

        assert counts == {"todo": 2, "in_progress": 1, "done": 2}

    async def test_create_records_activity(self, service, demo_data):
        task = await service.create(TaskCreate(project_id="proj-1", title="Write report"))

        assert task.status == "todo"
        assert task.priority == "medium"
        assert len(await service.list_for_project("proj-1")) == 6
        update = await latest_update(demo_data, "proj-1")
        assert update.update_type == "task_created"
        assert update.update_text == "Task created: Write report"
        assert update.metadata == {"task_id": task.id}

    async def test_numeric_priority(self, service):
        task = await service.create(TaskCreate(project_id="proj-2", title="Urgent", priority=5))

        assert task.priority == "high"

    async def test_completion_records_activity_once(self, service, demo_data):
        await service.change_status("task-3", TaskStatusChange(status="done"))
        first = await latest_update(demo_data, "proj-1")
        await service.change_status("task-3", TaskStatusChange(status="done"))
        second = await latest_update(demo_data, "proj-1")

        assert first.update_type == "task_completed"
        assert first.update_text == "Task completed: Conduct interviews with industry experts"
        assert second.id == first.id

    async def test_assign(self, service, demo_data):
        task = await service.assign("task-4", TaskAssign(assigned_to="contact-1"))

        assert task.assigned_to == "contact-1"
        update = await latest_update(demo_data, "proj-1")
        assert update.update_text == "Task assigned to Dr. Maria Petrova: Analyze collected data"

    async def test_unassign(self, service):
        task = await service.assign("task-3", TaskAssign(assigned_to=None))

        assert task.assigned_to is None

    async def test_unknown_assignee(self, service):
        with pytest.raises(ValidationException):
            await service.assign("task-4", TaskAssign(assigned_to="ghost"))

    async def test_unknown_project(self, service):
        with pytest.raises(NotFoundException):
            await service.create(TaskCreate(project_id="proj-missing", title="Lost"))

    async def test_member_can_work_on_tasks(self, demo_data, collaborator):
        task = await TaskService(demo_data, collaborator).create(
            TaskCreate(project_id="proj-1", title="Member task")
        )

        assert task.project_id == "proj-1"

    async def test_delete(self, service):
        await service.delete("task-5")

        with pytest.raises(NotFoundException):
            await service.delete("task-5")

    async def test_list_all_spans_projects(self, service):
        pairs = await service.list_all()

        assert len(pairs) == 19
        assert {project.id for project, _ in pairs} == {"proj-1", "proj-2", "proj-3", "proj-4", "proj-5"}

    async def test_overdue(self, demo_data):
        task = await demo_data.tasks.get("task-7")
        done = await demo_data.tasks.get("task-1")

        assert is_overdue(task, today=date(2026, 2, 2))
        assert not is_overdue(task, today=date(2026, 2, 1))
        assert not is_overdue(done, today=date(2030, 1, 1))

    @pytest.mark.parametrize("field", ["title", "status", "priority"])
    def test_required_columns_cannot_be_cleared(self, field):
        with pytest.raises(ValidationError, match=f"{field} cannot be null"):
            TaskUpdate(**{field: None})

    def test_assignee_and_due_date_can_be_cleared(self):
        assert TaskUpdate(assigned_to=None, due_date=None).changes() == {
            "assigned_to": None,
            "due_date": None,
        }


class TestFileService:
    """Tests for upload validation and file metadata."""

    @pytest.fixture
    def service(self, demo_data, demo_user):
        return FileService(demo_data, demo_user)

    def _payload(self, **overrides):
        fields = {
            "project_id": "proj-1",
            "file_name": "notes.pdf",
            "file_type": "application/pdf",
            "file_size": 1024,
        }
        fields.update(overrides)
        return FileCreate(**fields)

    def test_type_not_allowed(self):
        with pytest.raises(ValidationException):
            validate_upload("application/zip", 10)

    def test_image_size_limit(self):
        validate_upload("image/png", 5 * 1024 * 1024)
        with pytest.raises(ValidationException):
            validate_upload("image/png", 5 * 1024 * 1024 + 1)

    def test_document_size_limit(self):
        validate_upload("application/pdf", 50 * 1024 * 1024)
        with pytest.raises(ValidationException):
            validate_upload("application/pdf", 50 * 1024 * 1024 + 1)

    def test_format_size(self):
        assert format_size(512) == "512 B"
        assert format_size(1536) == "1.5 KB"
        assert format_size(2456789) == "2.3 MB"

    async def test_upload_records_activity(self, service, demo_data):
        project_file = await service.create(self._payload(category="report"))

        assert project_file.uploaded_by == "demo-user-123"
        assert project_file.file_url == "#"
        update = await latest_update(demo_data, "proj-1")
        assert update.update_type == "file_uploaded"

    async def test_task_from_other_project(self, service):
        with pytest.raises(ValidationException):
            await service.create(self._payload(task_id="task-6"))

    async def test_list_by_category(self, service):
        files = await service.list_for_project("proj-2", category="image")

        assert [f.id for f in files] == ["file-3"]

    async def test_list_all_newest_first(self, service):
        pairs = await service.list_all()

        assert len(pairs) == 7
        uploaded = [f.uploaded_at for _, f in pairs]
        assert uploaded == sorted(uploaded, reverse=True)


class TestMemberService:
    """Tests for project membership rules."""

    @pytest.fixture
    def service(self, demo_data, demo_user):
        return MemberService(demo_data, demo_user)

    async def test_add_by_email(self, service, demo_data):
        member = await service.add("proj-1", MemberAdd(email="j.smith@euagency.eu"))

        assert member.user_id == "contact-2"
        assert member.user.full_name == "John Smith"
        update = await latest_update(demo_data, "proj-1")
        assert update.update_text == "John Smith joined the project"

    async def test_add_existing_member(self, service):
        with pytest.raises(ConflictException):
            await service.add("proj-1", MemberAdd(user_id="contact-1"))

    async def test_add_owner(self, service):
        with pytest.raises(ConflictException):
            await service.add("proj-1", MemberAdd(user_id="demo-user-123"))

    async def test_add_unknown_user(self, service):
        with pytest.raises(NotFoundException):
            await service.add("proj-1", MemberAdd(email="nobody@example.com"))

    async def test_only_owner_manages_members(self, demo_data, collaborator):
        with pytest.raises(ForbiddenException):
            await MemberService(demo_data, collaborator).add("proj-1", MemberAdd(user_id="contact-2"))

    async def test_remove(self, service, demo_data):
        await service.remove("proj-1", "contact-1")

        members = await service.list("proj-1")
        assert [m.role for m in members] == ["owner"]
        update = await latest_update(demo_data, "proj-1")
        assert update.update_type == "member_removed"

    async def test_owner_cannot_be_removed(self, service):
        with pytest.raises(ForbiddenException):
            await service.remove("proj-1", "demo-user-123")

    async def test_remove_non_member(self, service):
        with pytest.raises(NotFoundException):
            await service.remove("proj-1", "contact-2")

    def test_identifier_required(self):
        with pytest.raises(ValidationError):
            MemberAdd()


class TestChatService:
    """Tests for rooms and messages."""

    @pytest.fixture
    def service(self, demo_data, demo_user):
        return ChatService(demo_data, demo_user)

    async def test_rooms_most_recent_first(self, service):
        rooms = await service.list_rooms()

        assert [r.id for r in rooms] == ["room-1", "room-2"]

    async def test_send_and_read(self, service):
        sent = await service.send("room-2", MessageCreate(message="  Hello team  "))
        messages = await service.messages("room-2")

        assert sent.message == "Hello team"
        assert messages[-1].id == sent.id

    async def test_reply_must_be_in_room(self, service):
        with pytest.raises(ValidationException):
            await service.send("room-1", MessageCreate(message="Re", reply_to_id="msg-3"))

    async def test_reply(self, service):
        message = await service.send("room-1", MessageCreate(message="Sure", reply_to_id="msg-2"))

        assert message.reply_to_id == "msg-2"

    async def test_non_participant(self, demo_data):
        outsider = await demo_data.users.get("contact-2")

        with pytest.raises(ForbiddenException):
            await ChatService(demo_data, outsider).messages("room-1")

    async def test_missing_room(self, service):
        with pytest.raises(NotFoundException):
            await service.get_room("room-missing")

    async def test_create_group_room(self, service):
        room = await service.create_room(ChatRoomCreate(name="Coffee", participant_ids=["contact-1"]))

        assert room.participant_ids == ["demo-user-123", "contact-1"]
        assert room.room_type == "group"

    async def test_direct_room_needs_one_other_participant(self, service):
        with pytest.raises(ValidationException):
            await service.create_room(ChatRoomCreate(
                name="DM",
                room_type="direct",
                participant_ids=["contact-1", "contact-2"],
            ))

    async def test_unknown_participant(self, service):
        with pytest.raises(ValidationException):
            await service.create_room(ChatRoomCreate(name="Ghosts", participant_ids=["ghost"]))

    def test_project_room_needs_project(self):
        with pytest.raises(ValidationError):
            ChatRoomCreate(name="Project", room_type="project")


class TestActivityService:
    """Tests for the activity feed."""

    async def test_post(self, demo_data, demo_user):
        update = await ActivityService(demo_data, demo_user).post(
            UpdateCreate(project_id="proj-2", update_type="milestone", update_text="Beta is live")
        )

        assert update.user_id == "demo-user-123"
        assert (await latest_update(demo_data, "proj-2")).id == update.id

    async def test_recent_across_projects(self, demo_data, demo_user):
        projects = await demo_data.projects.list(demo_user.id)

        updates = await ActivityService(demo_data, demo_user).recent(projects, limit=4)

        assert len(updates) == 4
        created = [u.created_at for u in updates]
        assert created == sorted(created, reverse=True)


class TestNotificationService:
    """Tests for the derived notification feed."""

    @pytest.fixture
    def service(self, demo_data, demo_user, state):
        return NotificationService(demo_data, demo_user, state)

    async def test_feed(self, service):
        feed = await service.feed(today=date(2026, 2, 10))

        overdue = {n.id for n in feed if n.kind == "task_overdue"}
        assert overdue == {"overdue-task-7", "overdue-task-11", "overdue-task-15"}
        assert len(feed) == 13
        assert all(not n.read for n in feed)

    async def test_mark_read(self, service, state):
        service.mark_read(["update-upd-1", "update-upd-1"])

        feed = await service.feed(today=date(2026, 2, 10))
        read = [n.id for n in feed if n.read]
        assert read == ["update-upd-1"]
        assert state.get_json(settings.STATE_NOTIFICATIONS_READ_KEY) == ["update-upd-1"]

    async def test_mark_all_read(self, service):
        marked = await service.mark_all_read()

        assert marked > 0
        assert await service.unread_count() == 0
        assert await service.mark_all_read() == 0

    async def test_malformed_read_state(self, service, state):
        state.set(settings.STATE_NOTIFICATIONS_READ_KEY, "not json")

        assert service.read_ids() == set()

    def test_read_ids_stay_under_cookie_limit(self, service, state):
        ids = [f"update-{i:03d}-" + "x" * 40 for i in range(200)]

        service.mark_read(ids)

        stored = state.get_json(settings.STATE_NOTIFICATIONS_READ_KEY)
        assert 0 < len(stored) < len(ids)
        assert stored == ids[-len(stored):]
        key = settings.STATE_NOTIFICATIONS_READ_KEY
        size = cookie_size(key, state.get(key))
        assert size <= settings.STATE_COOKIE_MAX_BYTES


class TestTimeline:
    """Tests for the Gantt rows and the saved timeline."""

    async def test_rows_from_tasks(self, demo_data):
        project = await demo_data.projects.get("proj-1")
        rows = build_rows(project, await demo_data.tasks.list("proj-1"))

        assert [r.id for r in rows] == ["task-1", "task-2", "task-3", "task-4", "task-5"]
        assert [r.progress for r in rows] == [100, 100, 50, 0, 0]
        assert rows[0].end - rows[0].start == timedelta(days=7)
        assert rows[3].end == date(2026, 4, 30)

    def test_save_and_load(self, state):
        store = TimelineStore(state)
        rows = [GanttRow(id="a", name="Kickoff", start=date(2026, 1, 1), end=date(2026, 1, 5))]

        store.save("proj-1", rows)

        assert store.load("proj-1") == rows
        assert store.load("proj-2") is None

    def test_clear(self, state):
        store = TimelineStore(state)
        store.save("proj-1", [])
        store.clear()

        assert store.load("proj-1") is None

    def test_malformed_saved_timeline(self, state):
        state.set(settings.STATE_GANTT_KEY, "{oops")

        assert TimelineStore(state).load("proj-1") is None

    def test_row_dates_validated(self):
        with pytest.raises(ValidationError):
            GanttRow(id="a", name="Backwards", start=date(2026, 2, 1), end=date(2026, 1, 1))

    def test_oversized_timeline_is_rejected(self, state):
        store = TimelineStore(state)
        store.save("proj-1", timeline_rows(2))

        with pytest.raises(ValidationException):
            store.save("proj-1", timeline_rows(60))

        assert store.load("proj-1") == timeline_rows(2)


class TestProfileService:
    """Tests for the user's own profile."""

    async def test_update(self, demo_data, demo_user):
        profile = await ProfileService(demo_data, demo_user).update(ProfileUpdate(bio="Hello"))

        assert profile.bio == "Hello"
        assert profile.full_name == "Demo User"

    async def test_empty_update(self, demo_data, demo_user):
        with pytest.raises(ValidationException):
            await ProfileService(demo_data, demo_user).update(ProfileUpdate())

    async def test_stats(self, demo_data, demo_user):
        stats = await ProfileService(demo_data, demo_user).stats()

        assert stats.total_projects == 5


class TestSearchService:
    """Tests for the global search across categories."""

    LATER = datetime(2030, 1, 1, tzinfo=timezone.utc)

    @pytest.fixture
    def service(self, demo_data, demo_user):
        return SearchService(demo_data, demo_user)

    async def test_hits_per_category(self, service):
        results = await service.search("  Research ", now=self.LATER)

        assert results.query == "research"
        assert [(h.id, h.relevance) for h in results.projects] == [("proj-1", 6)]
        assert [(h.id, h.relevance) for h in results.tasks] == [("task-1", 3), ("task-2", 3), ("task-5", 3)]
        assert [(h.id, h.relevance) for h in results.files] == [("file-1", 6)]
        assert results.contacts == []
        assert results.total == 5
        assert {h.project_title for h in results.tasks} == {"Research Project Alpha"}

    async def test_contacts(self, service):
        results = await service.search("maria", now=self.LATER)

        assert [(h.id, h.title, h.relevance) for h in results.contacts] == [
            ("contact-1", "Dr. Maria Petrova", 3),
        ]

    @pytest.mark.parametrize("query", ["", " ", "r", " a "])
    async def test_short_query_finds_nothing(self, service, query):
        assert (await service.search(query)).total == 0

    async def test_recent_exact_prefix_ranks_first(self, service, demo_data):
        await demo_data.tasks.create({"project_id": "proj-2", "title": "Research notes"})

        results = await service.search("research")

        assert results.tasks[0].title == "Research notes"
        assert results.tasks[0].relevance == 6
        assert results.tasks[0].project_title == "Corporate Website Redesign"

    async def test_filters(self, service):
        by_type = await service.search("research", project_type="Corporate/Business", now=self.LATER)
        by_status = await service.search("research", status="done", now=self.LATER)

        assert by_type.projects == []
        assert [h.id for h in by_status.tasks] == ["task-1", "task-2"]
        assert by_status.projects == []

    async def test_only_visible_projects_are_searched(self, demo_data):
        outsider = await demo_data.users.get("contact-3")

        results = await SearchService(demo_data, outsider).search("research")

        assert results.projects == []
        assert results.tasks == []
        assert results.files == []

    def test_relevance(self):
        now = datetime(2026, 1, 10, tzinfo=timezone.utc)

        assert relevance("alpha", "Alpha") == 10
        assert relevance("alpha", "Alpha project", "about alpha") == 6
        assert relevance("alpha", "Project Alpha", created_at=now - timedelta(days=1), now=now) == 3
        assert relevance("alpha", "Beta", "alpha", created_at=now - timedelta(days=8), now=now) == 1

    async def test_to_dict_limits_lists_not_counts(self, service):
        body = (await service.search("research", now=self.LATER)).to_dict(limit=1)

        assert [h["id"] for h in body["tasks"]] == ["task-1"]
        assert body["counts"] == {"projects": 1, "tasks": 3, "files": 1, "contacts": 0}
        assert body["total"] == 5
