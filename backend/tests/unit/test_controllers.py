"""
Unit Tests for Page Controllers

Tests for the page view models and the toast/reload shape of mutations.
"""

import pytest

from projecthub.controllers import (
    ChatsController,
    FilesController,
    NotificationsController,
    ProfileController,
    ProjectDetailsController,
    ProjectsController,
    TasksController,
    mutation_result,
)
from projecthub.core.config import settings
from projecthub.middleware.exception import ForbiddenException
from projecthub.schemas import (
    GanttRow,
    MemberAdd,
    MessageCreate,
    ProfileUpdate,
    ProjectCreate,
    TaskCreate,
    TaskStatusChange,
    TimelineSave,
)
from projecthub.services.projects import ProjectFilters


class TestMutationResult:
    """Tests for the mutation response shape."""

    def test_shape(self):
        result = mutation_result({"id": "x"}, "Saved", "/projects")

        assert result == {
            "success": True,
            "data": {"id": "x"},
            "toast": {"level": "success", "message": "Saved"},
            "reload": "/projects",
        }


class TestProjectsController:
    """Tests for the projects list page."""

    async def test_render(self, app_state):
        page = await ProjectsController(app_state).render(ProjectFilters(status="active"))

        assert page["page"] == "projects"
        assert page["total"] == 3
        assert page["filters"]["status"] == "active"
        assert page["sorts"] == ["newest", "oldest", "name-asc", "progress-desc"]

    async def test_create(self, app_state):
        result = await ProjectsController(app_state).create(
            ProjectCreate(title="Grant Application", project_type="EU-Funded Project")
        )

        assert result["toast"]["message"] == 'Project "Grant Application" created'
        assert result["reload"] == "/projects?demo=true"
        assert result["data"]["status"] == "planning"

    async def test_delete(self, app_state):
        result = await ProjectsController(app_state).delete("proj-5")

        assert result["toast"]["message"] == "Project deleted"
        assert (await ProjectsController(app_state).render())["total"] == 4


class TestProjectDetailsController:
    """Tests for the project details page."""

    async def test_render(self, app_state):
        page = await ProjectDetailsController(app_state, "proj-1").render()

        widgets = page["widgets"]
        assert page["title"] == "Research Project Alpha"
        assert set(widgets) == {
            "project_header", "task_board", "file_manager",
            "project_activity", "members", "timeline",
        }
        assert all(w["status"] == "ready" for w in widgets.values())
        assert widgets["project_header"]["data"]["is_owner"] is True
        assert widgets["project_header"]["data"]["stats"]["completion_rate"] == 40
        assert [len(widgets["task_board"]["data"][s]) for s in ("todo", "in_progress", "done")] == [2, 1, 2]
        assert len(widgets["members"]["data"]) == 2

    async def test_file_category(self, app_state):
        page = await ProjectDetailsController(app_state, "proj-2").render(category="image")

        data = page["widgets"]["file_manager"]["data"]
        assert [f["id"] for f in data["files"]] == ["file-3"]
        assert data["counts"]["document"] == 1

    async def test_saved_timeline_is_shown(self, app_state):
        controller = ProjectDetailsController(app_state, "proj-1")
        rows = [GanttRow(id="m1", name="Milestone", start="2026-03-01", end="2026-03-10")]

        result = await controller.save_timeline(TimelineSave(rows=rows))
        page = await controller.render()

        assert result["toast"]["message"] == "Timeline saved"
        assert page["widgets"]["timeline"]["data"]["source"] == "saved"
        assert page["widgets"]["timeline"]["data"]["rows"][0]["id"] == "m1"

        await controller.reset_timeline()
        page = await controller.render()
        assert page["widgets"]["timeline"]["data"]["source"] == "tasks"

    async def test_add_member(self, app_state):
        result = await ProjectDetailsController(app_state, "proj-1").add_member(
            MemberAdd(user_id="contact-3")
        )

        assert result["toast"]["message"] == "Anna Ivanova added to the project"
        assert result["reload"] == "/projects/proj-1?demo=true"

    async def test_foreign_project(self, app_state, demo_data):
        demo_data.store["projects"]["proj-2"]["user_id"] = "contact-3"
        del demo_data.store["members"]["member-2"]

        with pytest.raises(ForbiddenException):
            await ProjectDetailsController(app_state, "proj-2").render()


class TestTasksController:
    """Tests for the tasks page."""

    async def test_render(self, app_state):
        page = await TasksController(app_state).render()

        assert page["total"] == 19
        assert page["counts"] == {"todo": 5, "in_progress": 5, "done": 9}
        assert len(page["projects"]) == 5
        assert "project_title" in page["tasks"][0]

    async def test_filters(self, app_state):
        controller = TasksController(app_state)

        done = await controller.render(status="done")
        project = await controller.render(project_id="proj-1")
        both = await controller.render(status="todo", project_id="proj-1")

        assert len(done["tasks"]) == 9
        assert len(project["tasks"]) == 5
        assert [t["id"] for t in both["tasks"]] == ["task-4", "task-5"]
        assert done["total"] == 19

    async def test_create_toast(self, app_state):
        result = await TasksController(app_state).create(TaskCreate(project_id="proj-1", title="Write report"))

        assert result["success"] is True
        assert result["toast"] == {"level": "success", "message": 'Task "Write report" created'}
        assert result["reload"] == "/tasks?demo=true"

    async def test_move_toast(self, app_state):
        result = await TasksController(app_state).change_status("task-4", TaskStatusChange(status="in_progress"))

        assert result["toast"]["message"] == "Task moved to in progress"
        assert result["data"]["status"] == "in_progress"


class TestFilesController:
    """Tests for the files page."""

    async def test_render(self, app_state):
        page = await FilesController(app_state).render()

        assert page["total"] == 7
        assert page["total_storage"] == 27564070
        assert page["total_storage_label"] == "26.3 MB"
        assert page["counts"]["image"] == 2
        assert all("project_title" in f and "size_label" in f for f in page["files"])

    async def test_category_filter(self, app_state):
        page = await FilesController(app_state).render(category="report")

        assert [f["id"] for f in page["files"]] == ["file-7"]
        assert page["total"] == 7


class TestChatsController:
    """Tests for the chat page."""

    async def test_render_opens_latest_room(self, app_state):
        page = await ChatsController(app_state).render()

        active = page["active_room"]
        assert [r["id"] for r in page["rooms"]] == ["room-1", "room-2"]
        assert active["room"]["id"] == "room-1"
        assert [m["id"] for m in active["messages"]] == ["msg-1", "msg-2"]
        assert active["stream_url"] == f"{settings.API_V1_STR}/chats/rooms/room-1/stream?demo=true"
        assert len(page["contacts"]) == 4

    async def test_send(self, app_state):
        result = await ChatsController(app_state).send("room-2", MessageCreate(message="On it"))

        assert result["toast"]["message"] == "Message sent"
        assert result["reload"] is None


class TestAccountControllers:
    """Tests for the profile and notifications pages."""

    async def test_profile(self, app_state):
        page = await ProfileController(app_state).render()

        assert page["profile"]["email"] == "demo@projecthub.com"
        assert page["stats"]["total_projects"] == 5

    async def test_demo_profile_update_does_not_touch_cached_user(self, app_state):
        result = await ProfileController(app_state).update(ProfileUpdate(full_name="Demo Person"))

        assert result["data"]["full_name"] == "Demo Person"
        assert app_state.state.get(settings.STATE_USER_KEY) is None

    async def test_mark_all_read(self, app_state):
        controller = NotificationsController(app_state)

        first = await controller.mark_all_read()
        second = await controller.mark_all_read()
        page = await controller.render()

        assert first["toast"]["message"].endswith("notifications marked as read")
        assert second["toast"]["message"] == "No unread notifications"
        assert page["unread"] == 0
