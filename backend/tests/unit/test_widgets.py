"""
Unit Tests for Widgets

Tests for widget isolation, fetch timeouts and the dashboard view model.
"""

import asyncio
from datetime import date, datetime, timezone

import pytest

from projecthub.controllers import DashboardController, emergency_dashboard
from projecthub.core.config import settings
from projecthub.core.errors import error_log
from projecthub.middleware.exception import NotFoundException
from projecthub.widgets import (
    ChartsWidget,
    NavbarWidget,
    RecentProjectsWidget,
    StatsWidget,
    TimelineWidget,
)
from projecthub.widgets.dashboard import progress_overview, task_trend


class TestWidgetIsolation:
    """A failing widget renders an error block; its siblings still load."""

    async def test_failing_widget_reports_error(self, app_state, mocker):
        mocker.patch(
            "projecthub.widgets.dashboard.dashboard_stats",
            side_effect=RuntimeError("stats backend down"),
        )

        view = await StatsWidget(app_state).initialize()

        assert not view.ok
        assert view.error["message"] == "Failed to load statistics. Try again."
        assert view.error["retry_url"] == f"{settings.API_V1_STR}/dashboard/widgets/stats?demo=true"
        entry = error_log.recent(1)[0]
        assert entry.page == "stats"
        assert entry.action == "initialize"
        assert entry.user_id == "demo-user-123"

    async def test_siblings_render(self, app_state, mocker):
        mocker.patch(
            "projecthub.widgets.dashboard.dashboard_stats",
            side_effect=RuntimeError("stats backend down"),
        )

        page = await DashboardController(app_state).render()

        widgets = page["widgets"]
        assert widgets["stats"]["status"] == "error"
        assert widgets["recent_projects"]["status"] == "ready"
        assert widgets["activity_feed"]["status"] == "ready"
        assert widgets["charts"]["status"] == "ready"
        assert "emergency" not in page

    async def test_timeout_yields_empty_list(self, app_state, mocker, monkeypatch):
        async def slow_list(owner_id):
            await asyncio.sleep(1)
            return []

        monkeypatch.setattr(settings, "WIDGET_FETCH_TIMEOUT_SECONDS", 0.01)
        mocker.patch.object(app_state.data.projects, "list", side_effect=slow_list)

        view = await RecentProjectsWidget(app_state).initialize()

        assert view.ok
        assert view.data == []
        assert view.warnings == ["Loading recent projects timed out"]


class TestDashboard:
    """Tests for the dashboard page."""

    async def test_render(self, app_state):
        page = await DashboardController(app_state).render()

        assert page["page"] == "dashboard"
        assert page["mode"] == "demo"
        assert page["demo"] is True
        assert page["navbar"]["data"]["demo_badge"] is True
        assert list(page["widgets"]) == ["stats", "recent_projects", "activity_feed", "charts"]
        assert page["widgets"]["stats"]["data"]["total_projects"] == 5
        assert page["widgets"]["stats"]["data"]["completion_rate"] == 47
        assert page["listeners"]["refresh"]["charts"] == (
            f"{settings.API_V1_STR}/dashboard/widgets/charts?demo=true"
        )

    async def test_emergency_view(self, app_state, mocker):
        mocker.patch(
            "projecthub.controllers.dashboard.NavbarWidget.initialize",
            side_effect=RuntimeError("layout failed"),
        )

        page = await DashboardController(app_state).render()

        assert page == emergency_dashboard()
        assert page["stats"]["completion_rate"] == 85
        assert page["links"]["projects"] == "/projects?demo=true"
        assert error_log.recent(1)[0].page == "dashboard"

    async def test_refresh(self, app_state):
        view = await DashboardController(app_state).refresh("recent_projects")

        assert view["status"] == "ready"
        assert len(view["data"]) == 5

    async def test_refresh_unknown_widget(self, app_state):
        with pytest.raises(NotFoundException):
            await DashboardController(app_state).refresh("weather")

    async def test_navbar_links_keep_demo_flag(self, app_state):
        view = await NavbarWidget(app_state).initialize()

        assert view.data["links"]["tasks"] == "/tasks?demo=true"
        assert view.data["user"]["id"] == "demo-user-123"

    async def test_recent_projects_most_recently_updated_first(self, app_state):
        view = await RecentProjectsWidget(app_state).initialize()

        updated = [card["updated_at"] for card in view.data]
        assert updated == sorted(updated, reverse=True)
        assert view.data[0]["url"].startswith("/projects/")


class TestCharts:
    """Tests for the dashboard chart series."""

    async def test_series(self, app_state):
        view = await ChartsWidget(app_state).initialize()

        assert sum(view.data["project_types"]["data"]) == 5
        assert "Active" in view.data["project_status"]["labels"]
        assert view.data["progress_overview"]["average"] == 61

    def test_progress_overview_empty(self):
        assert progress_overview([]) == {"labels": ["Completed", "Remaining"], "data": [0, 100], "average": 0}

    async def test_task_trend(self, demo_data):
        task = await demo_data.tasks.update("task-4", {"status": "done"})
        task = task.model_copy(update={
            "created_at": datetime(2026, 3, 2, 9, tzinfo=timezone.utc),
            "updated_at": datetime(2026, 3, 4, 9, tzinfo=timezone.utc),
        })

        trend = task_trend([task], today=date(2026, 3, 5))

        assert len(trend["labels"]) == 7
        assert trend["labels"][-1] == "Thu"
        assert trend["created"] == [0, 0, 0, 1, 0, 0, 0]
        assert trend["completed"] == [0, 0, 0, 0, 0, 1, 0]


class TestTimelineWidget:
    """Tests for the saved-versus-derived timeline."""

    async def test_derived_rows(self, app_state):
        project = await app_state.data.projects.get("proj-1")

        view = await TimelineWidget(app_state, project).initialize()

        assert view.data["source"] == "tasks"
        assert len(view.data["rows"]) == 5
