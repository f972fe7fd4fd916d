"""Presentation widgets producing JSON view models."""

from projecthub.widgets.base import ERROR, READY, Widget, WidgetView
from projecthub.widgets.dashboard import (
    ActivityFeedWidget,
    ChartsWidget,
    NavbarWidget,
    RecentProjectsWidget,
    StatsWidget,
)
from projecthub.widgets.project import (
    FileManagerWidget,
    MembersWidget,
    ProjectActivityWidget,
    ProjectHeaderWidget,
    TaskBoardWidget,
    TimelineWidget,
)

DASHBOARD_WIDGETS = {
    widget.name: widget
    for widget in (StatsWidget, RecentProjectsWidget, ActivityFeedWidget, ChartsWidget)
}

__all__ = [
    "ActivityFeedWidget",
    "ChartsWidget",
    "DASHBOARD_WIDGETS",
    "ERROR",
    "FileManagerWidget",
    "MembersWidget",
    "NavbarWidget",
    "ProjectActivityWidget",
    "ProjectHeaderWidget",
    "READY",
    "RecentProjectsWidget",
    "StatsWidget",
    "TaskBoardWidget",
    "TimelineWidget",
    "Widget",
    "WidgetView",
]
