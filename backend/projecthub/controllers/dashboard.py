"""
Dashboard Controller

Navigation chrome first, then the four dashboard widgets initialised in
sequence. If the page itself cannot be put together the client receives a
static emergency view pointing at the demo pages.
"""

from typing import Any, Dict

from projecthub.controllers.base import PageController
from projecthub.core.errors import log_error
from projecthub.core.logging import get_logger
from projecthub.middleware.exception import NotFoundException
from projecthub.widgets import DASHBOARD_WIDGETS, NavbarWidget
from projecthub.widgets.base import widget_url

logger = get_logger(__name__)

EMERGENCY_STATS = {
    "total_projects": 5,
    "total_tasks": 12,
    "completion_rate": 85,
    "total_files": 23,
}


def emergency_dashboard() -> Dict[str, Any]:
    return {
        "page": "dashboard",
        "emergency": True,
        "message": "The dashboard could not be loaded. Showing sample data.",
        "stats": dict(EMERGENCY_STATS),
        "links": {
            "projects": "/projects?demo=true",
            "tasks": "/tasks?demo=true",
            "reload": "/dashboard",
        },
    }


class DashboardController(PageController):

    page = "dashboard"

    async def render(self) -> Dict[str, Any]:
        try:
            navbar = await NavbarWidget(self.app).initialize()
            widgets = await self.render_widgets(
                widget_cls(self.app) for widget_cls in DASHBOARD_WIDGETS.values()
            )
            return self.view(
                navbar=navbar.to_dict(),
                widgets=widgets,
                listeners={
                    "refresh": {name: widget_url(name, self.app) for name in DASHBOARD_WIDGETS},
                },
            )
        except Exception as e:
            log_error(
                e,
                page=self.page,
                action="render",
                user_id=self.user.id if self.user else None,
                mode=self.app.mode.value,
            )
            return emergency_dashboard()

    async def refresh(self, name: str) -> Dict[str, Any]:
        """Re-run a single dashboard widget."""
        widget_cls = DASHBOARD_WIDGETS.get(name)
        if widget_cls is None:
            raise NotFoundException("Widget", name)
        view = await widget_cls(self.app).initialize()
        return view.to_dict()
