"""
Page controller base.

A controller turns one page load into a JSON view: it receives the
request's :class:`AppState`, initialises its widgets one after another and
collects their views. Mutations answer with a :func:`mutation_result`
carrying the saved record, a toast and the page to reload.
"""

from typing import Any, Dict, Iterable, Optional

from projecthub.core.logging import get_logger
from projecthub.session.context import AppState
from projecthub.widgets.base import Widget, page_url

logger = get_logger(__name__)


def mutation_result(
    data: Any,
    message: str,
    reload_url: Optional[str] = None,
    level: str = "success",
) -> Dict[str, Any]:
    return {
        "success": True,
        "data": data,
        "toast": {"level": level, "message": message},
        "reload": reload_url,
    }


class PageController:

    page = "page"

    def __init__(self, app: AppState) -> None:
        self.app = app

    @property
    def data(self):
        return self.app.data

    @property
    def user(self):
        return self.app.user

    def url(self, path: str) -> str:
        return page_url(path, self.app)

    def view(self, **sections: Any) -> Dict[str, Any]:
        return {
            "page": self.page,
            "mode": self.app.mode.value,
            "demo": self.app.is_demo,
            "user": self.user.model_dump(mode="json"),
            **sections,
        }

    async def render_widgets(self, widgets: Iterable[Widget]) -> Dict[str, Dict[str, Any]]:
        """Initialise widgets in order; each one fails on its own."""
        views: Dict[str, Dict[str, Any]] = {}
        for widget in widgets:
            view = await widget.initialize()
            if not view.ok:
                logger.warning("Widget rendered with error", page=self.page, widget=view.name)
            views[view.name] = view.to_dict()
        return views
