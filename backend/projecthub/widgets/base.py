"""
Widget base.

A widget loads its data and turns it into a JSON view model. Loading is
isolated: any failure is logged and rendered as an inline error block
with a retry URL, so sibling widgets on the same page are unaffected.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, List, Optional, TypeVar

from projecthub.core.config import settings
from projecthub.core.errors import log_error
from projecthub.core.logging import get_logger
from projecthub.session.context import AppState

logger = get_logger(__name__)

T = TypeVar("T")

READY = "ready"
ERROR = "error"


@dataclass
class WidgetView:
    name: str
    status: str
    data: Any = None
    error: Optional[Dict[str, str]] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == READY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status,
            "data": self.data,
            "error": self.error,
            "warnings": self.warnings,
        }


def page_url(path: str, app: AppState) -> str:
    """``path`` with the demo query parameter kept for demo sessions."""
    if app.is_demo:
        return f"{path}?{settings.DEMO_QUERY_PARAM}=true"
    return path


def widget_url(name: str, app: AppState) -> str:
    return page_url(f"{settings.API_V1_STR}/dashboard/widgets/{name}", app)


class Widget(ABC):
    """One section of a page."""

    name: str = "widget"
    title: str = "Widget"

    def __init__(self, app: AppState, retry_url: Optional[str] = None) -> None:
        self.app = app
        self.retry_url = retry_url or widget_url(self.name, app)
        self.warnings: List[str] = []

    @property
    def data(self):
        return self.app.data

    @property
    def user(self):
        return self.app.user

    async def with_timeout(self, operation: Awaitable[List[T]]) -> List[T]:
        """
        Race a list fetch against the configured timeout.

        A fetch that does not finish in time yields an empty list and a
        warning instead of an error.
        """
        timeout = settings.WIDGET_FETCH_TIMEOUT_SECONDS
        try:
            return await asyncio.wait_for(operation, timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Data fetch timed out", widget=self.name, timeout_seconds=timeout)
            self.warnings.append(f"Loading {self.title.lower()} timed out")
            return []

    @abstractmethod
    async def load(self) -> Any:
        """Fetch and shape the widget's data."""

    async def initialize(self) -> WidgetView:
        try:
            payload = await self.load()
        except Exception as e:
            log_error(
                e,
                page=self.name,
                action="initialize",
                user_id=self.user.id if self.user else None,
                mode=self.app.mode.value,
            )
            return WidgetView(
                name=self.name,
                status=ERROR,
                error={
                    "message": f"Failed to load {self.title.lower()}. Try again.",
                    "retry_url": self.retry_url,
                },
            )
        return WidgetView(name=self.name, status=READY, data=payload, warnings=self.warnings)
