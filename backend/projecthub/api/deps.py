"""
API Dependencies

Reusable dependencies shared by the endpoint modules: the per-request
application state, the client state store and query-string filters.
"""

from typing import Optional

from fastapi import Depends, Query

from projecthub.core.logging import get_logger
from projecthub.services.projects import DEFAULT_SORT, ProjectFilters
from projecthub.session.context import (
    AppState,
    get_app_state,
    get_dashboard_state,
    get_state_store,
)

logger = get_logger(__name__)

__all__ = [
    "AppState",
    "get_app_state",
    "get_dashboard_state",
    "get_project_filters",
    "get_state_store",
]


def get_project_filters(
    project_type: Optional[str] = Query(None, alias="type", description="Project type or 'all'"),
    status: Optional[str] = Query(None, description="Project status or 'all'"),
    search: Optional[str] = Query(None, max_length=200, description="Matches title and description"),
    sort: str = Query(DEFAULT_SORT, description="newest, oldest, name-asc or progress-desc"),
) -> ProjectFilters:
    return ProjectFilters(project_type=project_type, status=status, search=search, sort=sort)
