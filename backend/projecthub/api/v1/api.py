"""
API Version 1 Router

Page endpoints (one per page, plus the mutations each page offers),
search, authentication and diagnostics.
"""

from typing import Any, Dict

from fastapi import APIRouter

from projecthub.api.v1.endpoints import (
    account,
    auth,
    chats,
    dashboard,
    diagnostics,
    files,
    projects,
    search,
    tasks,
)
from projecthub.core.config import settings

api_v1_router = APIRouter()

# Prefixes live in the endpoint modules
api_v1_router.include_router(auth.router, tags=["Authentication"])
api_v1_router.include_router(dashboard.router, tags=["Dashboard"])
api_v1_router.include_router(projects.router, tags=["Projects"])
api_v1_router.include_router(tasks.router, tags=["Tasks"])
api_v1_router.include_router(files.router, tags=["Files"])
api_v1_router.include_router(chats.router, tags=["Chats"])
api_v1_router.include_router(account.router, tags=["Account"])
api_v1_router.include_router(search.router, tags=["Search"])
api_v1_router.include_router(diagnostics.router, tags=["Diagnostics"])


@api_v1_router.get("/", tags=["Info"])
async def api_info() -> Dict[str, Any]:
    """
    Get API version information.

    Returns:
        API version details
    """
    return {
        "version": settings.APP_VERSION,
        "name": f"{settings.APP_NAME} API",
        "status": "stable",
        "demo_mode": settings.DEMO_MODE_ENABLED,
    }
