"""Search Endpoint"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from projecthub.api.deps import AppState, get_app_state
from projecthub.controllers import SearchController

router = APIRouter(prefix="/search")


@router.get("", summary="Search projects, tasks, files and contacts")
async def search(
    q: str = Query("", max_length=200, description="Search text; at least two characters"),
    project_type: Optional[str] = Query(None, alias="type", description="Project type or 'all'"),
    status: Optional[str] = Query(None, description="Project or task status or 'all'"),
    limit: int = Query(5, ge=1, le=50, description="Hits returned per category"),
    app: AppState = Depends(get_app_state),
) -> Dict[str, Any]:
    return await SearchController(app).render(q, limit, project_type, status)
