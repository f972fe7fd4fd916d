"""Diagnostics: recently logged errors and data access status."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from projecthub.api.deps import AppState, get_app_state
from projecthub.core.errors import error_log
from projecthub.data.factory import get_data_access_status

router = APIRouter(prefix="/diagnostics")


@router.get("/errors", summary="Recently logged errors, newest first")
async def recent_errors(
    limit: int = Query(20, ge=1, le=50),
    app: AppState = Depends(get_app_state),
) -> Dict[str, Any]:
    """
    Errors the caller may see.

    Admins with a real session see the whole buffer; everyone else only
    sees errors recorded for their own user in their own mode.
    """
    if not app.is_demo and app.user.is_admin:
        entries = error_log.recent()
    else:
        entries = error_log.recent(user_id=app.user.id, mode=app.mode.value)
    return {"errors": [entry.to_dict() for entry in entries[:limit]], "total": len(entries)}


@router.get("/data-access", summary="Active data access for this session")
async def data_access(app: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    return {
        **get_data_access_status(),
        "mode": app.mode.value,
        "health": app.data.health_check(),
    }
