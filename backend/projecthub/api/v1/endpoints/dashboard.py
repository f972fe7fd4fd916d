"""
Dashboard Endpoints

The dashboard page and the per-widget refresh endpoints it lists as
listeners.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from projecthub.api.deps import AppState, get_dashboard_state
from projecthub.controllers import DashboardController

router = APIRouter(prefix="/dashboard")


@router.get(
    "",
    summary="Dashboard page",
    description="Navigation, statistics, recent projects, activity and charts.",
)
async def dashboard(app: AppState = Depends(get_dashboard_state)) -> Dict[str, Any]:
    return await DashboardController(app).render()


@router.get("/widgets/{name}", summary="Refresh one dashboard widget")
async def refresh_widget(name: str, app: AppState = Depends(get_dashboard_state)) -> Dict[str, Any]:
    return await DashboardController(app).refresh(name)
