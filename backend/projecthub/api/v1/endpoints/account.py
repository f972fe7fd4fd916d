"""Profile and notification endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from projecthub.api.deps import AppState, get_app_state
from projecthub.controllers import NotificationsController, ProfileController
from projecthub.schemas import NotificationsRead, ProfileUpdate

router = APIRouter()


@router.get("/profile", summary="Profile page")
async def profile(app: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    return await ProfileController(app).render()


@router.patch("/profile", summary="Edit profile")
async def update_profile(payload: ProfileUpdate, app: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    return await ProfileController(app).update(payload)


@router.get("/notifications", summary="Notifications page")
async def notifications(app: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    return await NotificationsController(app).render()


@router.post("/notifications/read", summary="Mark notifications as read")
async def mark_read(payload: NotificationsRead, app: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    return await NotificationsController(app).mark_read(payload.ids)


@router.post("/notifications/read-all", summary="Mark every notification as read")
async def mark_all_read(app: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    return await NotificationsController(app).mark_all_read()
