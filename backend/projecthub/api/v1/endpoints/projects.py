"""
Project Endpoints

Projects list with filters, project CRUD and the project details page
(timeline, activity posts and team management).
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from projecthub.api.deps import AppState, get_app_state, get_project_filters
from projecthub.controllers import ProjectDetailsController, ProjectsController
from projecthub.schemas import (
    MemberAdd,
    ProjectCreate,
    ProjectUpdate,
    TimelineSave,
    UpdateCreate,
)
from projecthub.services.projects import ProjectFilters

router = APIRouter(prefix="/projects")


# =============================================================================
# Projects list
# =============================================================================

@router.get("", summary="Projects page")
async def list_projects(
    filters: ProjectFilters = Depends(get_project_filters),
    app: AppState = Depends(get_app_state),
) -> Dict[str, Any]:
    return await ProjectsController(app).render(filters)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create project")
async def create_project(
    payload: ProjectCreate,
    app: AppState = Depends(get_app_state),
) -> Dict[str, Any]:
    return await ProjectsController(app).create(payload)


@router.patch("/{project_id}", summary="Update project")
async def update_project(
    project_id: str,
    payload: ProjectUpdate,
    app: AppState = Depends(get_app_state),
) -> Dict[str, Any]:
    return await ProjectsController(app).update(project_id, payload)


@router.delete("/{project_id}", summary="Delete project and everything in it")
async def delete_project(project_id: str, app: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    return await ProjectsController(app).delete(project_id)


# =============================================================================
# Project details
# =============================================================================

@router.get("/{project_id}/details", summary="Project details page")
async def project_details(
    project_id: str,
    category: Optional[str] = Query(None, description="File category filter"),
    app: AppState = Depends(get_app_state),
) -> Dict[str, Any]:
    return await ProjectDetailsController(app, project_id).render(category)


@router.put("/{project_id}/timeline", summary="Save edited timeline")
async def save_timeline(
    project_id: str,
    payload: TimelineSave,
    app: AppState = Depends(get_app_state),
) -> Dict[str, Any]:
    return await ProjectDetailsController(app, project_id).save_timeline(payload)


@router.delete("/{project_id}/timeline", summary="Discard saved timeline")
async def reset_timeline(project_id: str, app: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    return await ProjectDetailsController(app, project_id).reset_timeline()


@router.post("/{project_id}/updates", status_code=status.HTTP_201_CREATED, summary="Post update")
async def post_update(
    project_id: str,
    payload: UpdateCreate,
    app: AppState = Depends(get_app_state),
) -> Dict[str, Any]:
    payload = payload.model_copy(update={"project_id": project_id})
    return await ProjectDetailsController(app, project_id).post_update(payload)


@router.post("/{project_id}/members", status_code=status.HTTP_201_CREATED, summary="Add member")
async def add_member(
    project_id: str,
    payload: MemberAdd,
    app: AppState = Depends(get_app_state),
) -> Dict[str, Any]:
    return await ProjectDetailsController(app, project_id).add_member(payload)


@router.delete("/{project_id}/members/{user_id}", summary="Remove member")
async def remove_member(
    project_id: str,
    user_id: str,
    app: AppState = Depends(get_app_state),
) -> Dict[str, Any]:
    return await ProjectDetailsController(app, project_id).remove_member(user_id)
