"""Task Endpoints"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from projecthub.api.deps import AppState, get_app_state
from projecthub.controllers import TasksController
from projecthub.schemas import TaskAssign, TaskCreate, TaskStatusChange, TaskUpdate

router = APIRouter(prefix="/tasks")


@router.get("", summary="Tasks page")
async def list_tasks(
    task_status: Optional[str] = Query(None, alias="status", description="Task status or 'all'"),
    project_id: Optional[str] = Query(None, description="Project id or 'all'"),
    app: AppState = Depends(get_app_state),
) -> Dict[str, Any]:
    return await TasksController(app).render(task_status, project_id)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create task")
async def create_task(payload: TaskCreate, app: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    return await TasksController(app).create(payload)


@router.patch("/{task_id}", summary="Edit task")
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    app: AppState = Depends(get_app_state),
) -> Dict[str, Any]:
    return await TasksController(app).update(task_id, payload)


@router.post("/{task_id}/status", summary="Move task to another column")
async def change_task_status(
    task_id: str,
    payload: TaskStatusChange,
    app: AppState = Depends(get_app_state),
) -> Dict[str, Any]:
    return await TasksController(app).change_status(task_id, payload)


@router.post("/{task_id}/assign", summary="Assign or unassign task")
async def assign_task(
    task_id: str,
    payload: TaskAssign,
    app: AppState = Depends(get_app_state),
) -> Dict[str, Any]:
    return await TasksController(app).assign(task_id, payload)


@router.delete("/{task_id}", summary="Delete task")
async def delete_task(task_id: str, app: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    return await TasksController(app).delete(task_id)
