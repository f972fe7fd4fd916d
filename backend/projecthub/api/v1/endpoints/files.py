"""File Endpoints

Files are uploaded to storage by the client; these endpoints record and
remove the metadata.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from projecthub.api.deps import AppState, get_app_state
from projecthub.controllers import FilesController
from projecthub.schemas import FileCreate

router = APIRouter(prefix="/files")


@router.get("", summary="Files page")
async def list_files(
    category: Optional[str] = Query(None, description="File category or 'all'"),
    app: AppState = Depends(get_app_state),
) -> Dict[str, Any]:
    return await FilesController(app).render(category)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Record uploaded file")
async def upload_file(payload: FileCreate, app: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    return await FilesController(app).upload(payload)


@router.delete("/{file_id}", summary="Delete file")
async def delete_file(file_id: str, app: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    return await FilesController(app).delete(file_id)
