"""
File metadata service.

Uploads are validated by MIME type and size before anything is stored:
images up to 5 MB, documents up to 50 MB.
"""

from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

from projecthub.data.base import DataAccess
from projecthub.middleware.exception import NotFoundException, ValidationException
from projecthub.models.enums import FileCategory, UpdateType
from projecthub.schemas import FileCreate, FileRecord, ProjectRecord, UserRecord
from projecthub.services.access import require_project
from projecthub.services.activity import ActivityService

MB = 1024 * 1024

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp")
ALLOWED_DOCUMENT_TYPES = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/plain",
    "text/csv",
)
MAX_IMAGE_SIZE = 5 * MB
MAX_DOCUMENT_SIZE = 50 * MB


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KB", "MB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def validate_upload(file_type: str, file_size: int) -> None:
    """
    Reject a file by type or size.

    Raises:
        ValidationException: type not allowed or file too large
    """
    mime = file_type.lower()
    if mime in ALLOWED_IMAGE_TYPES:
        limit = MAX_IMAGE_SIZE
    elif mime in ALLOWED_DOCUMENT_TYPES:
        limit = MAX_DOCUMENT_SIZE
    else:
        raise ValidationException(
            f"File type {file_type} is not allowed",
            {"allowed": list(ALLOWED_IMAGE_TYPES + ALLOWED_DOCUMENT_TYPES)},
        )
    if file_size > limit:
        raise ValidationException(
            f"File size ({format_size(file_size)}) exceeds maximum allowed ({limit // MB}MB)",
            {"max_bytes": limit},
        )


def category_counts(files: Iterable[FileRecord]) -> Dict[str, int]:
    counts = Counter(f.category for f in files)
    return {category.value: counts[category.value] for category in FileCategory}


def total_storage(files: Iterable[FileRecord]) -> int:
    return sum(f.file_size or 0 for f in files)


class FileService:

    def __init__(self, data: DataAccess, user: UserRecord) -> None:
        self.data = data
        self.user = user
        self.activity = ActivityService(data, user)

    async def list_all(self) -> List[Tuple[ProjectRecord, FileRecord]]:
        projects = await self.data.projects.list(self.user.id)
        pairs = []
        for project in projects:
            for project_file in await self.data.files.list(project.id):
                pairs.append((project, project_file))
        pairs.sort(key=lambda pair: pair[1].uploaded_at, reverse=True)
        return pairs

    async def list_for_project(self, project_id: str, category: Optional[str] = None) -> List[FileRecord]:
        await require_project(self.data, self.user, project_id)
        return await self.data.files.list(project_id, category)

    async def create(self, payload: FileCreate) -> FileRecord:
        validate_upload(payload.file_type, payload.file_size)
        await require_project(self.data, self.user, payload.project_id)
        if payload.task_id:
            task = await self.data.tasks.get(payload.task_id)
            if task is None or task.project_id != payload.project_id:
                raise ValidationException("Task does not belong to this project",
                                          {"task_id": payload.task_id})
        project_file = await self.data.files.create(self.user.id, payload.model_dump())
        await self.activity.record(
            project_file.project_id,
            UpdateType.FILE_UPLOADED,
            f"File uploaded: {project_file.file_name}",
            {"file_id": project_file.id},
        )
        return project_file

    async def delete(self, file_id: str) -> None:
        project_file = await self.data.files.get(file_id)
        if project_file is None:
            raise NotFoundException("File", file_id)
        await require_project(self.data, self.user, project_file.project_id)
        if not await self.data.files.delete(file_id):
            raise NotFoundException("File", file_id)
