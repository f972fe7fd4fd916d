"""
Project access rules.

The owner can do everything. Members can view the project and work on
its tasks and files. Project settings, deletion and membership changes
are owner-only.
"""

from projecthub.data.base import DataAccess
from projecthub.middleware.exception import ForbiddenException, NotFoundException
from projecthub.schemas import ProjectRecord, UserRecord


async def is_member(data: DataAccess, project_id: str, user_id: str) -> bool:
    members = await data.members.list(project_id)
    return any(member.user_id == user_id for member in members)


async def require_project(
    data: DataAccess,
    user: UserRecord,
    project_id: str,
    owner_only: bool = False,
) -> ProjectRecord:
    """
    Load a project the user may access.

    Raises:
        NotFoundException: no such project
        ForbiddenException: the user is not the owner (or not a member)
    """
    project = await data.projects.get(project_id)
    if project is None:
        raise NotFoundException("Project", project_id)
    if project.user_id == user.id:
        return project
    if owner_only:
        raise ForbiddenException("Only the project owner can do this")
    if not await is_member(data, project_id, user.id):
        raise ForbiddenException("You are not a member of this project")
    return project
