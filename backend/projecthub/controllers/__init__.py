"""Page controllers: one per page, each built on the request's AppState."""

from projecthub.controllers.account import NotificationsController, ProfileController
from projecthub.controllers.base import PageController, mutation_result
from projecthub.controllers.chats import ChatsController
from projecthub.controllers.dashboard import DashboardController, emergency_dashboard
from projecthub.controllers.projects import ProjectDetailsController, ProjectsController
from projecthub.controllers.search import SearchController
from projecthub.controllers.work import FilesController, TasksController

__all__ = [
    "ChatsController",
    "DashboardController",
    "FilesController",
    "NotificationsController",
    "PageController",
    "ProfileController",
    "ProjectDetailsController",
    "ProjectsController",
    "SearchController",
    "TasksController",
    "emergency_dashboard",
    "mutation_result",
]
