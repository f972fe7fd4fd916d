"""Global search results."""

from typing import Any, Dict, Optional

from projecthub.controllers.base import PageController
from projecthub.services.search import CATEGORIES, SearchService
from projecthub.session.context import AppState


class SearchController(PageController):

    page = "search"

    def __init__(self, app: AppState) -> None:
        super().__init__(app)
        self.searcher = SearchService(app.data, app.user)

    async def render(
        self,
        query: str,
        limit: int,
        project_type: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Dict[str, Any]:
        results = (await self.searcher.search(query, project_type, status)).to_dict(limit)
        for name in CATEGORIES:
            for hit in results[name]:
                hit["url"] = self._link(hit)
        return self.view(**results)

    def _link(self, hit: Dict[str, Any]) -> str:
        if hit["kind"] == "contact":
            return self.url("/chats")
        if hit["kind"] == "file":
            return self.url(f"/projects/{hit['project_id']}") + "#files"
        return self.url(f"/projects/{hit['project_id']}")
