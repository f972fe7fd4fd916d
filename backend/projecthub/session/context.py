"""
Per-request application state.

Each request gets exactly one :class:`AppState`: the resolved session, the
client state store and the data access chosen for the session's mode. It
is built by a FastAPI dependency and torn down when the request ends.
"""

from dataclasses import dataclass
from typing import Any, AsyncIterator

from fastapi import Depends, Request

from projecthub.core.logging import bind_context, get_logger
from projecthub.data.base import DataAccess, SessionMode
from projecthub.data.factory import create_data_access
from projecthub.middleware.exception import RedirectRequired
from projecthub.schemas import UserRecord
from projecthub.session.resolver import SessionResolution, SessionResolver
from projecthub.session.state import CookieStateStore, StateStore

logger = get_logger(__name__)


@dataclass
class AppState:
    resolution: SessionResolution
    state: StateStore
    data: DataAccess

    @property
    def mode(self) -> SessionMode:
        return self.data.mode

    @property
    def user(self) -> UserRecord:
        return self.resolution.user

    @property
    def is_demo(self) -> bool:
        return self.data.is_demo


class ClientStateMiddleware:
    """Attach a cookie state store to the request and flush its writes."""

    async def __call__(self, request: Request, call_next: Any) -> Any:
        store = CookieStateStore(request.cookies)
        request.state.client_state = store
        response = await call_next(request)
        store.apply(response)
        return response


def get_state_store(request: Request) -> StateStore:
    store = getattr(request.state, "client_state", None)
    if store is None:
        store = CookieStateStore(request.cookies)
        request.state.client_state = store
    return store


class SessionDependency:
    """
    Resolve the session and build the request's :class:`AppState`.

    Raises :class:`RedirectRequired` when the session resolves to a
    redirect, so the page never renders.
    """

    def __init__(self, redirect_admin: bool = False) -> None:
        self.redirect_admin = redirect_admin

    async def __call__(
        self,
        request: Request,
        state: StateStore = Depends(get_state_store),
    ) -> AsyncIterator[AppState]:
        resolution = SessionResolver(state).resolve(
            request.query_params,
            redirect_admin=self.redirect_admin,
        )
        if resolution.redirect_to:
            raise RedirectRequired(resolution.redirect_to)

        data = create_data_access(resolution.mode)
        bind_context(mode=resolution.mode.value, user_id=resolution.user.id)
        try:
            yield AppState(resolution=resolution, state=state, data=data)
        finally:
            await data.close()


get_app_state = SessionDependency()
get_dashboard_state = SessionDependency(redirect_admin=True)
