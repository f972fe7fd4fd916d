"""
Session Resolver

Decides, once per page load, whether the request is served in demo or
real mode and who the current user is:

1. ``?demo=true``                        -> demo, demo user
2. session token for the demo account    -> demo, demo user
3. any other valid session token         -> real, normalised profile
4. nothing usable                        -> redirect to login

Only the demo flag and the cached user are ever written. Anything going
wrong while resolving is treated as "no session".
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from projecthub.core.config import settings
from projecthub.core.errors import log_error
from projecthub.core.logging import get_logger
from projecthub.core.security import SessionClaims, SessionTokenError, SessionTokenManager, token_manager
from projecthub.data.base import SessionMode
from projecthub.data.demo.seed import DEMO_USER
from projecthub.models.enums import UserRole
from projecthub.schemas import UserRecord
from projecthub.session.state import StateStore

logger = get_logger(__name__)

# Used when the demo fixtures cannot provide a user
DEFAULT_DEMO_USER: Dict[str, Any] = {
    "id": "demo-user-123",
    "email": "demo@projecthub.com",
    "full_name": "Demo User",
    "role": "user",
}


def demo_user() -> UserRecord:
    """The fixed demo user, or a built-in default if the fixture is unusable."""
    try:
        return UserRecord.model_validate(DEMO_USER)
    except ValidationError as e:
        logger.warning("Demo user fixture invalid, using default", error=str(e))
        return UserRecord.model_validate(DEFAULT_DEMO_USER)


@dataclass
class SessionResolution:
    mode: Optional[SessionMode] = None
    user: Optional[UserRecord] = None
    redirect_to: Optional[str] = None

    @property
    def is_demo(self) -> bool:
        return self.mode == SessionMode.DEMO

    @property
    def authenticated(self) -> bool:
        return self.user is not None and self.redirect_to is None


def user_from_claims(claims: SessionClaims) -> UserRecord:
    """Normalise token claims into a profile record."""
    full_name = claims.user_metadata.get("full_name") or claims.email.split("@")[0]
    role = (
        claims.app_metadata.get("role")
        or claims.user_metadata.get("role")
        or UserRole.USER.value
    )
    if role not in {r.value for r in UserRole}:
        role = UserRole.USER.value
    return UserRecord(
        id=claims.sub,
        email=claims.email,
        full_name=full_name,
        role=role,
        avatar_url=claims.user_metadata.get("avatar_url"),
    )


class SessionResolver:

    def __init__(self, state: StateStore, tokens: Optional[SessionTokenManager] = None) -> None:
        self.state = state
        self.tokens = tokens or token_manager

    def resolve(
        self,
        query_params: Optional[Mapping[str, str]] = None,
        redirect_admin: bool = False,
    ) -> SessionResolution:
        """
        Resolve the session for one page load.

        Args:
            query_params: The request's query string
            redirect_admin: Send real admin sessions to the admin page

        Returns:
            The resolution; ``redirect_to`` is set when the page must not render
        """
        try:
            resolution = self._resolve(query_params or {})
        except Exception as e:
            log_error(e, page="session", action="resolve")
            return SessionResolution(redirect_to=settings.LOGIN_URL)

        if (
            redirect_admin
            and resolution.mode == SessionMode.REAL
            and resolution.user is not None
            and resolution.user.is_admin
        ):
            logger.info("Admin session on user page, redirecting", user_id=resolution.user.id)
            resolution.redirect_to = settings.ADMIN_URL
        return resolution

    def _resolve(self, query_params: Mapping[str, str]) -> SessionResolution:
        demo_requested = query_params.get(settings.DEMO_QUERY_PARAM) == "true"
        if demo_requested and settings.DEMO_MODE_ENABLED:
            return self._demo("query")

        claims = self._claims()
        if claims is not None and claims.email.lower() == settings.DEMO_USER_EMAIL.lower():
            if settings.DEMO_MODE_ENABLED:
                return self._demo("demo_account")
            return SessionResolution(redirect_to=settings.LOGIN_URL)

        if claims is not None:
            self.state.delete(settings.STATE_DEMO_MODE_KEY)
            user = self._cached_user(claims) or user_from_claims(claims)
            self.state.set_json_if_fits(settings.STATE_USER_KEY, user.model_dump(mode="json"))
            logger.debug("Resolved real session", user_id=user.id, role=user.role)
            return SessionResolution(mode=SessionMode.REAL, user=user)

        logger.info("No session found, redirecting to login")
        return SessionResolution(redirect_to=settings.LOGIN_URL)

    def _claims(self) -> Optional[SessionClaims]:
        token = self.state.get(settings.STATE_AUTH_TOKEN_KEY)
        if not token:
            return None
        try:
            return self.tokens.decode_token(token)
        except SessionTokenError as e:
            logger.info("Ignoring unusable session token", reason=str(e))
            return None

    def _cached_user(self, claims: SessionClaims) -> Optional[UserRecord]:
        cached = self.state.get_json(settings.STATE_USER_KEY)
        if not isinstance(cached, dict) or cached.get("id") != claims.sub:
            return None
        return UserRecord.model_validate(cached)

    def _demo(self, reason: str) -> SessionResolution:
        self.state.set(settings.STATE_DEMO_MODE_KEY, "true")
        logger.debug("Resolved demo session", reason=reason)
        return SessionResolution(mode=SessionMode.DEMO, user=demo_user())
