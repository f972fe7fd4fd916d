"""
Client State Store

Small per-client key/value state (demo flag, cached user, saved timeline,
notification read-state). Over HTTP it lives in cookies; tests use the
in-memory variant. Both stores refuse nothing themselves; callers check
:meth:`StateStore.fits` before writing anything that can grow.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Mapping, Optional

from starlette.responses import Response

from projecthub.core.config import settings
from projecthub.core.logging import get_logger

logger = get_logger(__name__)


def write_cookie(response: Response, key: str, value: str) -> None:
    response.set_cookie(
        key,
        value,
        max_age=settings.STATE_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


def cookie_size(key: str, value: str) -> int:
    """Length of the Set-Cookie header that storing ``value`` would produce."""
    response = Response()
    write_cookie(response, key, value)
    return len(response.headers["set-cookie"])


def encode_json(value: Any) -> str:
    return json.dumps(value, default=str, separators=(",", ":"))


def state_keys() -> Iterable[str]:
    return (
        settings.STATE_DEMO_MODE_KEY,
        settings.STATE_USER_KEY,
        settings.STATE_AUTH_TOKEN_KEY,
        settings.STATE_GANTT_KEY,
        settings.STATE_NOTIFICATIONS_READ_KEY,
    )


class StateStore(ABC):
    """The one place widgets and the resolver read client state from."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    def get_json(self, key: str) -> Any:
        """Decoded JSON value; raises ``ValueError`` when the stored text is malformed."""
        raw = self.get(key)
        if not raw:
            return None
        return json.loads(raw)

    def set_json(self, key: str, value: Any) -> None:
        self.set(key, encode_json(value))

    def fits(self, key: str, value: str) -> bool:
        """Whether ``value`` stays under the browser cookie limit once written."""
        return cookie_size(key, value) <= settings.STATE_COOKIE_MAX_BYTES

    def set_json_if_fits(self, key: str, value: Any) -> bool:
        """Store a cache entry, or drop the key when the value is too large to keep."""
        encoded = encode_json(value)
        if self.fits(key, encoded):
            self.set(key, encoded)
            return True
        logger.warning("State value too large, not stored", key=key, size=len(encoded))
        self.delete(key)
        return False

    def get_flag(self, key: str) -> bool:
        return self.get(key) == "true"

    def clear(self) -> None:
        for key in state_keys():
            self.delete(key)


class MemoryStateStore(StateStore):

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self.values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


class CookieStateStore(StateStore):
    """
    State read from request cookies.

    Writes are recorded and copied onto the outgoing response by
    :meth:`apply`; reads see them immediately.
    """

    def __init__(self, cookies: Mapping[str, str]) -> None:
        self._values: Dict[str, str] = dict(cookies)
        self._pending: Dict[str, Optional[str]] = {}

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value
        self._pending[key] = value

    def delete(self, key: str) -> None:
        if key in self._values or key in self._pending:
            self._values.pop(key, None)
            self._pending[key] = None

    @property
    def dirty(self) -> bool:
        return bool(self._pending)

    def apply(self, response: Response) -> None:
        for key, value in self._pending.items():
            if value is None:
                response.delete_cookie(key, path="/")
            else:
                write_cookie(response, key, value)
        if self._pending:
            logger.debug("Client state written", keys=sorted(self._pending))
        self._pending.clear()
