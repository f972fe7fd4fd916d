"""Session resolution and client state."""

from projecthub.session.resolver import SessionResolution, SessionResolver
from projecthub.session.state import CookieStateStore, MemoryStateStore, StateStore

__all__ = [
    "CookieStateStore",
    "MemoryStateStore",
    "SessionResolution",
    "SessionResolver",
    "StateStore",
]
