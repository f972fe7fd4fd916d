"""
Recent error log.

Keeps the last N errors in a bounded in-process buffer so they can be
inspected from the diagnostics endpoint, and forwards them to Sentry.
"""

import threading
from collections import deque
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

from projecthub.core.config import settings
from projecthub.core.logging import get_logger
from projecthub.core.sentry import capture_exception

logger = get_logger(__name__)


@dataclass
class ErrorEntry:
    """A single logged error."""
    message: str
    page: str
    action: str
    user_id: str
    error_type: str
    mode: str = "unknown"
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ErrorLog:
    """Bounded, newest-first error buffer."""

    def __init__(self, capacity: int = 50):
        self.capacity = capacity
        self._entries: Deque[ErrorEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def record(
        self,
        error: BaseException,
        page: Optional[str] = None,
        action: Optional[str] = None,
        user_id: Optional[str] = None,
        mode: Optional[str] = None,
        **context: Any,
    ) -> ErrorEntry:
        entry = ErrorEntry(
            message=str(error) or error.__class__.__name__,
            page=page or "unknown",
            action=action or "unknown",
            user_id=user_id or "anonymous",
            error_type=error.__class__.__name__,
            mode=mode or "unknown",
            context={k: v for k, v in context.items() if v is not None},
        )
        with self._lock:
            self._entries.appendleft(entry)
        return entry

    def recent(
        self,
        limit: Optional[int] = None,
        user_id: Optional[str] = None,
        mode: Optional[str] = None,
    ) -> List[ErrorEntry]:
        """Newest entries first, optionally only those of one user in one mode."""
        with self._lock:
            entries = list(self._entries)
        if user_id is not None:
            entries = [e for e in entries if e.user_id == user_id]
        if mode is not None:
            entries = [e for e in entries if e.mode == mode]
        return entries[:limit] if limit else entries

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


error_log = ErrorLog(capacity=settings.ERROR_BUFFER_SIZE)


def log_error(
    error: BaseException,
    page: Optional[str] = None,
    action: Optional[str] = None,
    user_id: Optional[str] = None,
    mode: Optional[str] = None,
    **context: Any,
) -> ErrorEntry:
    """
    Record an error with the page/action it happened in.

    The error is logged, pushed onto the recent-errors buffer and, when
    Sentry is configured, captured there as well.
    """
    entry = error_log.record(error, page=page, action=action, user_id=user_id, mode=mode, **context)
    logger.error(
        "Operation failed",
        page=entry.page,
        action=entry.action,
        user_id=entry.user_id,
        mode=entry.mode,
        error=entry.message,
        error_type=entry.error_type,
    )
    if isinstance(error, Exception):
        capture_exception(error, page=entry.page, action=entry.action)
    return entry
