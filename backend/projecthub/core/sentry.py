"""
Sentry Integration

Error tracking for unexpected failures. Everything here is a no-op unless
``SENTRY_ENABLED`` is set and a DSN is configured.
"""

import logging
from typing import Any, Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from projecthub.core.config import settings
from projecthub.core.logging import get_logger

logger = get_logger(__name__)

SENSITIVE_KEYS = {
    "password", "token", "secret", "authorization", "cookie", "session",
}


def sentry_active() -> bool:
    return bool(settings.SENTRY_ENABLED and settings.SENTRY_DSN)


def init_sentry() -> None:
    """Initialise the Sentry SDK when enabled."""
    if not sentry_active():
        logger.info("Sentry is disabled")
        return

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        release=settings.APP_VERSION,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
            StarletteIntegration(),
            FastApiIntegration(),
            SqlalchemyIntegration(),
        ],
        send_default_pii=False,
        attach_stacktrace=True,
        include_local_variables=False,
        before_send=before_send_event,
    )

    logger.info(
        "Sentry initialized",
        environment=settings.SENTRY_ENVIRONMENT,
        release=settings.APP_VERSION,
    )


def before_send_event(event: dict, hint: dict) -> Optional[dict]:
    """
    Drop expected client errors and scrub credentials.

    Demo sessions never carry real user data but the auth cookie of a real
    session does, so cookies are always removed.
    """
    if "exc_info" in hint:
        _, exc_value, _ = hint["exc_info"]
        status_code = getattr(exc_value, "status_code", None)
        if status_code is not None and status_code < 500:
            return None

    request = event.get("request")
    if request:
        if "cookies" in request:
            request["cookies"] = "[REDACTED]"
        if "headers" in request:
            request["headers"] = _scrub(request["headers"])
        if "data" in request:
            request["data"] = _scrub(request["data"])

    if "extra" in event:
        event["extra"] = _scrub(event["extra"])
    return event


def _scrub(value: Any, key: str = "") -> Any:
    if key and any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
        return "[REDACTED]"
    if isinstance(value, dict):
        return {k: _scrub(v, str(k)) for k, v in value.items()}
    if isinstance(value, list):
        return [_scrub(item) for item in value]
    return value


def capture_exception(error: Exception, **context: Any) -> Optional[str]:
    """
    Capture an exception in Sentry.

    Args:
        error: Exception to capture
        **context: Extra fields attached to the event

    Returns:
        Event ID if captured
    """
    if not sentry_active():
        return None

    with sentry_sdk.new_scope() as scope:
        for key, value in context.items():
            scope.set_extra(key, value)
        return sentry_sdk.capture_exception(error)
