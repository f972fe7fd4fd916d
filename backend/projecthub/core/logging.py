"""
Structured Logging Configuration

structlog on top of the standard library: JSON lines outside development,
a colourised console renderer while developing. Session tokens, passwords
and the signing key are redacted before anything reaches a handler.
"""

import logging
import logging.config
import re
import sys
import time
from typing import Any, List, Optional

import structlog
from structlog.processors import JSONRenderer

from projecthub.core.config import settings


REDACTED = "***REDACTED***"


# =============================================================================
# Secret Redaction Filter
# =============================================================================

class SecretFilter(logging.Filter):
    """
    Redact credentials from log records.

    Covers the signing key, passwords, bearer/session tokens and the
    persisted auth-token cookie value.
    """

    SENSITIVE_PATTERNS = [
        (r'["\']?secret[_-]?key["\']?\s*[:=]\s*["\']?[^"\'\s,}]+["\']?', REDACTED),
        (r'["\']?password["\']?\s*[:=]\s*["\']?[^"\'\s,}]+["\']?', REDACTED),
        (r'["\']?(access_|session_)?token["\']?\s*[:=]\s*["\']?[^"\'\s,}]+["\']?', REDACTED),
        (r'projecthub-auth-token=[^;\s]+', f"projecthub-auth-token={REDACTED}"),
        (r'Bearer\s+[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+', f"Bearer {REDACTED}"),
    ]

    def __init__(self, secrets: Optional[List[str]] = None):
        super().__init__()
        self.secrets = list(secrets or [])
        if settings.SECRET_KEY:
            self.secrets.append(settings.SECRET_KEY)
        self._compiled = [
            (re.compile(pattern, re.IGNORECASE), replacement)
            for pattern, replacement in self.SENSITIVE_PATTERNS
        ]

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.redact(record.msg)
        elif isinstance(record.msg, dict):
            # structlog event dict, rendered later by ProcessorFormatter
            record.msg = {
                key: self.redact(value) if isinstance(value, str) else value
                for key, value in record.msg.items()
            }
        if record.args:
            record.args = tuple(
                self.redact(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        return True

    def redact(self, text: str) -> str:
        """Return ``text`` with every known secret pattern masked."""
        for pattern, replacement in self._compiled:
            text = pattern.sub(replacement, text)
        for secret in self.secrets:
            if secret and len(secret) > 3:
                text = text.replace(secret, REDACTED)
        return text


# =============================================================================
# Logging Configuration
# =============================================================================

def configure_logging() -> None:
    """
    Configure stdlib logging and structlog for the service.

    Safe to call more than once; the last call wins.
    """
    is_json = settings.LOG_FORMAT == "json" and not settings.is_development
    level = settings.LOG_LEVEL.value
    foreign_pre_chain = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    JSONRenderer(),
                ],
                "foreign_pre_chain": foreign_pre_chain,
            },
            "console": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.dev.ConsoleRenderer(),
                ],
                "foreign_pre_chain": foreign_pre_chain,
            },
        },
        "filters": {
            "secret_filter": {
                "()": SecretFilter,
            },
        },
        "handlers": {
            "default": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "json" if is_json else "console",
                "stream": sys.stdout,
                "filters": ["secret_filter"],
            },
        },
        "loggers": {
            "": {
                "handlers": ["default"],
                "level": level,
                "propagate": True,
            },
            "uvicorn.access": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "handlers": ["default"],
                "level": "INFO" if settings.DEBUG else "WARNING",
                "propagate": False,
            },
        },
    }

    if settings.LOG_FILE:
        logging_config["handlers"]["file"] = {
            "level": level,
            "class": "logging.handlers.RotatingFileHandler",
            "filename": settings.LOG_FILE,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "formatter": "json" if is_json else "console",
            "filters": ["secret_filter"],
        }
        logging_config["loggers"][""]["handlers"].append("file")

    logging.config.dictConfig(logging_config)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        # rendering happens once, in the handler's ProcessorFormatter
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Example:
        logger = get_logger(__name__)
        logger.info("Project created", project_id="proj-1", mode="demo")
    """
    return structlog.get_logger(name)


# =============================================================================
# Context Binding
# =============================================================================

class LogContext:
    """
    Bind fields to every log line emitted inside the block.

    Example:
        with LogContext(mode="demo", user_id="demo-user-123"):
            logger.info("Rendering dashboard")
    """

    def __init__(self, **context: Any) -> None:
        self.context = context
        self.token = None

    def __enter__(self) -> "LogContext":
        self.token = structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        structlog.contextvars.reset_contextvars(**self.token)


def bind_context(**context: Any) -> None:
    """Bind fields (e.g. session mode, user id) to all subsequent logs."""
    structlog.contextvars.bind_contextvars(**context)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


# =============================================================================
# Request Logging Middleware
# =============================================================================

class RequestLoggingMiddleware:
    """Log method, path, status and duration of every HTTP request."""

    def __init__(self) -> None:
        self.logger = get_logger("http.request")

    async def __call__(self, request: Any, call_next: Any) -> Any:
        start = time.perf_counter()
        method = request.method
        path = request.url.path

        clear_context()
        with LogContext(request_id=request.headers.get("x-request-id"), path=path):
            try:
                response = await call_next(request)
            except Exception as e:
                self.logger.error(
                    "Request failed",
                    method=method,
                    error=str(e),
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                )
                raise

            self.logger.info(
                "Request completed",
                method=method,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            return response


configure_logging()
