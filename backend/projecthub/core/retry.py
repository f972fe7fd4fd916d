"""
Retry Logic - backoff for backend reads.

Backend reads are retried only when the failure looks transient
(connection drop, timeout); constraint or permission failures propagate
on the first attempt.
"""
import asyncio
import functools
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

from projecthub.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class BackoffStrategy(Enum):
    """Backoff strategies for retries."""
    FIXED = "fixed"
    EXPONENTIAL = "exponential"


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    backoff_strategy: BackoffStrategy = BackoffStrategy.EXPONENTIAL
    should_retry: Optional[Callable[[BaseException], bool]] = None


class RetryHandler:
    """Runs an async operation, retrying failures the config deems transient."""

    def __init__(self, config: Optional[RetryConfig] = None):
        self.config = config or RetryConfig()

    def calculate_delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (1-based)."""
        base = self.config.base_delay
        if self.config.backoff_strategy == BackoffStrategy.FIXED:
            delay = base
        else:
            delay = base * (2 ** (attempt - 1))
        return min(delay, self.config.max_delay)

    def _retryable(self, error: BaseException) -> bool:
        if self.config.should_retry is None:
            return True
        return self.config.should_retry(error)

    async def execute_async(
        self,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        attempt = 0
        while True:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                attempt += 1
                if attempt > self.config.max_retries or not self._retryable(e):
                    if attempt > 1:
                        logger.error(
                            "Retries exhausted",
                            operation=getattr(func, "__name__", repr(func)),
                            attempts=attempt,
                            error=str(e),
                        )
                    raise
                delay = self.calculate_delay(attempt)
                logger.warning(
                    "Operation failed, retrying",
                    operation=getattr(func, "__name__", repr(func)),
                    attempt=attempt,
                    max_attempts=self.config.max_retries + 1,
                    delay_seconds=delay,
                    error=str(e),
                )
                await asyncio.sleep(delay)


async def retry_operation(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    initial_delay: float = 1.0,
    should_retry: Optional[Callable[[BaseException], bool]] = None,
) -> T:
    """Run ``operation`` with exponential backoff starting at ``initial_delay``."""
    handler = RetryHandler(RetryConfig(
        max_retries=max_retries,
        base_delay=initial_delay,
        should_retry=should_retry,
    ))
    return await handler.execute_async(operation)


def retry(
    max_retries: int = 3,
    base_delay: float = 1.0,
    should_retry: Optional[Callable[[BaseException], bool]] = None,
    backoff_strategy: BackoffStrategy = BackoffStrategy.EXPONENTIAL,
):
    """Decorator adding retry logic to a coroutine function."""
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        handler = RetryHandler(RetryConfig(
            max_retries=max_retries,
            base_delay=base_delay,
            backoff_strategy=backoff_strategy,
            should_retry=should_retry,
        ))

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await handler.execute_async(func, *args, **kwargs)

        return wrapper

    return decorator
