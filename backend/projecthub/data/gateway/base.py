"""
Gateway plumbing shared by every SQLAlchemy repository.

Reads are retried on transient failures; every raw SQLAlchemy error is
translated into a :class:`~projecthub.middleware.exception.BackendError`
before leaving the gateway.
"""

from typing import Any, Awaitable, Callable, Dict, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from projecthub.core.config import settings
from projecthub.core.retry import retry_operation
from projecthub.data.base import SessionMode
from projecthub.middleware.exception import classify_backend_error, should_retry
from projecthub.services.realtime import ChangeBroker

R = TypeVar("R", bound=BaseModel)
T = TypeVar("T")


def row_to_dict(obj: Any) -> Dict[str, Any]:
    """Column values of an ORM instance keyed by column name."""
    mapper = inspect(obj).mapper
    return {attr.columns[0].name: getattr(obj, attr.key) for attr in mapper.column_attrs}


def to_record(model: Type[R], obj: Any, **extra: Any) -> R:
    return model.model_validate({**row_to_dict(obj), **extra})


class GatewayMixin:
    """Session handling for the relational repositories."""

    def __init__(self, session: AsyncSession, broker: Optional[ChangeBroker] = None) -> None:
        super().__init__(SessionMode.REAL)
        self.db = session
        self.broker = broker

    async def _read(self, operation: Callable[[], Awaitable[T]]) -> T:
        try:
            return await retry_operation(
                operation,
                max_retries=settings.BACKEND_MAX_RETRIES,
                initial_delay=settings.BACKEND_RETRY_DELAY_SECONDS,
                should_retry=should_retry,
            )
        except SQLAlchemyError as e:
            raise classify_backend_error(e) from e

    async def _write(self, operation: Callable[[], Awaitable[T]], refresh: bool = False) -> T:
        try:
            result = await operation()
            await self.db.commit()
            if refresh and result is not None:
                await self.db.refresh(result)
            return result
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise classify_backend_error(e) from e

    def _publish(self, table: str, record: BaseModel) -> None:
        if self.broker is not None:
            self.broker.publish(SessionMode.REAL.value, table, record.model_dump(mode="json"))
