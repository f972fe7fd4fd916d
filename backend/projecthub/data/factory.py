"""
Data Access Factory

Picks the data-access implementation for a resolved session mode. This is
the one place where demo and real are branched on; everything downstream
receives a :class:`DataAccess` and never asks which kind it got.

Usage:
    from projecthub.data.factory import create_data_access

    data = create_data_access(SessionMode.DEMO)
    projects = await data.projects.list(user.id)
"""

from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from projecthub.core.config import settings
from projecthub.core.logging import get_logger
from projecthub.data.base import DataAccess, SessionMode
from projecthub.services.realtime import ChangeBroker, get_change_broker

logger = get_logger(__name__)

DataAccessFactory = Callable[[Optional[AsyncSession], ChangeBroker], DataAccess]


class DataAccessRegistry:
    """Registry of data-access factories keyed by session mode."""

    def __init__(self) -> None:
        self._factories: Dict[SessionMode, DataAccessFactory] = {}

    def register(self, mode: SessionMode, factory: DataAccessFactory) -> None:
        self._factories[mode] = factory
        logger.debug("Registered data access", mode=mode.value)

    def create(
        self,
        mode: SessionMode,
        session: Optional[AsyncSession] = None,
        broker: Optional[ChangeBroker] = None,
    ) -> DataAccess:
        """
        Build the data access for one request.

        Args:
            mode: Resolved session mode
            session: Database session; opened from the engine when omitted in real mode
            broker: Realtime broker receiving inserts

        Raises:
            ValueError: demo mode requested while disabled, or nothing registered
        """
        if mode == SessionMode.DEMO and not settings.DEMO_MODE_ENABLED:
            raise ValueError("Demo mode is disabled")
        if mode not in self._factories:
            raise ValueError(f"No data access registered for mode: {mode.value}")

        data = self._factories[mode](session, broker or get_change_broker())
        logger.debug("Data access created", mode=mode.value)
        return data

    def get_status(self) -> Dict[str, Any]:
        return {
            "modes": self.list_modes(),
            "demo_enabled": settings.DEMO_MODE_ENABLED,
        }

    def list_modes(self) -> List[str]:
        return sorted(mode.value for mode in self._factories)


def _demo_factory(session: Optional[AsyncSession], broker: ChangeBroker) -> DataAccess:
    from projecthub.data.demo import DemoDataAccess

    return DemoDataAccess(broker=broker)


def _gateway_factory(session: Optional[AsyncSession], broker: ChangeBroker) -> DataAccess:
    from projecthub.data.gateway import GatewayDataAccess
    from projecthub.db.session import db_manager

    if session is None:
        session = db_manager.async_session_factory()
    return GatewayDataAccess(session, broker)


_registry = DataAccessRegistry()
_registry.register(SessionMode.DEMO, _demo_factory)
_registry.register(SessionMode.REAL, _gateway_factory)


def create_data_access(
    mode: SessionMode,
    session: Optional[AsyncSession] = None,
    broker: Optional[ChangeBroker] = None,
) -> DataAccess:
    return _registry.create(mode, session, broker)


def get_data_access_status() -> Dict[str, Any]:
    return _registry.get_status()
