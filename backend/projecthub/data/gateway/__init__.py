"""
Backend Gateway

Relational implementation of :class:`~projecthub.data.base.DataAccess`
over one async SQLAlchemy session.
"""

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from projecthub.data.base import DataAccess, SessionMode
from projecthub.data.gateway.chat import GatewayChatRepository
from projecthub.data.gateway.repositories import (
    GatewayFileRepository,
    GatewayMemberRepository,
    GatewayProjectRepository,
    GatewayTaskRepository,
    GatewayUpdateRepository,
    GatewayUserRepository,
)
from projecthub.services.realtime import ChangeBroker


class GatewayDataAccess(DataAccess):

    mode = SessionMode.REAL

    def __init__(self, session: AsyncSession, broker: Optional[ChangeBroker] = None) -> None:
        self.session = session
        self.users = GatewayUserRepository(session, broker)
        self.projects = GatewayProjectRepository(session, broker)
        self.tasks = GatewayTaskRepository(session, broker)
        self.files = GatewayFileRepository(session, broker)
        self.updates = GatewayUpdateRepository(session, broker)
        self.members = GatewayMemberRepository(session, broker)
        self.chat = GatewayChatRepository(session, broker)

    def health_check(self) -> Dict[str, Any]:
        return {**super().health_check(), "dialect": self.session.bind.dialect.name}

    async def close(self) -> None:
        await self.session.close()


__all__ = ["GatewayDataAccess"]
