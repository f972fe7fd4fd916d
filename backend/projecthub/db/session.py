"""
Database Session Management

Async SQLAlchemy engine and session factory with lifecycle handling.
PostgreSQL (asyncpg) in production, SQLite (aiosqlite) in tests.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from projecthub.core.config import settings, to_async_url
from projecthub.core.logging import get_logger

logger = get_logger(__name__)

# pool_recycle: seconds after which connections are recycled
# pool_pre_ping: verify connection validity before use
POOL_CONFIG = {
    "pool_size": settings.DB_POOL_SIZE,
    "max_overflow": 5,
    "pool_recycle": 3600,
    "pool_pre_ping": True,
}


class DatabaseManager:
    """Owns the async engine and session factory for the process."""

    def __init__(self) -> None:
        self._async_engine: Optional[AsyncEngine] = None
        self._async_session_factory: Optional[async_sessionmaker] = None

    @property
    def initialized(self) -> bool:
        return self._async_engine is not None

    def initialize(self, database_url: Optional[str] = None) -> None:
        """
        Create the engine and session factory.

        Args:
            database_url: Optional database URL override
        """
        db_url = database_url or settings.DATABASE_URL
        if not db_url:
            raise ValueError("Database URL not configured")

        async_url = to_async_url(db_url)

        if async_url.startswith("sqlite"):
            # One shared connection so in-memory databases survive across sessions
            engine_kwargs = {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        else:
            engine_kwargs = dict(POOL_CONFIG)
            logger.info(
                "Initializing database connection pool",
                pool_size=POOL_CONFIG["pool_size"],
                max_overflow=POOL_CONFIG["max_overflow"],
            )

        self._async_engine = create_async_engine(
            async_url,
            echo=settings.DEBUG,
            **engine_kwargs,
        )
        self._async_session_factory = async_sessionmaker(
            self._async_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info("Database engine initialized", dialect=self._async_engine.dialect.name)

    @property
    def async_engine(self) -> AsyncEngine:
        if self._async_engine is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._async_engine

    @property
    def async_session_factory(self) -> async_sessionmaker:
        if self._async_session_factory is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._async_session_factory

    async def create_tables(self) -> None:
        """Create every table known to the metadata (development/testing)."""
        from projecthub.db.base import Base

        async with self.async_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def close(self) -> None:
        """Close all database connections."""
        if self._async_engine:
            await self._async_engine.dispose()
            self._async_engine = None
            self._async_session_factory = None
            logger.info("Database connection pool closed")


db_manager = DatabaseManager()

