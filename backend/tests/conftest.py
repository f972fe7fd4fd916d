"""
Pytest Configuration and Fixtures

Provides shared fixtures for all tests. The environment is configured
before anything from ``projecthub`` is imported, because settings are
read once at import time.
"""

import os

os.environ.setdefault("SECRET_KEY", "projecthub-test-secret-key-0123456789abcdef")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "testing"
os.environ["DB_CREATE_TABLES"] = "true"
os.environ["BACKEND_RETRY_DELAY_SECONDS"] = "0"
os.environ["SENTRY_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"

from datetime import datetime, timezone  # noqa: E402
from typing import AsyncGenerator, Dict, Generator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from projecthub.core.config import settings  # noqa: E402
from projecthub.core.errors import error_log  # noqa: E402
from projecthub.core.security import token_manager  # noqa: E402
from projecthub.data import SessionMode  # noqa: E402
from projecthub.data.demo import DEMO_USER_ID, DemoDataAccess, DemoStore  # noqa: E402
from projecthub.data.gateway import GatewayDataAccess  # noqa: E402
from projecthub.db.base import Base  # noqa: E402
from projecthub.models import Profile  # noqa: E402
from projecthub.schemas import UserRecord  # noqa: E402
from projecthub.services.realtime import ChangeBroker  # noqa: E402
from projecthub.session.context import AppState  # noqa: E402
from projecthub.session.resolver import SessionResolution  # noqa: E402
from projecthub.session.state import MemoryStateStore  # noqa: E402


# =============================================================================
# Demo Fixtures
# =============================================================================

@pytest.fixture
def broker() -> ChangeBroker:
    """A private change broker so tests never see each other's events."""
    return ChangeBroker()


@pytest.fixture
def demo_store(broker) -> DemoStore:
    return DemoStore(broker=broker)


@pytest.fixture
def demo_data(demo_store) -> DemoDataAccess:
    """Demo data access over a freshly seeded store."""
    return DemoDataAccess(demo_store)


@pytest_asyncio.fixture
async def demo_user(demo_data) -> UserRecord:
    return await demo_data.users.get(DEMO_USER_ID)


@pytest.fixture
def state() -> MemoryStateStore:
    return MemoryStateStore()


@pytest.fixture
def app_state(demo_data, demo_user, state) -> AppState:
    """A resolved demo session as the page dependencies would build it."""
    resolution = SessionResolution(mode=SessionMode.DEMO, user=demo_user)
    return AppState(resolution=resolution, state=state, data=demo_data)


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with every table created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def owner(db_session) -> UserRecord:
    """A stored profile that owns the gateway test data."""
    profile = Profile(
        id="user-owner",
        email="owner@example.com",
        full_name="Olive Owner",
        role="user",
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        updated_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )
    colleague = Profile(id="user-colleague", email="colleague@example.com", full_name="Carl Colleague")
    db_session.add_all([profile, colleague])
    await db_session.commit()
    return UserRecord(id=profile.id, email=profile.email, full_name=profile.full_name)


@pytest.fixture
def gateway_data(db_session, broker) -> GatewayDataAccess:
    return GatewayDataAccess(db_session, broker)


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Test client; the lifespan creates the in-memory schema."""
    from projecthub.main import create_application

    with TestClient(create_application()) as test_client:
        yield test_client


@pytest.fixture
def demo_params() -> Dict[str, str]:
    return {settings.DEMO_QUERY_PARAM: "true"}


@pytest.fixture
def make_token():
    """Build a session token the resolver will accept."""

    def _make(user_id: str = "user-real", email: str = "real@example.com", **claims):
        return token_manager.create_token(
            user_id=user_id,
            email=email,
            user_metadata=claims.get("user_metadata"),
            app_metadata=claims.get("app_metadata"),
            expires_delta=claims.get("expires_delta"),
        )

    return _make


@pytest.fixture(autouse=True)
def clear_error_log():
    error_log.clear()
    yield
    error_log.clear()
