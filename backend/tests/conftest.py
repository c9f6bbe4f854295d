"""Shared test fixtures.

Database-backed tests run against an in-memory SQLite database (aiosqlite)
created from the ORM metadata, one fresh database per test.
"""

import os
import uuid
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-jwt")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("S3_BUCKET", "")

from storefront.core.cache import SettingsCache  # noqa: E402
from storefront.core.dependencies import get_settings_service  # noqa: E402
from storefront.core.security import create_access_token  # noqa: E402
from storefront.db.base import Base  # noqa: E402
from storefront.main import app  # noqa: E402
from storefront.models import StoreSettings  # noqa: E402, F401
from storefront.services.settings_service import StoreSettingsService  # noqa: E402
from storefront.services.template_switch import TemplateSwitchController  # noqa: E402

TEST_ENABLED_TEMPLATES = frozenset(
    {"pro", "kids", "classic", "fashion", "beauty", "bags", "cafe", "electronics"}
)


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy emit BEGIN itself so SAVEPOINT/ROLLBACK behave on pysqlite."""

    @event.listens_for(engine.sync_engine, "connect")
    def _do_connect(dbapi_connection, connection_record):  # noqa: ARG001
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    _enable_sqlite_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def settings_cache() -> SettingsCache:
    return SettingsCache(ttl_seconds=30)


@pytest.fixture
def service(
    session_factory: async_sessionmaker[AsyncSession], settings_cache: SettingsCache
) -> StoreSettingsService:
    return StoreSettingsService(
        session_factory,
        cache=settings_cache,
        controller=TemplateSwitchController(enabled_templates=TEST_ENABLED_TEMPLATES),
    )


@pytest.fixture
def tenant_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
async def client(service: StoreSettingsService) -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client wired to the per-test settings service."""
    app.dependency_overrides[get_settings_service] = lambda: service
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_settings_service, None)


def auth_headers(tenant_id: uuid.UUID, sub: str = "test-sub") -> dict:
    """Return Authorization headers with a signed token for ``tenant_id``."""
    token = create_access_token(sub=sub, tenant_id=tenant_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers(tenant_id: uuid.UUID) -> dict:
    return auth_headers(tenant_id)
