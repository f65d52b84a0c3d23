"""Shared pytest fixtures for generator, service, API and CLI tests."""

import os

# Must be set before qrcode_urls builds its engine at import time.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

from collections.abc import AsyncGenerator
from unittest.mock import MagicMock, Mock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from qrcode_urls.config import Settings, get_settings
from qrcode_urls.database import Base, get_db
from qrcode_urls.main import app
from qrcode_urls.models import UrlRecord  # noqa: F401  registers the table on Base.metadata


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def mock_logger() -> MagicMock:
    logger = MagicMock()
    logger.info = MagicMock()
    logger.debug = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    return logger


@pytest.fixture
def ctx(db_session: AsyncSession, mock_logger: MagicMock, settings: Settings) -> Mock:
    ctx = Mock()
    ctx.database = db_session
    ctx.logger = mock_logger
    ctx.settings = settings
    return ctx


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(scope="session", autouse=True)
def _service_manager_logger() -> None:
    # Set up the shared logger handler once, outside any per-test capsys capture,
    # so it is not bound to a stream that a finished test has already closed.
    from qrcode_urls.dependencies import get_service_manager

    get_service_manager()
