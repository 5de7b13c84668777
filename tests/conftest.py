"""Shared pytest fixtures for store, database and API tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from shortener.config import Settings
from shortener.database import Database
from shortener.main import create_app
from shortener.storage import URLStorage

TEST_USER = "writer"
TEST_PASSWORD = "s3cret"


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'storage.db'}"


@pytest.fixture
def settings(database_url: str) -> Settings:
    return Settings(
        DATABASE_URL=database_url,
        HTTP_USER=TEST_USER,
        HTTP_PASSWORD=TEST_PASSWORD,
        REQUEST_TIMEOUT_SECONDS=5.0,
    )


@pytest_asyncio.fixture(scope="function")
async def database(database_url: str) -> AsyncGenerator[Database, None]:
    async with Database(database_url) as db:
        yield db


@pytest_asyncio.fixture(scope="function")
async def storage(database: Database) -> URLStorage:
    return URLStorage(database.sessions)


@pytest_asyncio.fixture(scope="function")
async def client(settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    app = create_app(settings)
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


@pytest.fixture
def auth() -> tuple[str, str]:
    return (TEST_USER, TEST_PASSWORD)
