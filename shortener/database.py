"""Database handle and session management for the URL shortener.

This module provides the SQLAlchemy async engine wrapper used by the store.
The handle is constructed explicitly and handed to whoever needs it; there is
no module-level engine.

Flow Diagram — Database Lifecycle
=================================
::
    ┌─────────────┐
    │ Database(   │
    │  url)       │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ connect()   │
    │ create_all  │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ sessions()  │
    │ per call    │◄──── URLStorage.save_url / resolve_url
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ close()     │
    │ dispose     │
    └─────────────┘

How to Use
===========
**Step 1 — Open on startup**::
    db = Database(settings.DATABASE_URL)
    await db.connect()

**Step 2 — Hand the session factory to the store**::
    storage = URLStorage(db.sessions)

**Step 3 — Close on shutdown**::
    await db.close()

Or scoped::
    async with Database(url) as db:
        ...

Key Behaviours
===============
- Tables (and the unique index on alias) are created on connect().
- Sessions do not expire objects on commit.
- The engine is disposed exactly once on close().

Classes:
    Base:  SQLAlchemy declarative base for all models.
    Database:  Engine + session factory with an explicit lifecycle.
"""

from types import TracebackType

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

__all__ = ["Base", "Database"]


class Base(DeclarativeBase):
    pass


class Database:
    """Owns the async engine for one process.

    Args:
        url: SQLAlchemy async URL, e.g. ``sqlite+aiosqlite:///./storage.db``.
        echo: Log every SQL statement (development only).
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo, pool_pre_ping=True)
        self.sessions: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def connect(self) -> None:
        import shortener.models  # noqa: F401  registers the urls table on Base.metadata

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def close(self) -> None:
        await self.engine.dispose()

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<Database(url='{self.engine.url.render_as_string(hide_password=True)}')>"
