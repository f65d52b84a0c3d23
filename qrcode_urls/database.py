"""Database configuration and session management for the QR code URL generator.

This module provides SQLAlchemy async engine setup, session management,
and database lifecycle operations. PostgreSQL (asyncpg) is the default
backend; SQLite (aiosqlite) URLs are accepted for local runs and tests.

Flow Diagram — Database Operations
=================================
::
    ┌─────────────┐
    │  CLI run or  │
    │  API request │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ get_db() /   │
    │ async_session│
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Snapshot read│
    │ / bulk write │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Auto-close   │
    │ (finally)    │
    └─────────────┘

How to Use
===========
**Step 1 — Initialize on startup**::
    await init_db()  # Creates tables

**Step 2 — Use in FastAPI endpoints**::
    @app.get("/codes")
    async def get_codes(db: AsyncSession = Depends(get_db)):
        result = await db.execute(select(UrlRecord.code))
        return result.scalars().all()

**Step 3 — Cleanup on shutdown**::
    await close_db()

Key Behaviours
===============
- Async sessions are automatically closed after each request.
- Connection pooling is sized only for server databases.
- Tables are created automatically on startup.
- Engine is disposed on shutdown.

Classes:
    Base:  SQLAlchemy declarative base for all models.

Functions:
    build_engine():  Creates an async engine for a database URL.
    get_db():  FastAPI dependency for database sessions.
    init_db():  Creates all tables on startup.
    close_db():  Disposes the engine on shutdown.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from qrcode_urls.config import get_settings

__all__ = ["Base", "async_session", "build_engine", "get_db", "init_db", "close_db"]

settings = get_settings()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    options: dict[str, Any] = {"echo": echo}
    if not database_url.startswith("sqlite"):
        options.update(pool_size=5, max_overflow=5, pool_pre_ping=True)
    return create_async_engine(database_url, **options)


engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
