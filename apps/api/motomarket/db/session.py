"""Database engine and request-scoped sessions."""
from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ..core.config import Settings, settings


def engine_options(config: Settings) -> dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` matching the configured backend.

    SQLite is used for local runs and tests: in-memory databases need a single
    shared connection, and the driver has no SSL or pre-ping story.
    """

    url = config.database_async_url
    if url.startswith("sqlite"):
        options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
            options["poolclass"] = StaticPool
        return options

    connect_args: dict[str, Any] = {}
    if config.database_ssl_required:
        connect_args["ssl"] = True
    return {"pool_pre_ping": True, "connect_args": connect_args}


def build_engine(config: Settings) -> AsyncEngine:
    return create_async_engine(config.database_async_url, echo=False, **engine_options(config))


engine = build_engine(settings)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency to provide an async session."""

    async with SessionLocal() as session:
        yield session
