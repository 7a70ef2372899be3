"""
Async SQLAlchemy storage client + per-request session dependency.

The engine is not created at import time: ``Database.connect()`` runs during
application startup and ``Database.dispose()`` at shutdown.
An optional initializer (schema + seed data) runs once storage is reachable,
either at startup or on the first request after an outage.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncGenerator, Awaitable, Callable

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from mess_feedback.core.exceptions import STORAGE_ERRORS, ServiceUnavailableException

log = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class Database:
    """Owns the async engine (and its connection pool) for one process."""

    def __init__(self, url: str, echo: bool = False, connect_timeout: int | None = None):
        self.url = url
        self.echo = echo
        self.connect_timeout = connect_timeout
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._initializer: Callable[["Database"], Awaitable[None]] | None = None
        self._ready = False
        self._init_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise ServiceUnavailableException()
        return self._engine

    def connect(self) -> None:
        """Create the engine and session factory. Idempotent."""
        if self._engine is not None:
            return
        connect_args = {}
        if self.connect_timeout is not None and self.url.startswith("postgresql+asyncpg"):
            connect_args["timeout"] = self.connect_timeout
        self._engine = create_async_engine(
            self.url,
            echo=self.echo,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        log.info("Storage engine created for %s", self._engine.url.render_as_string(hide_password=True))

    async def dispose(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        self._ready = False
        log.info("Storage engine disposed")

    async def ping(self) -> bool:
        """Return True if a trivial query succeeds."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except STORAGE_ERRORS as exc:
            log.warning("Storage ping failed: %s", exc)
            return False

    def set_initializer(self, initializer: Callable[["Database"], Awaitable[None]]) -> None:
        self._initializer = initializer
        self._ready = False

    async def ensure_ready(self) -> None:
        """Run the initializer once. A failure leaves it pending for the next call."""
        if self._ready or self._initializer is None:
            return
        async with self._init_lock:
            if self._ready:
                return
            await self._initializer(self)
            self._ready = True

    async def create_all(self) -> None:
        # Import models so Base.metadata knows every table
        import mess_feedback.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    def session(self) -> AsyncSession:
        if self._session_factory is None:
            raise ServiceUnavailableException()
        return self._session_factory()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields a DB session per request."""
    database: Database = request.app.state.database
    await database.ensure_ready()
    async with database.session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
