"""
Database Service - async engine and session management.

Purpose
-------
Centralized async database engine and session management for the SQL
character store.

Responsibilities
----------------
- Initialize and manage a single AsyncEngine instance
- Provide async context managers for sessions and atomic transactions
- Enforce transaction discipline: commit on success, rollback on exception
- Support pessimistic row locking via `with_for_update=True`
- Expose a lightweight health check

Non-Responsibilities
--------------------
- Migrations (the schema is created with `Base.metadata.create_all`)
- Domain logic or event emission

Architecture Notes
------------------
- `get_transaction()` is the interface for all state mutations. Service code
  never calls `session.commit()` itself.
- Use pessimistic locks: `await session.get(Model, pk, with_for_update=True)`.

Usage Example
-------------
>>> await DatabaseService.initialize()
>>> async with DatabaseService.get_transaction() as session:
>>>     row = await DatabaseService.get_locked_entity(session, CharacterRecord, pk)
>>>     row.gold += 50
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional, Type, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from realmforge.core.config.config import Config
from realmforge.core.database.base import Base
from realmforge.core.logging.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class DatabaseInitializationError(RuntimeError):
    """Raised when database engine initialization fails."""


class DatabaseNotInitializedError(RuntimeError):
    """Raised when database operations are attempted before initialization."""


class DatabaseService:
    _engine: Optional[AsyncEngine] = None
    _session_factory: Optional[async_sessionmaker[AsyncSession]] = None
    _init_lock: asyncio.Lock = asyncio.Lock()

    # ========================================================================
    # Lifecycle
    # ========================================================================

    @classmethod
    async def initialize(cls, url: Optional[str] = None, *, create_schema: bool = False) -> None:
        """
        Initialize the database engine and session factory.

        Idempotent. `url` defaults to `Config.DATABASE_URL`; `create_schema`
        runs `Base.metadata.create_all` once the engine is up.

        Raises
        ------
        DatabaseInitializationError
            If no URL is configured or engine creation fails.
        """
        async with cls._init_lock:
            if cls._engine is not None:
                logger.debug("DatabaseService already initialized; skipping")
                return

            database_url = url or Config.DATABASE_URL
            if not database_url:
                raise DatabaseInitializationError("DATABASE_URL is not configured")

            try:
                engine_kwargs: dict[str, Any] = {"echo": Config.DATABASE_ECHO}
                if database_url.startswith("postgresql"):
                    engine_kwargs["pool_size"] = Config.DATABASE_POOL_SIZE
                    engine_kwargs["pool_pre_ping"] = True

                cls._engine = create_async_engine(database_url, **engine_kwargs)
                cls._session_factory = async_sessionmaker(
                    bind=cls._engine,
                    class_=AsyncSession,
                    expire_on_commit=False,
                )

                if create_schema:
                    async with cls._engine.begin() as conn:
                        await conn.run_sync(Base.metadata.create_all)

            except (SQLAlchemyError, OSError, ValueError) as exc:
                logger.error(
                    "DatabaseService initialization failed",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                    exc_info=True,
                )
                cls._engine = None
                cls._session_factory = None
                raise DatabaseInitializationError(f"Database initialization failed: {exc}") from exc

            logger.info(
                "DatabaseService initialized",
                extra={"url_scheme": database_url.split("://", 1)[0]},
            )

    @classmethod
    async def shutdown(cls) -> None:
        """Dispose the engine. Safe to call multiple times."""
        async with cls._init_lock:
            if cls._engine is None:
                return
            try:
                await cls._engine.dispose()
                logger.info("DatabaseService shutdown complete")
            finally:
                cls._engine = None
                cls._session_factory = None

    @classmethod
    async def health_check(cls) -> bool:
        """Run `SELECT 1`; returns False instead of raising."""
        if cls._engine is None:
            return False
        try:
            async with cls._engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as exc:
            logger.warning("Database health check failed", extra={"error": str(exc)})
            return False

    @classmethod
    def _ensure_initialized(cls) -> async_sessionmaker[AsyncSession]:
        if cls._session_factory is None:
            raise DatabaseNotInitializedError(
                "DatabaseService.initialize() must be awaited before use"
            )
        return cls._session_factory

    # ========================================================================
    # Sessions
    # ========================================================================

    @classmethod
    @asynccontextmanager
    async def get_session(cls) -> AsyncGenerator[AsyncSession, None]:
        """Session without automatic commit, for read-only access."""
        factory = cls._ensure_initialized()
        async with factory() as session:
            yield session

    @classmethod
    @asynccontextmanager
    async def get_transaction(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Session wrapped in an atomic transaction.

        Commits on success; rolls back and re-raises on any exception.
        """
        factory = cls._ensure_initialized()
        start = time.perf_counter()

        async with factory() as session:
            try:
                yield session
                await session.commit()
                logger.debug(
                    "Database transaction committed",
                    extra={"duration_ms": (time.perf_counter() - start) * 1000.0},
                )
            except Exception as exc:
                await session.rollback()
                logger.error(
                    "Error in transaction; rolled back",
                    extra={
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                        "duration_ms": (time.perf_counter() - start) * 1000.0,
                    },
                )
                raise

    @classmethod
    async def get_locked_entity(
        cls,
        session: AsyncSession,
        model: Type[T],
        primary_key: Any,
    ) -> Optional[T]:
        """
        Fetch an entity with a pessimistic row lock (SELECT FOR UPDATE).

        Must be used within a `get_transaction()` block.
        """
        return await session.get(model, primary_key, with_for_update=True)
