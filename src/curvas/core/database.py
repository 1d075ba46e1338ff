from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Owns the async engine and the session factory for the ticket store.

    One instance per process. Several processes may share the same database,
    so services never rely on in-memory state between sessions.
    """

    def __init__(self, database_url: str) -> None:
        self._database_url = database_url
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def is_sqlite(self) -> bool:
        return self._database_url.startswith("sqlite")

    async def init(self) -> None:
        if self._engine is not None:
            return

        logger.info("[Database] Creating async engine")
        self._engine = create_async_engine(self._database_url, echo=False)

        if self.is_sqlite:

            @event.listens_for(self._engine.sync_engine, "connect")
            def _on_sqlite_connect(dbapi_connection, connection_record) -> None:  # pragma: no cover
                # The driver's implicit BEGIN breaks SAVEPOINT; BEGIN is emitted below instead.
                dbapi_connection.isolation_level = None
                cursor = dbapi_connection.cursor()
                try:
                    cursor.execute("PRAGMA foreign_keys=ON")
                    # Concurrent writers from other processes wait instead of failing fast.
                    cursor.execute("PRAGMA busy_timeout=5000")
                finally:
                    cursor.close()

            @event.listens_for(self._engine.sync_engine, "begin")
            def _on_sqlite_begin(conn) -> None:  # pragma: no cover
                # Take the write lock up front: a deferred BEGIN that later upgrades
                # from SHARED fails with SQLITE_BUSY instead of honouring busy_timeout.
                conn.exec_driver_sql("BEGIN IMMEDIATE")

        self._sessionmaker = async_sessionmaker(
            self._engine,
            expire_on_commit=False,
            class_=AsyncSession,
        )
        logger.info("[Database] Engine ready")

    async def create_all(self) -> None:
        """Create every table registered on the declarative Base (idempotent)."""
        from curvas.models import Base

        engine = self._require_engine()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("[Database] Tables created/verified")

    async def dispose(self) -> None:
        if self._engine is not None:
            logger.info("[Database] Disposing engine")
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None

    def new_session(self) -> AsyncSession:
        """Bare session; the caller owns commit/rollback/close."""
        if self._sessionmaker is None:
            raise RuntimeError("DatabaseManager is not initialized. Call init() first.")
        return self._sessionmaker()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session that commits on success and rolls back on error."""
        session = self.new_session()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    def _require_engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("DatabaseManager is not initialized. Call init() first.")
        return self._engine

    @property
    def engine(self) -> Optional[AsyncEngine]:
        return self._engine


_db_manager: Optional[DatabaseManager] = None


async def init_database(database_url: str, create_tables: bool = True) -> DatabaseManager:
    """Create (once) and initialize the process-wide DatabaseManager."""
    global _db_manager

    if _db_manager is None:
        _db_manager = DatabaseManager(database_url)
    await _db_manager.init()
    if create_tables:
        await _db_manager.create_all()
    return _db_manager


async def dispose_database() -> None:
    global _db_manager

    if _db_manager is not None:
        await _db_manager.dispose()
        _db_manager = None


def get_database_manager() -> DatabaseManager:
    if _db_manager is None:
        raise RuntimeError("DatabaseManager is not initialized.")
    return _db_manager
