"""Database Session Manager: SQLite engine with a single serialized writer.

Invariants:
    - Every session rolls back and closes on any exception (no partial commits leak)
    - At most one write transaction is in flight: writers hold _write_lock and
      open the transaction with BEGIN IMMEDIATE
    - Foreign keys are enforced on every connection (PRAGMA foreign_keys=ON)
    - All SQLAlchemy/driver exceptions are mapped to StoreIOError here and nowhere else
    - Readers use BEGIN DEFERRED and, in WAL mode, see a committed snapshot

Design Decisions:
    - pysqlite's implicit transaction handling is switched off (isolation_level=None)
      and BEGIN is emitted from the "begin" event, so a transaction covers the
      existence check as well as the insert
    - ":memory:" uses StaticPool (one shared connection), so readers take the
      write lock too
"""

import asyncio
import logging
from contextlib import asynccontextmanager, nullcontext
from typing import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import StaticPool

from sciplayer.core.errors import StoreClosedError, StoreIOError
from sciplayer.db.base import Base

logger = logging.getLogger(__name__)

MEMORY_LOCATION = ":memory:"
_BEGIN_MODE_OPTION = "sqlite_begin_mode"


def sqlite_url(location: str) -> str:
    """Build the aiosqlite URL for a file path or ":memory:"."""
    return f"sqlite+aiosqlite:///{location}"


class DatabaseSessionManager:
    """Manages SQLite sessions with writer serialization, rollback and health checks."""

    def __init__(self, location: str, busy_timeout_seconds: float = 5.0):
        self.location = location
        self.in_memory = location == MEMORY_LOCATION
        engine_kwargs: dict = {"connect_args": {"timeout": busy_timeout_seconds}}
        if self.in_memory:
            engine_kwargs["poolclass"] = StaticPool
        self.engine = create_async_engine(sqlite_url(location), **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._write_lock = asyncio.Lock()
        self._closed = False
        self._install_connection_hooks()

    def _install_connection_hooks(self) -> None:
        in_memory = self.in_memory

        @event.listens_for(self.engine.sync_engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            if not in_memory:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

        @event.listens_for(self.engine.sync_engine, "begin")
        def _on_begin(conn):
            mode = conn.get_execution_options().get(_BEGIN_MODE_OPTION, "DEFERRED")
            conn.exec_driver_sql(f"BEGIN {mode}")

    @property
    def closed(self) -> bool:
        return self._closed

    @asynccontextmanager
    async def session(
        self, *, write: bool = False, operation: str = "query",
    ) -> AsyncGenerator[AsyncSession, None]:
        """Provide a session with auto-rollback on exception.

        write=True serializes the caller behind every other writer and starts
        the transaction with BEGIN IMMEDIATE.
        """
        if self._closed:
            raise StoreClosedError(operation)
        guard = self._write_lock if (write or self.in_memory) else nullcontext()
        async with guard:
            if self._closed:
                raise StoreClosedError(operation)
            session = self._session_factory()
            try:
                if write:
                    await session.connection(
                        execution_options={_BEGIN_MODE_OPTION: "IMMEDIATE"},
                    )
                yield session
            except IntegrityError as e:
                await session.rollback()
                logger.error(f"DB integrity error: {e}", extra={"operation": operation})
                raise StoreIOError("integrity constraint violated", operation) from e
            except OperationalError as e:
                await session.rollback()
                logger.error(f"DB operational error: {e}", extra={"operation": operation})
                raise StoreIOError("storage unavailable", operation) from e
            except DBAPIError as e:
                await session.rollback()
                logger.error(f"DB driver error: {e}", extra={"operation": operation})
                raise StoreIOError("driver error", operation) from e
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"SQLAlchemy error: {e}", extra={"operation": operation})
                raise StoreIOError("database operation failed", operation) from e
            finally:
                await session.close()

    async def create_schema(self) -> None:
        """Create missing tables and indexes; existing ones are left untouched."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        if self._closed:
            return False
        try:
            async with self.session(operation="health_check") as db:
                await db.execute(text("SELECT 1"))
            return True
        except StoreIOError as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        """Release every pooled connection. Idempotent."""
        if self._closed:
            return
        async with self._write_lock:
            self._closed = True
            await self.engine.dispose()
