"""SQLite Playlist Store: the persistence engine behind every device/playlist route.

Invariants:
    - register_device is insert-or-ignore: True on first call, False afterwards, never
      a uniqueness failure
    - attach_playlist checks the device and inserts the row inside one write
      transaction; DeviceNotFoundError and StoreIOError both leave no row behind
    - list_playlists orders by created_at, then id; empty list != DeviceNotFoundError
    - Every operation after close() raises StoreClosedError
    - With operation_timeout_seconds set, an operation that overruns before its
      COMMIT is cancelled, rolled back and reported as StoreTimeoutError; once
      COMMIT has started the deadline no longer applies and the outcome of the
      transaction is returned
    - A caller cancelled after COMMIT has started still sees CancelledError, but
      the transaction runs to completion in the background

Design Decisions:
    - Module-level singleton opened by the FastAPI lifespan; routes receive it via
      the get_store dependency so tests can override it
    - A per-call asyncio.Event marks the point of no return: it is set right
      before COMMIT, and _bounded only cancels work while it is unset
    - clock is injectable so ordering by insertion sequence can be exercised with
      colliding timestamps
"""

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Awaitable, Callable, TypeVar

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sciplayer.core.domain_types import DeviceId, Playlist, as_utc
from sciplayer.core.errors import (
    DeviceNotFoundError, SchemaInitError, StoreTimeoutError,
)
from sciplayer.infrastructure.database import MEMORY_LOCATION, DatabaseSessionManager
from sciplayer.models.device import Device
from sciplayer.models.playlist import Playlist as PlaylistModel

logger = logging.getLogger(__name__)

T = TypeVar("T")
Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SqlitePlaylistStore:
    """Device registry and playlist attachment over one SQLite database."""

    def __init__(
        self,
        db: DatabaseSessionManager,
        operation_timeout_seconds: float | None = None,
        clock: Clock = _utc_now,
    ):
        self._db = db
        self._timeout = operation_timeout_seconds
        self._clock = clock

    @classmethod
    async def open(
        cls,
        location: str,
        *,
        busy_timeout_seconds: float = 5.0,
        operation_timeout_seconds: float | None = None,
        clock: Clock = _utc_now,
    ) -> "SqlitePlaylistStore":
        """Open (and if needed create) the store at location.

        Raises SchemaInitError when the directory, database or tables cannot be
        created; no engine is left open in that case.
        """
        if location != MEMORY_LOCATION:
            try:
                Path(location).parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise SchemaInitError(f"cannot create directory: {e}", location) from e

        db = DatabaseSessionManager(location, busy_timeout_seconds)
        try:
            await db.create_schema()
        except (SQLAlchemyError, OSError) as e:
            await db.dispose()
            raise SchemaInitError(str(e), location) from e

        logger.info(f"Playlist store opened at {location}")
        return cls(db, operation_timeout_seconds, clock)

    @property
    def location(self) -> str:
        return self._db.location

    @property
    def closed(self) -> bool:
        return self._db.closed

    async def close(self) -> None:
        await self._db.dispose()
        logger.info(f"Playlist store at {self.location} closed")

    async def health_check(self) -> bool:
        return await self._db.health_check()

    # ─── Operations ─────────────────────────────────────────────

    async def register_device(self, device_id: str) -> bool:
        """Insert the device unless it exists. Returns True when a row was created."""
        return await self._bounded(
            "register_device",
            lambda fence: self._register_device(fence, DeviceId(device_id)),
        )

    async def attach_playlist(self, device_id: str, name: str, url: str) -> datetime:
        """Attach a playlist to an existing device. Returns its created_at."""
        return await self._bounded(
            "attach_playlist",
            lambda fence: self._attach_playlist(fence, DeviceId(device_id), name, url),
        )

    async def list_playlists(self, device_id: str) -> list[Playlist]:
        """All playlists of a device, oldest first."""
        return await self._bounded(
            "list_playlists", lambda fence: self._list_playlists(DeviceId(device_id)),
        )

    # ─── Transactions ───────────────────────────────────────────

    async def _register_device(
        self, fence: asyncio.Event, device_id: DeviceId,
    ) -> bool:
        stmt = (
            sqlite_insert(Device.__table__)
            .values(device_identifier=device_id, created_at=self._clock())
            .on_conflict_do_nothing(index_elements=["device_identifier"])
        )
        async with self._db.session(write=True, operation="register_device") as session:
            conn = await session.connection()
            result = await conn.execute(stmt)
            await _commit(session, fence)

        created = result.rowcount > 0
        logger.info(
            "Device registered" if created else "Device already registered",
            extra={"device_id": device_id},
        )
        return created

    async def _attach_playlist(
        self, fence: asyncio.Event, device_id: DeviceId, name: str, url: str,
    ) -> datetime:
        async with self._db.session(write=True, operation="attach_playlist") as session:
            if not await _device_exists(session, device_id):
                raise DeviceNotFoundError(device_id)
            playlist = PlaylistModel(
                device_identifier=device_id,
                name=name,
                url=url,
                created_at=self._clock(),
            )
            session.add(playlist)
            await session.flush()
            await _commit(session, fence)

        logger.info(
            f"Playlist {playlist.id} attached",
            extra={"device_id": device_id},
        )
        return as_utc(playlist.created_at)

    async def _list_playlists(self, device_id: DeviceId) -> list[Playlist]:
        async with self._db.session(operation="list_playlists") as session:
            if not await _device_exists(session, device_id):
                raise DeviceNotFoundError(device_id)
            result = await session.execute(
                select(PlaylistModel)
                .where(PlaylistModel.device_identifier == device_id)
                .order_by(PlaylistModel.created_at.asc(), PlaylistModel.id.asc()),
            )
            rows = result.scalars().all()

        return [
            Playlist(
                device_id=device_id,
                name=row.name,
                url=row.url,
                created_at=as_utc(row.created_at),
                sequence=row.id,
            )
            for row in rows
        ]

    async def _bounded(
        self, operation: str, run: Callable[[asyncio.Event], Awaitable[T]],
    ) -> T:
        fence = asyncio.Event()
        task = asyncio.ensure_future(run(fence))
        try:
            done, _ = await asyncio.wait({task}, timeout=self._timeout)
        except asyncio.CancelledError:
            if not fence.is_set():
                task.cancel()
                await asyncio.wait({task})
            raise
        if task in done:
            return task.result()
        if fence.is_set():
            # COMMIT in flight: its outcome is the operation's outcome
            return await asyncio.shield(task)

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.error(
            f"Store {operation} timed out after {self._timeout}s",
            extra={"operation": operation},
        )
        raise StoreTimeoutError(operation, self._timeout)


async def _commit(session: AsyncSession, fence: asyncio.Event) -> None:
    fence.set()
    await session.commit()


async def _device_exists(session: AsyncSession, device_id: DeviceId) -> bool:
    result = await session.execute(
        select(Device.id).where(Device.device_identifier == device_id).limit(1),
    )
    return result.first() is not None


# Singleton (opened on startup)
playlist_store: SqlitePlaylistStore | None = None


async def init_store(location: str, **kwargs) -> SqlitePlaylistStore:
    global playlist_store
    playlist_store = await SqlitePlaylistStore.open(location, **kwargs)
    return playlist_store


async def shutdown_store() -> None:
    global playlist_store
    if playlist_store is not None:
        await playlist_store.close()
        playlist_store = None


def get_store() -> SqlitePlaylistStore:
    """FastAPI dependency for the playlist store."""
    if playlist_store is None:
        raise RuntimeError("Playlist store not initialized")
    return playlist_store
