"""Boundary Protocols: the contract between the request adapter and the store.

Invariants:
    - Routes depend on PlaylistStore, never on the SQLite implementation
    - Every method either returns its value or raises a SciplayerError subclass

Design Decisions:
    - Protocol over ABC: structural subtyping, test doubles need no inheritance
"""

from datetime import datetime
from typing import Protocol

from sciplayer.core.domain_types import Playlist


class PlaylistStore(Protocol):
    """Contract for device/playlist persistence, implemented by infrastructure."""
    async def register_device(self, device_id: str) -> bool: ...
    async def attach_playlist(
        self, device_id: str, name: str, url: str,
    ) -> datetime: ...
    async def list_playlists(self, device_id: str) -> list[Playlist]: ...
    async def health_check(self) -> bool: ...
    async def close(self) -> None: ...
