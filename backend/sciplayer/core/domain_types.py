"""Domain Types: identifiers and the Playlist value returned by the store.

Invariants:
    - DeviceId is a non-empty, already-trimmed string
    - Playlist.created_at is always timezone-aware (UTC)
    - Playlist.sequence is the storage insertion order, used only as a tie-break
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import NewType


DeviceId = NewType("DeviceId", str)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps read back from SQLite."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class Playlist:
    """A named media source URL owned by one device."""
    device_id: DeviceId
    name: str
    url: str
    created_at: datetime
    sequence: int

    def sort_key(self) -> tuple[datetime, int]:
        return (self.created_at, self.sequence)
