"""Playlist ORM: a named media URL attached to a device.

Invariants:
    - device_identifier references devices.device_identifier (ON DELETE CASCADE)
    - id is AUTOINCREMENT so it never reuses values; it is the ordering tie-break
    - (device_identifier, created_at, id) index serves the listing query
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sciplayer.db.base import Base


class Playlist(Base):
    """Playlist entity, always owned by an existing device."""
    __tablename__ = "playlists"
    __table_args__ = (
        Index(
            "ix_playlists_device_order",
            "device_identifier", "created_at", "id",
        ),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    device_identifier: Mapped[str] = mapped_column(
        String,
        ForeignKey("devices.device_identifier", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    device: Mapped["Device"] = relationship(
        "Device", back_populates="playlists",
    )
