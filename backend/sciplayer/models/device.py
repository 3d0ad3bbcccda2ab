"""Device ORM: a registered playback endpoint.

Invariants:
    - device_identifier is unique and never updated
    - Rows are only ever inserted (insert-or-ignore); deletion cascades to playlists
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sciplayer.db.base import Base


class Device(Base):
    """Device entity, owner of zero or more playlists."""
    __tablename__ = "devices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    device_identifier: Mapped[str] = mapped_column(
        String, nullable=False, unique=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    playlists: Mapped[list["Playlist"]] = relationship(
        "Playlist", back_populates="device",
        cascade="all, delete-orphan", passive_deletes=True,
    )
