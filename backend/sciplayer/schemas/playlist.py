"""Playlist Schemas: attach request, attach response and listing item.

Invariants:
    - name and url are stripped and non-empty
    - url must carry a scheme and a host (checked once, here)
    - createdAt is serialized as ISO-8601
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sciplayer.core.url_rules import is_absolute_url


class PlaylistCreate(BaseModel):
    """Playlist attach body: {"name": "...", "url": "..."}."""
    name: str
    url: str

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name is required")
        return v

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("url is required")
        if not is_absolute_url(v):
            raise ValueError("url must be a valid absolute URL")
        return v


class PlaylistItem(BaseModel):
    """One entry of GET /devices/{deviceId}/playlists."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    url: str
    created_at: datetime = Field(alias="createdAt")


class PlaylistCreated(PlaylistItem):
    """Echo returned by POST /devices/{deviceId}/playlists."""
    device_id: str = Field(alias="deviceId")
