"""Device Routes: registration, playlist attachment and playlist listing.

Invariants:
    - Bodies are validated by Pydantic before the handler runs
    - POST /devices answers 201 for a new device, 200 for a known one
    - DeviceNotFoundError and StoreIOError propagate to the global handlers
"""

from fastapi import APIRouter, Depends, Response, status

from sciplayer.core.repository_protocols import PlaylistStore
from sciplayer.infrastructure.playlist_store import get_store
from sciplayer.schemas.device import DeviceCreate, DeviceResponse
from sciplayer.schemas.playlist import PlaylistCreate, PlaylistCreated, PlaylistItem

router = APIRouter(prefix="/devices", tags=["devices"])


@router.post("", response_model=DeviceResponse)
async def register_device(
    body: DeviceCreate,
    response: Response,
    store: PlaylistStore = Depends(get_store),
):
    """Register a device. Idempotent."""
    created = await store.register_device(body.device_id)
    response.status_code = (
        status.HTTP_201_CREATED if created else status.HTTP_200_OK
    )
    return DeviceResponse(device_id=body.device_id, created=created)


@router.post(
    "/{device_id}/playlists",
    response_model=PlaylistCreated,
    status_code=status.HTTP_201_CREATED,
)
async def attach_playlist(
    body: PlaylistCreate,
    device_id: str,
    store: PlaylistStore = Depends(get_store),
):
    """Attach a playlist to a registered device."""
    created_at = await store.attach_playlist(device_id, body.name, body.url)
    return PlaylistCreated(
        device_id=device_id, name=body.name, url=body.url, created_at=created_at,
    )


@router.get("/{device_id}/playlists", response_model=list[PlaylistItem])
async def list_playlists(
    device_id: str,
    store: PlaylistStore = Depends(get_store),
):
    """List a device's playlists, oldest first."""
    playlists = await store.list_playlists(device_id)
    return [
        PlaylistItem(name=p.name, url=p.url, created_at=p.created_at)
        for p in playlists
    ]
