"""Root conftest: shared store and HTTP client fixtures.

Invariants:
    - Every test gets a fresh SQLite file under tmp_path
    - get_store dependency overridden to use the test store
    - Lifespan is not run by the test client; the fixture owns the store
"""

import os

import pytest
from httpx import ASGITransport, AsyncClient

# Keep tests away from a developer's real database
os.environ.setdefault("SCIPLAYER_DB_PATH", "data/test-sciplayer.db")

from sciplayer.infrastructure.playlist_store import SqlitePlaylistStore, get_store  # noqa: E402
from sciplayer.main import app  # noqa: E402


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "data" / "sciplayer.db")


@pytest.fixture
async def store(db_path):
    s = await SqlitePlaylistStore.open(db_path)
    yield s
    await s.close()


@pytest.fixture
async def client(store):
    """FastAPI test client with the store dependency overridden."""
    app.dependency_overrides[get_store] = lambda: store
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()
