"""Lifespan: verifies the store is opened at startup, closed at shutdown and
that a schema failure aborts startup."""

import pytest

import sciplayer.infrastructure.playlist_store as store_module
import sciplayer.main as main_module
from sciplayer.config import Settings
from sciplayer.core.errors import SchemaInitError


@pytest.fixture(autouse=True)
def _restore_logging():
    import logging
    from sciplayer.infrastructure.observability import _SciplayerHandler
    yield
    for h in list(logging.root.handlers):
        if isinstance(h, _SciplayerHandler):
            logging.root.removeHandler(h)


async def test_lifespan_opens_and_closes_store(tmp_path, monkeypatch):
    settings = Settings(_env_file=None, db_path=str(tmp_path / "sciplayer.db"))
    monkeypatch.setattr(main_module, "get_settings", lambda: settings)

    async with main_module.lifespan(main_module.app):
        store = store_module.get_store()
        assert await store.register_device("device-123") is True

    assert store.closed
    assert store_module.playlist_store is None
    with pytest.raises(RuntimeError):
        store_module.get_store()


async def test_lifespan_aborts_on_schema_failure(tmp_path, monkeypatch):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    settings = Settings(_env_file=None, db_path=str(blocker / "sciplayer.db"))
    monkeypatch.setattr(main_module, "get_settings", lambda: settings)

    with pytest.raises(SchemaInitError):
        async with main_module.lifespan(main_module.app):
            pass
    assert store_module.playlist_store is None
