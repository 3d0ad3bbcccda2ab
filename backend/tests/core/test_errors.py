"""Error Hierarchy: verifies codes, statuses and response envelopes.

Tests:
    - DeviceNotFoundError is a 404 carrying its message to the client
    - Storage errors are 500s whose responses never leak internal detail
    - Timeout/closed errors are catchable as StoreIOError
"""

from sciplayer.core.errors import (
    INTERNAL_ERROR_MESSAGE, DeviceNotFoundError, ErrorCategory, SchemaInitError,
    SciplayerError, StoreClosedError, StoreIOError, StoreTimeoutError,
)


def test_device_not_found_is_client_error():
    err = DeviceNotFoundError("device-999")
    assert err.http_status == 404
    assert err.code == "DEVICE_NOT_FOUND"
    assert err.category == ErrorCategory.RESOURCE_NOT_FOUND
    assert err.device_id == "device-999"
    assert err.context.device_id == "device-999"
    assert err.to_response() == {"error": "device not found"}


def test_store_io_error_hides_detail():
    err = StoreIOError("disk I/O error at /var/lib/secret.db", "attach_playlist")
    assert err.http_status == 500
    assert not err.is_client_error
    assert "disk I/O error" in err.message
    assert err.to_response() == {"error": INTERNAL_ERROR_MESSAGE}
    assert err.context.operation == "attach_playlist"


def test_timeout_and_closed_are_store_io_errors():
    timeout = StoreTimeoutError("list_playlists", 0.5)
    closed = StoreClosedError("register_device")
    assert isinstance(timeout, StoreIOError)
    assert isinstance(closed, StoreIOError)
    assert timeout.code == "STORE_TIMEOUT"
    assert timeout.category == ErrorCategory.TIMEOUT
    assert "0.5s" in timeout.message
    assert closed.code == "STORE_CLOSED"


def test_schema_init_error_is_not_a_store_io_error():
    err = SchemaInitError("unable to open database file", "/nope/db.sqlite")
    assert isinstance(err, SciplayerError)
    assert not isinstance(err, StoreIOError)
    assert err.location == "/nope/db.sqlite"
    assert err.to_response() == {"error": INTERNAL_ERROR_MESSAGE}


def test_errors_have_distinct_codes():
    codes = {
        DeviceNotFoundError("d").code,
        StoreIOError("x", "op").code,
        StoreTimeoutError("op", 1).code,
        StoreClosedError("op").code,
        SchemaInitError("x", "loc").code,
    }
    assert len(codes) == 5
