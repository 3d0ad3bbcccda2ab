"""Structured Logging: verifies JSON formatting, setup idempotence and access log."""

import json
import logging

from sciplayer.infrastructure.observability import (
    JSONFormatter, _SciplayerHandler, setup_logging,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "sciplayer.test", logging.INFO, __file__, 1, "hello %s", ("world",), None,
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_core_fields():
    payload = json.loads(JSONFormatter().format(_record()))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "sciplayer.test"
    assert payload["message"] == "hello world"
    assert "timestamp" in payload


def test_json_formatter_surfaces_extra_fields():
    payload = json.loads(JSONFormatter().format(
        _record(device_id="device-123", error_code="DEVICE_NOT_FOUND", unrelated="x"),
    ))
    assert payload["device_id"] == "device-123"
    assert payload["error_code"] == "DEVICE_NOT_FOUND"
    assert "unrelated" not in payload


def test_setup_logging_is_idempotent():
    try:
        setup_logging("DEBUG", "json")
        setup_logging("WARNING", "text")
        ours = [h for h in logging.root.handlers if isinstance(h, _SciplayerHandler)]
        assert len(ours) == 1
        assert not isinstance(ours[0].formatter, JSONFormatter)
        assert logging.root.level == logging.WARNING
    finally:
        for h in list(logging.root.handlers):
            if isinstance(h, _SciplayerHandler):
                logging.root.removeHandler(h)


async def test_access_log_records_each_request(client, caplog):
    with caplog.at_level(logging.INFO, logger="sciplayer.access"):
        await client.get("/healthz")
    [record] = [r for r in caplog.records if r.name == "sciplayer.access"]
    assert record.method == "GET"
    assert record.path == "/healthz"
    assert record.status_code == 200
    assert record.duration_ms >= 0
