"""Health Probes: liveness always answers, readiness follows the store."""


async def test_healthz_returns_plain_ok(client):
    res = await client.get("/healthz")
    assert res.status_code == 200
    assert res.text == "ok"
    assert res.headers["content-type"].startswith("text/plain")


async def test_healthz_rejects_post(client):
    res = await client.post("/healthz")
    assert res.status_code == 405
    assert "GET" in res.headers["allow"]
    assert res.json() == {"error": "method not allowed"}


async def test_readyz_reports_ready(client):
    res = await client.get("/readyz")
    assert res.status_code == 200
    assert res.json() == {"status": "ready"}


async def test_readyz_reports_unavailable_after_close(client, store):
    await store.close()
    res = await client.get("/readyz")
    assert res.status_code == 503
    assert res.json() == {"error": "store unavailable"}
