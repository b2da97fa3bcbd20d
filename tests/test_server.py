import time

import pytest


def test_health_and_config(client):
    health = client.get("/api/health").json()
    assert health["ok"] is True
    assert health["raining"] is False

    config = client.get("/api/config").json()
    assert config["drop_sizes"] == [1, 10, 100, 1000]
    assert config["rain_batch"] == 100
    assert config["resolution"] == 0.001


def test_index_page_is_served_uncached(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "Monte Carlo Pi Simulation" in resp.text
    assert resp.headers["cache-control"].startswith("no-store")


def test_empty_state_has_null_approximation(client):
    state = client.get("/api/state").json()
    assert state == {
        "total": 0, "inside": 0, "outside": 0,
        "approximation": None, "raining": False, "interval": None,
    }


@pytest.mark.parametrize("sizes", [[1], [1, 10, 100, 1000]])
def test_drops_accumulate(client, sizes):
    for size in sizes:
        resp = client.post("/api/drops", json={"count": size})
        assert resp.status_code == 200
    state = client.get("/api/state").json()
    assert state["total"] == sum(sizes)
    assert state["inside"] + state["outside"] == state["total"]
    assert state["approximation"] == pytest.approx(4 * state["inside"] / state["total"])

    points = client.get("/api/points").json()
    assert len(points["inside"]["x"]) == state["inside"]
    assert len(points["outside"]["y"]) == state["outside"]
    for x, y in zip(points["inside"]["x"], points["inside"]["y"]):
        assert x * x + y * y < 1.0


@pytest.mark.parametrize("body", [{"count": -1}, {"count": 1.5}, {"count": 10_001}, {}])
def test_invalid_drop_counts_are_rejected(client, body):
    assert client.post("/api/drops", json=body).status_code == 422
    assert client.get("/api/state").json()["total"] == 0


def test_zero_drops_is_a_no_op(client):
    assert client.post("/api/drops", json={"count": 0}).json()["total"] == 0


def test_rain_adds_batches_until_stopped(client):
    resp = client.post("/api/rain/start", json={"interval_ms": 20})
    assert resp.status_code == 200
    assert resp.json()["raining"] is True
    assert resp.json()["interval"] == 20

    time.sleep(0.3)
    stopped = client.post("/api/rain/stop").json()
    assert stopped["raining"] is False
    total = stopped["total"]
    assert total > 0
    assert total % 100 == 0

    time.sleep(0.1)
    assert client.get("/api/state").json()["total"] == total


def test_rain_uses_configured_interval_by_default(client):
    state = client.post("/api/rain/start").json()
    assert state["interval"] == 20
    client.post("/api/rain/stop")


def test_start_while_raining_restarts(client):
    client.post("/api/rain/start", json={"interval_ms": 1000})
    state = client.post("/api/rain/start", json={"interval_ms": 30}).json()
    assert state["raining"] is True
    assert state["interval"] == 30
    client.post("/api/rain/stop")


def test_stop_is_idempotent(client):
    assert client.post("/api/rain/stop").status_code == 200
    assert client.post("/api/rain/stop").json()["raining"] is False


def test_manual_drops_refused_while_raining(client):
    client.post("/api/rain/start", json={"interval_ms": 1000})
    resp = client.post("/api/drops", json={"count": 10})
    assert resp.status_code == 409
    client.post("/api/rain/stop")
    assert client.post("/api/drops", json={"count": 10}).status_code == 200


@pytest.mark.parametrize("interval", [0, -10])
def test_non_positive_interval_rejected(client, interval):
    assert client.post("/api/rain/start", json={"interval_ms": interval}).status_code == 422
    assert client.get("/api/state").json()["raining"] is False


def test_boundary(client):
    body = client.get("/api/boundary", params={"resolution": 0.5}).json()
    assert body["resolution"] == 0.5
    assert len(body["points"]) == 3
    assert body["points"][0] == [0.0, 1.0]
    assert body["path"].startswith("M0,1 ")

    default = client.get("/api/boundary").json()
    assert len(default["points"]) == 1001

    assert client.get("/api/boundary", params={"resolution": 0}).status_code == 422


@pytest.mark.parametrize("resolution", ["inf", "-inf", "nan", "1e-9", "2"])
def test_boundary_rejects_unusable_resolution(client, resolution):
    resp = client.get("/api/boundary", params={"resolution": resolution})
    assert resp.status_code == 422


def test_failed_log_write_keeps_drops_and_request(settings, storage, monkeypatch):
    from fastapi.testclient import TestClient
    from pirain.server import create_app

    def broken_log_event(**kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(storage, "log_event", broken_log_event)
    with TestClient(create_app(settings, storage=storage)) as c:
        resp = c.post("/api/drops", json={"count": 10})
        assert resp.status_code == 200
        assert resp.json()["total"] == 10
        assert c.get("/api/state").json()["total"] == 10


def test_history_records_each_batch(client):
    client.post("/api/drops", json={"count": 10})
    client.post("/api/drops", json={"count": 100})
    client.post("/api/rain/start", json={"interval_ms": 20})
    time.sleep(0.15)
    client.post("/api/rain/stop")

    body = client.get("/api/history", params={"order": "earliest", "n": 1000}).json()
    events = body["events"]
    assert [e["count"] for e in events[:2]] == [10, 100]
    assert events[0]["action"] == "drop"
    assert events[1]["total"] == 110
    assert any(e["action"] == "rain" for e in events)
    assert set(body["actions"]) == {"drop", "rain"}

    totals = [e["total"] for e in events]
    assert totals == sorted(totals)
    assert totals[-1] == client.get("/api/state").json()["total"]

    drops_only = client.get("/api/history", params={"action": "drop"}).json()["events"]
    assert [e["count"] for e in drops_only] == [100, 10]


def test_shutdown_stops_rain(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as c:
        c.post("/api/rain/start", json={"interval_ms": 20})
    session = app.state.session
    assert not session.raining
