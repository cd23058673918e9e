from http import HTTPStatus


def test_root_is_plain_text_liveness(client):
    resp = client.get("/")
    assert resp.status_code == HTTPStatus.OK
    assert resp.text == "SoundComm relay running"
    assert resp.headers["content-type"].startswith("text/plain")


def test_health_on_fresh_app(client):
    resp = client.get("/health")
    assert resp.status_code == HTTPStatus.OK
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["connections"] == 0
    assert data["rooms"] == 0
    assert data["events_handled"] == 0
    assert data["uptime_seconds"] >= 0


def test_instruments_listing(client):
    resp = client.get("/instruments")
    assert resp.status_code == HTTPStatus.OK
    body = resp.json()
    assert [i["key"] for i in body] == [
        "keyboard",
        "organ",
        "guitar",
        "drum",
        "conga",
        "monitor",
        "songleader",
    ]
    assert body[4] == {"key": "conga", "label": "Conga Drum"}


def test_cors_allows_any_origin(client):
    resp = client.get("/", headers={"Origin": "https://mixer.example"})
    assert resp.headers["access-control-allow-origin"] == "*"
