import json

import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch

from config import settings
from main import app
from scrapers.mock import MOCK_BUSINESS, mock_business
from models import DiscoveryResult

URL = "https://maps.google.com/?cid=42"


@pytest.fixture
def client():
    return TestClient(app)


def parse_sse(body: str):
    """Split an event-stream body into (event, data) pairs, checking the framing."""
    assert body.endswith("\n\n")
    events = []
    for frame in body.strip("\n").split("\n\n"):
        event_line, data_line = frame.split("\n")
        assert event_line.startswith("event: ")
        assert data_line.startswith("data: ")
        events.append((event_line[len("event: "):], json.loads(data_line[len("data: "):])))
    return events


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "running"
    assert client.get("/health").json() == {"status": "healthy"}


def test_detailed_status_reports_memory_store(client):
    status = client.get("/status/detailed").json()
    assert status["store"] == "connected"
    assert status["store_backend"] == "memory"
    assert status["store_stats"] == {"keys": 0}
    assert status["providers"]["browserbase"] == "missing"
    assert status["anthropic_api"] == "missing"
    assert status["overall_status"] == "healthy"


@pytest.mark.parametrize("path", ["/discover", "/discover/stream", "/agent"])
def test_missing_url_is_400(client, path):
    response = client.post(path, json={})
    assert response.status_code == 400


def test_discover_accepts_any_url_key_and_stores_business(client):
    response = client.post("/discover", json={"mapsUrl": URL})
    assert response.status_code == 200
    body = response.json()

    assert body["success"] is True
    assert body["provider"] == "mock"
    assert body["business"]["name"] == MOCK_BUSINESS["name"]
    assert body["business"]["source_url"] == URL

    stored = client.get(f"/business/{body['business']['id']}")
    assert stored.status_code == 200
    assert stored.json()["business"]["id"] == body["business"]["id"]


def test_unknown_business_and_profile_are_404(client):
    assert client.get("/business/biz_missing").status_code == 404
    assert client.get("/profile/biz_missing").status_code == 404
    assert client.post("/analyze", json={"business_id": "biz_missing"}).status_code == 404


def test_agent_then_feedback(client):
    response = client.post("/agent", json={"url": URL})
    assert response.status_code == 200
    profile = response.json()["profile"]
    assert profile["analysis_source"] == "mock"
    business_id = profile["business"]["id"]
    task_id = profile["tasks"][0]["id"]

    assert client.get(f"/profile/{business_id}").status_code == 200

    up = client.post(
        "/feedback", json={"business_id": business_id, "item_id": task_id, "action": "thumbs_up"}
    )
    assert up.status_code == 200
    assert up.json()["item"]["feedback"]["thumbs_up"] == 1

    missing = client.post(
        "/feedback", json={"business_id": business_id, "item_id": "nope", "action": "thumbs_up"}
    )
    assert missing.status_code == 404

    no_text = client.post(
        "/feedback", json={"businessId": business_id, "itemId": task_id, "action": "edit"}
    )
    assert no_text.status_code == 400

    status = client.post(
        "/status", json={"business_id": business_id, "item_id": task_id, "status": "completed"}
    )
    assert status.status_code == 200
    assert status.json()["item"]["status"] == "completed"


def test_analyze_and_workflows(client):
    business_id = client.post("/discover", json={"url": URL}).json()["business"]["id"]

    analysis = client.post("/analyze", json={"businessId": business_id})
    assert analysis.status_code == 200
    workflows = analysis.json()["analysis"]["workflows"]
    assert len(workflows) > 0

    listed = client.get("/workflows", params={"business_id": business_id}).json()["workflows"]
    assert [w["id"] for w in listed] == [w["id"] for w in workflows]

    replaced = client.post(
        "/workflows",
        json={"business_id": business_id, "workflows": [{"id": "wf-custom", "name": "Custom"}]},
    )
    assert replaced.status_code == 200
    listed = client.get("/workflows", params={"businessId": business_id}).json()["workflows"]
    assert [w["id"] for w in listed] == ["wf-custom"]


def test_discover_stream_events(client):
    response = client.post("/discover/stream", json={"maps_url": URL})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")

    events = parse_sse(response.text)
    names = [name for name, _ in events]
    assert names == ["step", "step", "business", "step", "step", "complete"]
    assert [d["step"] for n, d in events if n == "step"] == [
        "connecting", "extracting_info", "analyzing", "complete",
    ]

    business = dict(events)["business"]
    assert business["name"] == MOCK_BUSINESS["name"]
    assert business["reviews_scraped"] == 8

    complete = events[-1][1]
    assert complete["analysis"]["business_id"] == complete["business"]["id"]


def test_discover_stream_sends_session_before_business(client):
    async def fake_discover(url, on_event=None):
        await on_event("session", {"session_id": "s1", "session_url": "u", "live_view_url": "l"})
        return DiscoveryResult(
            business=mock_business(url), provider="browserbase",
            remote_session_id="s1", remote_session_url="u",
        )

    with patch("api.routes.discover", fake_discover):
        events = parse_sse(client.post("/discover/stream", json={"url": URL}).text)

    names = [name for name, _ in events]
    assert names.count("session") == 1
    assert names.index("session") < names.index("business")
    assert events[-1][1]["remote_session_id"] == "s1"


def test_discover_stream_reports_errors(client):
    async def broken_discover(url, on_event=None):
        raise RuntimeError("pipeline exploded")

    with patch("api.routes.discover", broken_discover):
        events = parse_sse(client.post("/discover/stream", json={"url": URL}).text)

    assert events[-1] == ("error", {"message": "pipeline exploded"})


def test_store_unavailable_is_503(client, monkeypatch):
    monkeypatch.setattr(settings, "STORE_BACKEND", "redis")
    monkeypatch.setattr(settings, "REDIS_URL", "")

    response = client.post("/discover", json={"url": URL})
    assert response.status_code == 503
    assert response.json()["detail"] == "Profile store not configured"
