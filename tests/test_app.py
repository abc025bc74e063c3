from fastapi.testclient import TestClient
from playwright.async_api import Error as PlaywrightError

import app as app_module
from tiktok_scraper_pkg.errors import ApiFetchError

client = TestClient(app_module.app)


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_scrape_endpoint_returns_result(monkeypatch):
    seen = {}

    async def fake_scrape(config):
        seen["config"] = config
        return {"username": config.username, "video_ids": ["1"], "found": True}

    monkeypatch.setattr(app_module, "scrape_tiktok", fake_scrape)

    response = client.post("/scrape/tiktok", json={"username": "@pubity", "max_videos": 20})

    assert response.status_code == 200
    assert response.json()["video_ids"] == ["1"]
    assert seen["config"].max_videos == 20


def test_scrape_endpoint_reports_scraper_errors(monkeypatch):
    async def fake_scrape(config):
        raise ApiFetchError("Failed to fetch: 429", status=429)

    monkeypatch.setattr(app_module, "scrape_tiktok", fake_scrape)

    body = client.post("/scrape/tiktok", json={"username": "pubity"}).json()

    assert body["found"] is False
    assert body["error"] == "Failed to fetch: 429"


def test_scrape_endpoint_validates_payload():
    response = client.post("/scrape/tiktok", json={"username": "pubity", "max_videos": 0})
    assert response.status_code == 422


def test_scrape_endpoint_reports_browser_errors(monkeypatch):
    async def fake_scrape(config):
        raise PlaywrightError("net::ERR_NAME_NOT_RESOLVED at https://www.tiktok.com/@pubity")

    monkeypatch.setattr(app_module, "scrape_tiktok", fake_scrape)

    response = client.post("/scrape/tiktok", json={"username": "pubity"})

    assert response.status_code == 200
    body = response.json()
    assert body["found"] is False
    assert "ERR_NAME_NOT_RESOLVED" in body["error"]
