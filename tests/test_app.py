from __future__ import annotations

import csv
import io

import pytest
import requests
from fastapi.testclient import TestClient

from mobilede_shopify import apify_client as ac
from mobilede_shopify.io import XLSX_MEDIA_TYPE
from server import app as app_mod


@pytest.fixture
def client(monkeypatch, listing):
    monkeypatch.setenv("APIFY_TOKEN", "tok")
    monkeypatch.setenv("APIFY_ACTOR_ID", "someone/mobile-de-scraper")
    monkeypatch.delenv("APIFY_USE_ACTOR", raising=False)
    monkeypatch.setattr(ac, "fetch_run_items", lambda session, cfg, run_id: [listing])
    monkeypatch.setattr(app_mod, "get_metafields_mapping", lambda: [])
    return TestClient(app_mod.app)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_start_crawl(client, monkeypatch):
    seen = {}

    def fake_start(session, cfg, actor_input):
        seen["input"] = actor_input
        return {"id": "run42"}

    monkeypatch.setattr(ac, "start_actor_run", fake_start)
    resp = client.post("/api/start-run", json={"searchUrl": "https://suchen.mobile.de/x", "maxItems": "10"})
    assert resp.status_code == 200
    assert resp.json() == {"runId": "run42"}
    assert seen["input"]["maxItems"] == 10


def test_start_crawl_validation(client, monkeypatch):
    assert client.post("/api/start-crawl", json={}).status_code == 400
    monkeypatch.setenv("APIFY_USE_ACTOR", "false")
    assert client.post("/api/start-crawl", json={"searchUrl": "u"}).status_code == 400
    monkeypatch.delenv("APIFY_USE_ACTOR")
    monkeypatch.setenv("APIFY_ACTOR_ID", "")
    assert client.post("/api/start-crawl", json={"searchUrl": "u"}).status_code == 500


def test_missing_token(client, monkeypatch):
    monkeypatch.delenv("APIFY_TOKEN")
    monkeypatch.delenv("APIFY_API_TOKEN", raising=False)
    assert client.get("/api/run-status", params={"runId": "r"}).status_code == 500


def test_run_status_passes_upstream_errors(client, monkeypatch):
    def fake_get_run(session, cfg, run_id):
        resp = requests.Response()
        resp.status_code = 404
        raise requests.HTTPError("not found", response=resp)

    monkeypatch.setattr(ac, "get_run", fake_get_run)
    assert client.get("/api/run-status", params={"runId": "r"}).status_code == 404


def test_shopify_results_csv_attachment(client):
    resp = client.get("/api/shopify-results", params={"runId": "run1"})
    assert resp.status_code == 200
    assert resp.headers["content-disposition"] == 'attachment; filename="run1-shopify.csv"'
    rows = list(csv.DictReader(io.StringIO(resp.text)))
    assert rows[0]["Handle"] == "bmw-320d-touring-m-sport-4123"
    assert rows[0]["Variant Price"] == "22268.07"


def test_shopify_import_json(client):
    resp = client.get("/api/shopify-import", params={"runId": "run1", "format": "json"})
    assert resp.json()[0]["Template Suffix"] == "produs_servicii"


def test_results_formats(client):
    normalized = client.get("/api/run-results", params={"runId": "run1", "normalized": "true"}).json()
    assert normalized[0]["source_id"] == "4123"
    raw = client.get("/api/run-results", params={"runId": "run1"}).json()
    assert raw[0]["id"] == 4123
    xlsx = client.get("/api/normalize-results", params={"runId": "run1", "format": "xlsx"})
    assert xlsx.headers["content-type"].startswith(XLSX_MEDIA_TYPE)
    assert xlsx.headers["content-disposition"] == 'attachment; filename="run1-normalized.xlsx"'
    images = client.get("/api/images-exploded", params={"runId": "run1", "format": "json"}).json()
    assert [r["Image Src"] for r in images] == ["https://img.example/1.jpg", "https://img.example/2.jpg"]


def test_unknown_format(client):
    assert client.get("/api/images-exploded", params={"runId": "run1", "format": "pdf"}).status_code == 400


def test_missing_dataset(client, monkeypatch):
    def no_dataset(session, cfg, run_id):
        raise ac.DatasetNotFound(run_id)

    monkeypatch.setattr(ac, "fetch_run_items", no_dataset)
    assert client.get("/api/normalize-results", params={"runId": "run1"}).status_code == 404
