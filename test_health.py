#!/usr/bin/env python3
"""Tests for the health and metrics endpoints."""

import asyncio

from fastapi.testclient import TestClient

from telstash.ingest.media_groups import MediaGroupRegistry
from telstash.web import health
from test_pipeline import _config


def test_healthz_reports_storage_and_groups(tmp_path):
    groups = MediaGroupRegistry()
    asyncio.run(groups.advance("g1", "a.jpg"))
    client = TestClient(health.bind(_config(tmp_path), groups))

    body = client.get("/healthz").json()

    assert body["status"] == "healthy"
    assert body["storage"] == {"status": "healthy", "path": str(tmp_path)}
    assert body["media_groups"] == 1


def test_healthz_missing_directory_is_pending(tmp_path):
    client = TestClient(health.bind(_config(tmp_path / "later"), MediaGroupRegistry()))
    body = client.get("/healthz").json()
    assert body["status"] == "healthy"
    assert body["storage"]["status"] == "pending"


def test_metrics_exposes_telstash_counters(tmp_path):
    client = TestClient(health.bind(_config(tmp_path), MediaGroupRegistry()))
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "telstash_saved_files_total" in resp.text
