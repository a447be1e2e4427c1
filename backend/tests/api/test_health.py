from __future__ import annotations

from typing import Any

import httpx

from tests.api.conftest import ClientFactory
from tests.fakes import SERP_PAYLOAD, FakeCompletionClient, make_settings


def test_health_reports_version(build_client: ClientFactory) -> None:
    client = build_client()

    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["version"] == "2.0.0"
    assert body["timestamp"].endswith("Z")


def test_diagnostics_probes_search_provider(
    build_client: ClientFactory, http_calls: list[dict[str, Any]]
) -> None:
    client = build_client(
        serp_replies=[SERP_PAYLOAD], completion_client=FakeCompletionClient()
    )

    response = client.get("/api/health/diagnostics", params={"query": "data analyst"})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["environment"] == {
        "OPENAI_API_KEY": "✓ Set",
        "SERPAPI_KEY": "✓ Set",
    }
    serpapi = body["components"]["serpapi"]
    assert serpapi["status"] == "ok"
    assert serpapi["hasResults"] is True
    assert serpapi["resultCount"] == 5
    assert http_calls[0]["params"]["q"] == "data analyst"
    assert http_calls[0]["params"]["num"] == 1


def test_diagnostics_never_exposes_keys(build_client: ClientFactory) -> None:
    client = build_client(
        serp_replies=[SERP_PAYLOAD], completion_client=FakeCompletionClient()
    )

    text = client.get("/api/health/diagnostics").text

    assert "test-serp-key" not in text
    assert "test-openai-key" not in text


def test_diagnostics_reports_provider_failure(build_client: ClientFactory) -> None:
    client = build_client(serp_replies=[httpx.ConnectError("offline")])

    response = client.get("/api/health/diagnostics")

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "error"
    assert body["components"]["serpapi"]["message"] == "Failed to query SerpAPI"


def test_diagnostics_without_keys(build_client: ClientFactory) -> None:
    client = build_client(
        settings=make_settings(serpapi_key=None, openai_api_key=None)
    )

    body = client.get("/api/health/diagnostics").json()

    assert body["environment"] == {
        "OPENAI_API_KEY": "✗ Missing",
        "SERPAPI_KEY": "✗ Missing",
    }
    assert body["components"]["openai"]["status"] == "degraded"
    assert body["status"] == "error"
