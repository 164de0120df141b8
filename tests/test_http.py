"""Test the REST API layer."""

import pytest

pytest.importorskip("fastapi")
pytest.importorskip("httpx")

from fastapi.testclient import TestClient

from scenario_search.api.http import create_app
from scenario_search.api.service import ScenarioSearchService

from conftest import BagOfWordsVectorizer, BrokenProvider


@pytest.fixture
def client(sample_scenarios):
    """Create a test client with the service started."""
    app = create_app(lambda: ScenarioSearchService(
        scenarios=sample_scenarios,
        vectorizer=BagOfWordsVectorizer(),
        log_level="WARNING"
    ))
    with TestClient(app) as client:
        yield client


class TestSearchEndpoints:
    """Test search and autocomplete endpoints."""

    def test_search(self, client):
        response = client.post("/search", json={"text": "salary not paid", "include_highlights": True})

        assert response.status_code == 200
        data = response.json()
        assert data["results"][0]["scenario"]["id"] == "emp_salary"
        assert data["algorithm_used"] == "semantic"
        assert data["results"][0]["highlights"]

    def test_search_with_filters(self, client):
        response = client.post("/search", json={"text": "landlord", "categories": ["housing"], "page_size": 1})

        data = response.json()
        assert len(data["results"]) == 1
        assert data["total_matches"] == 2
        assert data["filters"]["categories"] == ["housing"]

    def test_blank_query_rejected(self, client):
        response = client.post("/search", json={"text": "   "})

        assert response.status_code == 422

    def test_padded_query_within_limit_accepted(self, client):
        response = client.post("/search", json={"text": "   " + "salary " * 28 + "paid   "})

        assert response.status_code == 200

    def test_autocomplete(self, client):
        response = client.post("/autocomplete", json={"text": "sal", "limit": 2})

        assert response.status_code == 200
        assert len(response.json()["suggestions"]) == 2

    def test_autocomplete_ignores_unknown_types(self, client):
        response = client.post("/autocomplete", json={"text": "sal", "types": ["popular", "sideways"]})

        assert response.status_code == 200
        assert {s["type"] for s in response.json()["suggestions"]} == {"common_phrase"}


class TestContentEndpoints:
    """Test category, interaction, cache and health endpoints."""

    def test_categories(self, client):
        assert client.get("/categories").json()["categories"] == {"employment": 2, "housing": 2, "consumer": 1}

        housing = client.get("/categories/housing").json()
        assert {s["id"] for s in housing["scenarios"]} == {"housing_deposit", "housing_eviction"}

    def test_interactions_and_metrics(self, client):
        client.post("/search", json={"text": "landlord"})
        accepted = client.post("/interactions", json={"query": "landlord", "scenario_id": "housing_eviction"})

        metrics = client.get("/metrics").json()

        assert accepted.status_code == 202
        assert metrics["engine"]["analytics"]["total_interactions"] == 1
        assert metrics["engine"]["analytics"]["total_searches"] == 1

    def test_clear_cache(self, client):
        client.post("/search", json={"text": "landlord"})

        assert client.delete("/cache").json() == {"status": "cleared"}
        assert client.get("/metrics").json()["engine"]["cache"]["size"] == 0

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"


def test_unavailable_content_returns_503():
    """Test that provider failures map to 503."""
    app = create_app(lambda: ScenarioSearchService(
        content_provider=BrokenProvider(),
        vectorizer=BagOfWordsVectorizer(),
        log_level="WARNING"
    ), build_index=False)

    with TestClient(app) as client:
        assert client.post("/search", json={"text": "salary"}).status_code == 503
        assert client.get("/categories").status_code == 503
