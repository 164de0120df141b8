"""Integration tests for the complete scenario search service."""

import asyncio
import pytest

from scenario_search import ScenarioSearchService
from scenario_search.content.provider import InMemoryContentProvider
from scenario_search.core.exceptions import ScenarioSearchError, ValidationError
from scenario_search.models.autocomplete import SuggestionType
from scenario_search.models.result import Algorithm

from conftest import BagOfWordsVectorizer, FailingVectorizer


class TestScenarioSearchServiceIntegration:
    """Integration tests for the complete service."""

    async def test_full_workflow_with_default_vectorizer(self, sample_scenarios):
        """Test complete workflow from service creation to search."""
        async with ScenarioSearchService.create(scenarios=sample_scenarios, log_level="WARNING") as service:

            response = await service.search_text("salary not paid")
            assert response.results[0].scenario.id == "emp_salary"
            assert response.algorithm_used in (Algorithm.SEMANTIC, Algorithm.HYBRID)
            assert response.results[0].highlights

            housing = await service.search_text("landlord", categories=["housing"])
            assert housing.results
            assert all(r.scenario.category == "housing" for r in housing.results)

            urgent = await service.search_text("landlord", severities=["high"], urgent=True)
            assert [r.scenario.id for r in urgent.results] == ["housing_eviction"]

    async def test_service_with_scenario_mappings(self, sample_scenarios):
        """Test loading plain dictionaries through the pydantic boundary."""
        data = [s.to_dict() for s in sample_scenarios]

        async with ScenarioSearchService.create(
            scenarios=data,
            vectorizer=BagOfWordsVectorizer(),
            log_level="WARNING"
        ) as service:
            response = await service.search_text("defective product")

        assert response.results[0].scenario.id == "consumer_refund"
        assert response.algorithm_used == Algorithm.SEMANTIC

    async def test_precomputed_embeddings(self, sample_scenarios):
        """Test initializing from supplied vectors instead of indexing."""
        vectorizer = BagOfWordsVectorizer()

        async with ScenarioSearchService.create(
            scenarios=sample_scenarios,
            vectorizer=vectorizer,
            embeddings=[{"scenario_id": "consumer_refund", "vector": [0.0] * 9 + [1.0], "source": "keywords"}],
            log_level="WARNING"
        ) as service:
            response = await service.search_text("refund please")
            metrics = await service.get_metrics()

        assert [r.scenario.id for r in response.results] == ["consumer_refund"]
        assert metrics["engine"]["embeddings"] == 1

    async def test_search_parameter_validation(self, sample_scenarios):
        """Test that bad convenience parameters raise ValidationError."""
        async with ScenarioSearchService.create(
            scenarios=sample_scenarios,
            vectorizer=BagOfWordsVectorizer(),
            log_level="WARNING"
        ) as service:
            with pytest.raises(ValidationError):
                await service.search_text("rent", severities=["extreme"])
            with pytest.raises(ValidationError):
                await service.search_text("rent", page=0)
            with pytest.raises(ValidationError):
                await service.search_text("rent", sort="popularity")
            with pytest.raises(ValidationError):
                await service.search_text("")

    async def test_autocomplete_and_content_access(self, sample_scenarios):
        async with ScenarioSearchService.create(
            scenarios=sample_scenarios,
            vectorizer=BagOfWordsVectorizer(),
            log_level="WARNING"
        ) as service:
            completions = await service.autocomplete("land", limit=3)
            categories = await service.get_categories()
            employment = await service.get_by_category("employment")

        assert 0 < len(completions.suggestions) <= 3
        assert all("land" in s.text.lower() for s in completions.suggestions)
        assert categories["housing"] == 2
        assert {s.id for s in employment} == {"emp_salary", "emp_harassment"}

    async def test_autocomplete_tolerates_unknown_types(self, sample_scenarios):
        """Test that unrecognized suggestion types never make autocomplete fail."""
        async with ScenarioSearchService.create(
            scenarios=sample_scenarios,
            vectorizer=BagOfWordsVectorizer(),
            log_level="WARNING"
        ) as service:
            popular = await service.autocomplete("sal", types=["popular", "sideways"])
            nothing = await service.autocomplete("sal", types=["sideways"])

        assert popular.suggestions
        assert all(s.type == SuggestionType.COMMON_PHRASE for s in popular.suggestions)
        assert "salary not paid" in [s.text for s in popular.suggestions]
        assert nothing.suggestions == []

    async def test_metrics_and_interactions(self, sample_scenarios):
        async with ScenarioSearchService.create(
            scenarios=sample_scenarios,
            vectorizer=BagOfWordsVectorizer(),
            log_level="WARNING"
        ) as service:
            await service.search_text("salary not paid")
            await service.search_text("salary not paid")
            service.record_interaction("salary not paid", "emp_salary")
            metrics = await service.get_metrics()

            service.clear_cache()
            assert service.engine.cache.stats()["size"] == 0

        analytics = metrics["engine"]["analytics"]
        assert analytics["total_searches"] == 2
        assert analytics["cached_responses"] == 1
        assert analytics["total_interactions"] == 1
        assert metrics["service"]["initialized"] is True
        assert metrics["engine"]["vectorizer"]["name"] == "BagOfWordsVectorizer"

    async def test_concurrent_searches(self, sample_scenarios):
        """Test concurrent search operations."""
        queries = ["salary not paid", "landlord", "defective product", "workplace harassment", "eviction"]

        async with ScenarioSearchService.create(
            scenarios=sample_scenarios,
            vectorizer=BagOfWordsVectorizer(),
            log_level="WARNING"
        ) as service:
            responses = await asyncio.gather(*[service.search_text(q) for q in queries])

        assert all(len(r.results) > 0 for r in responses)
        assert responses[-1].algorithm_used == Algorithm.HYBRID


class TestServiceLifecycle:
    """Test service initialization and error handling."""

    async def test_search_before_initialize(self, sample_scenarios):
        service = ScenarioSearchService(scenarios=sample_scenarios, log_level="WARNING")
        try:
            with pytest.raises(ScenarioSearchError, match="not initialized"):
                await service.search_text("salary")
            health = await service.health_check()
        finally:
            await service.close()

        assert health["status"] == "not_initialized"

    async def test_health_check_after_initialize(self, sample_scenarios):
        async with ScenarioSearchService.create(
            scenarios=sample_scenarios,
            vectorizer=BagOfWordsVectorizer(),
            log_level="WARNING"
        ) as service:
            health = await service.health_check()

        assert health["status"] == "healthy"
        assert health["total_scenarios"] == 5

    async def test_failing_vectorizer_fails_indexing(self, sample_scenarios):
        """Test that indexing errors are reported at startup."""
        with pytest.raises(ScenarioSearchError, match="initialization failed"):
            async with ScenarioSearchService.create(
                scenarios=sample_scenarios,
                vectorizer=FailingVectorizer(),
                log_level="WARNING"
            ):
                pass

    async def test_failing_vectorizer_without_index_still_searches(self, sample_scenarios):
        """Test that search degrades to keywords when the vectorizer is down."""
        async with ScenarioSearchService.create(
            scenarios=sample_scenarios,
            vectorizer=FailingVectorizer(),
            build_index=False,
            log_level="WARNING"
        ) as service:
            response = await service.search_text("salary not paid")

        assert response.algorithm_used == Algorithm.KEYWORD
        assert response.results[0].scenario.id == "emp_salary"

    def test_scenarios_and_provider_are_exclusive(self, sample_scenarios):
        with pytest.raises(ScenarioSearchError, match="not both"):
            ScenarioSearchService(
                scenarios=sample_scenarios,
                content_provider=InMemoryContentProvider(sample_scenarios),
                log_level="WARNING"
            )

    def test_invalid_scenarios_rejected(self, sample_scenarios):
        with pytest.raises(ValidationError, match="Duplicate scenario ID"):
            ScenarioSearchService(scenarios=sample_scenarios + sample_scenarios[:1], log_level="WARNING")
        with pytest.raises(ValidationError, match="Invalid scenario"):
            ScenarioSearchService(
                scenarios=[{"id": "x", "title": " ", "category": "housing"}],
                log_level="WARNING"
            )
