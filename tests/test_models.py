"""Test data models and validation."""

import pytest

import numpy as np

from scenario_search.models.autocomplete import AutocompleteRequest, SuggestionType
from scenario_search.models.embedding import EmbeddingRecord, SourceField
from scenario_search.models.query import (
    Pagination,
    QueryModel,
    SearchFilters,
    SearchQuery,
    SortOrder,
)
from scenario_search.models.result import (
    Algorithm,
    MatchedField,
    SearchMetadata,
    SearchResponse,
    SearchResult,
)
from scenario_search.models.scenario import ScenarioModel, ScenarioRecord, Severity


class TestScenarioRecord:
    """Test ScenarioRecord model."""

    def test_valid_scenario_creation(self):
        """Test creating a valid scenario."""
        scenario = ScenarioRecord(
            id="emp_001",
            title="Unpaid Salary",
            description="Salary was not paid",
            category="employment",
            keywords={"salary", "wages"},
            variations=["salary not paid"]
        )

        assert scenario.severity == Severity.MEDIUM
        assert scenario.keywords == frozenset({"salary", "wages"})
        assert scenario.variations == ("salary not paid",)
        assert scenario.sorted_keywords() == ["salary", "wages"]

    def test_empty_id_validation(self):
        """Test validation for empty scenario ID."""
        with pytest.raises(ValueError, match="Scenario ID cannot be empty"):
            ScenarioRecord(id="", title="Title", description="", category="employment")

    def test_empty_title_validation(self):
        with pytest.raises(ValueError, match="Scenario title cannot be empty"):
            ScenarioRecord(id="emp_001", title="  ", description="", category="employment")

    def test_empty_category_validation(self):
        with pytest.raises(ValueError, match="Scenario category cannot be empty"):
            ScenarioRecord(id="emp_001", title="Title", description="", category="")

    def test_to_dict(self, sample_scenarios):
        """Test serialization."""
        data = sample_scenarios[0].to_dict()

        assert data["id"] == "emp_salary"
        assert data["severity"] == "high"
        assert data["keywords"] == ["salary", "unpaid", "wages"]
        assert data["urgent"] is True

    def test_severity_ordering(self):
        assert Severity.LOW < Severity.MEDIUM < Severity.HIGH < Severity.CRITICAL
        assert Severity.CRITICAL.rank == 3


class TestScenarioModel:
    """Test ScenarioModel pydantic validation."""

    def test_valid_scenario_model(self):
        """Test valid scenario model conversion."""
        model = ScenarioModel(
            id=" con_001 ",
            title="Defective Product",
            category="consumer",
            severity="low",
            keywords=["refund", " ", "defective"]
        )

        scenario = model.to_scenario()

        assert isinstance(scenario, ScenarioRecord)
        assert scenario.id == "con_001"
        assert scenario.severity == Severity.LOW
        assert scenario.keywords == frozenset({"refund", "defective"})

    def test_whitespace_title_rejected(self):
        with pytest.raises(ValueError, match="empty or whitespace"):
            ScenarioModel(id="con_001", title="   ", category="consumer")

    def test_unknown_severity_rejected(self):
        with pytest.raises(ValueError):
            ScenarioModel(id="con_001", title="Title", category="consumer", severity="extreme")


class TestEmbeddingRecord:
    """Test EmbeddingRecord model."""

    def test_vector_is_flattened_float_array(self):
        record = EmbeddingRecord(scenario_id="emp_salary", source_field=SourceField.TITLE, vector=[[1, 2, 3]])

        assert record.vector.dtype == np.float64
        assert record.dimension == 3
        assert record.key == "emp_salary-title"

    def test_empty_scenario_id_rejected(self):
        with pytest.raises(ValueError, match="scenario ID cannot be empty"):
            EmbeddingRecord(scenario_id="", source_field=SourceField.TITLE, vector=[1.0])


class TestSearchQuery:
    """Test query models."""

    def test_normalized_text(self):
        query = SearchQuery(text="  Salary   NOT paid ")

        assert query.normalized_text == "salary not paid"
        assert query.filters.is_empty()
        assert query.sort == SortOrder.RELEVANCE

    def test_filters_canonical_form(self):
        """Test that filter order and case do not change the canonical form."""
        a = SearchFilters(categories=["Housing", "employment"], severities=["high", "low"])
        b = SearchFilters(categories=["employment", "housing"], severities=[Severity.LOW, Severity.HIGH])

        assert a.to_dict() == b.to_dict()
        assert a.to_dict()["severities"] == ["high", "low"]

    def test_pagination_validation(self):
        """Test pagination bounds."""
        with pytest.raises(ValueError, match="Page must be at least 1"):
            Pagination(page=0)
        with pytest.raises(ValueError, match="Page size must be at least 1"):
            Pagination(page_size=0)

        assert Pagination(page=3, page_size=10).offset == 20

    def test_query_model_conversion(self):
        """Test QueryModel conversion to SearchQuery."""
        model = QueryModel(
            text="  landlord deposit ",
            categories=["housing"],
            severities=["medium"],
            page=2,
            page_size=5,
            include_highlights=True
        )

        query = model.to_query()

        assert query.text == "landlord deposit"
        assert query.filters.categories == ["housing"]
        assert query.filters.severities == [Severity.MEDIUM]
        assert query.pagination.offset == 5
        assert query.include_highlights is True

    def test_query_model_rejects_long_text(self):
        with pytest.raises(ValueError):
            QueryModel(text="a" * 201)

    def test_query_model_measures_trimmed_text(self):
        """Test that surrounding whitespace does not count toward the length limit."""
        model = QueryModel(text="  " + "a" * 200 + "  ")

        assert model.text == "a" * 200
        with pytest.raises(ValueError, match="cannot exceed 200"):
            QueryModel(text=" " + "a" * 201 + " ")


class TestSearchResult:
    """Test result models."""

    def test_score_range(self, sample_scenarios):
        """Test score validation."""
        with pytest.raises(ValueError, match="Score must be between 0.0 and 1.0"):
            SearchResult(scenario=sample_scenarios[0], score=1.5)

    def test_response_to_dict(self, sample_scenarios):
        """Test response serialization."""
        result = SearchResult(
            scenario=sample_scenarios[0],
            score=0.81649,
            matched_fields=[MatchedField(field="keywords", score=0.81649, matched_text="salary unpaid wages")]
        )
        response = SearchResponse(
            query="salary not paid",
            results=[result],
            total_matches=1,
            elapsed_ms=1.23456,
            algorithm_used=Algorithm.SEMANTIC,
            metadata=SearchMetadata(total_scenarios=5, filtered_scenarios=5, used_embeddings=True)
        )

        data = response.to_dict()

        assert data["algorithm_used"] == "semantic"
        assert data["elapsed_ms"] == 1.235
        assert data["results"][0]["score"] == 0.8165
        assert data["results"][0]["matched_fields"][0]["field"] == "keywords"
        assert data["metadata"]["used_embeddings"] is True


class TestAutocompleteRequest:

    def test_types_are_coerced(self):
        request = AutocompleteRequest(text="sal", types=["keyword", "category"])

        assert request.types == [SuggestionType.KEYWORD, SuggestionType.CATEGORY]

    def test_type_aliases_and_unknown_names(self):
        """Test that legacy names map and unknown names are dropped."""
        request = AutocompleteRequest(text="sal", types=["popular", "Keyword", "sideways", "common_phrase"])

        assert request.types == [SuggestionType.COMMON_PHRASE, SuggestionType.KEYWORD]

    def test_only_unknown_types_selects_nothing(self):
        assert AutocompleteRequest(text="sal", types=["sideways"]).types == []
        assert AutocompleteRequest(text="sal", types=[]).types is None
