"""Data models for scenario search."""

from .scenario import ScenarioRecord, ScenarioModel, Severity
from .embedding import EmbeddingRecord, SourceField
from .query import SearchQuery, SearchFilters, Pagination, QueryModel, SortOrder, SortDirection
from .result import (
    Algorithm,
    Highlight,
    MatchedField,
    MatchType,
    QuerySuggestion,
    SearchMetadata,
    SearchResponse,
    SearchResult,
)
from .autocomplete import (
    AutocompleteRequest,
    AutocompleteResponse,
    AutocompleteSuggestion,
    SuggestionType,
)

__all__ = [
    "ScenarioRecord", "ScenarioModel", "Severity",
    "EmbeddingRecord", "SourceField",
    "SearchQuery", "SearchFilters", "Pagination", "QueryModel", "SortOrder", "SortDirection",
    "Algorithm", "Highlight", "MatchedField", "MatchType", "QuerySuggestion",
    "SearchMetadata", "SearchResponse", "SearchResult",
    "AutocompleteRequest", "AutocompleteResponse", "AutocompleteSuggestion", "SuggestionType",
]
