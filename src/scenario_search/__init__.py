"""
Scenario Search

Hybrid relevance search over a catalog of problem scenarios: semantic
similarity over embeddings with a keyword fallback, filtering, ranking,
highlighting, result caching, analytics and autocomplete.
"""

from .api.service import ScenarioSearchService
from .config import SearchConfig
from .content.provider import ContentProvider, InMemoryContentProvider
from .models.scenario import ScenarioRecord, Severity
from .models.query import SearchQuery, SearchFilters, Pagination
from .models.result import SearchResponse, SearchResult
from .models.autocomplete import AutocompleteRequest, AutocompleteResponse
from .core.engine import ScenarioSearchEngine

__version__ = "1.0.0"

__all__ = [
    "ScenarioSearchService",
    "ScenarioSearchEngine",
    "SearchConfig",
    "ContentProvider",
    "InMemoryContentProvider",
    "ScenarioRecord",
    "Severity",
    "SearchQuery",
    "SearchFilters",
    "Pagination",
    "SearchResponse",
    "SearchResult",
    "AutocompleteRequest",
    "AutocompleteResponse",
]
