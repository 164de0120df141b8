"""Search result data models."""

from enum import Enum
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field

from .scenario import ScenarioRecord


class MatchType(str, Enum):
    """How a result was found."""
    SEMANTIC = "semantic"
    KEYWORD = "keyword"
    HYBRID = "hybrid"


# Responses report the algorithm with the same vocabulary as results.
Algorithm = MatchType


@dataclass
class MatchedField:
    """
    Scenario field that contributed to a match.

    Attributes:
        field: Field name (title, description, keywords, variations, combined)
        score: Contribution of this field (0.0-1.0)
        matched_text: Text span or tokens that matched
    """
    field: str
    score: float
    matched_text: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "score": round(self.score, 4),
            "matched_text": self.matched_text,
        }


@dataclass
class Highlight:
    """Field text with query tokens wrapped in highlight markers."""
    field: str
    text: str
    original_text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "text": self.text, "original_text": self.original_text}


@dataclass
class SearchResult:
    """
    Search result with relevance scoring and match details.

    Attributes:
        scenario: The matched scenario
        score: Relevance score (0.0-1.0, higher is better)
        matched_fields: Fields that contributed to the match
        highlights: Marked-up field text, filled only on request
        match_type: Path that produced the result
    """
    scenario: ScenarioRecord
    score: float
    matched_fields: List[MatchedField] = field(default_factory=list)
    highlights: List[Highlight] = field(default_factory=list)
    match_type: MatchType = MatchType.SEMANTIC

    def __post_init__(self) -> None:
        """Validate search result."""
        if not 0.0 <= self.score <= 1.0:
            raise ValueError("Score must be between 0.0 and 1.0")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "scenario": self.scenario.to_dict(),
            "score": round(self.score, 4),
            "matched_fields": [m.to_dict() for m in self.matched_fields],
            "highlights": [h.to_dict() for h in self.highlights],
            "match_type": self.match_type.value,
        }


@dataclass
class SearchMetadata:
    """Diagnostics about how a response was assembled."""
    total_scenarios: int = 0
    filtered_scenarios: int = 0
    used_embeddings: bool = False
    fallback_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_scenarios": self.total_scenarios,
            "filtered_scenarios": self.filtered_scenarios,
            "used_embeddings": self.used_embeddings,
            "fallback_reason": self.fallback_reason,
        }


@dataclass
class QuerySuggestion:
    """Refinement offered when a query finds nothing."""
    query: str
    reason: str
    estimated_results: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"query": self.query, "reason": self.reason, "estimated_results": self.estimated_results}


@dataclass
class SearchResponse:
    """
    Complete response of one search call.

    Attributes:
        query: Query text as submitted
        results: Page of results, best first
        total_matches: Number of ranked matches before pagination
        elapsed_ms: Wall time spent serving the call
        algorithm_used: Algorithm that produced the results
        filters_echo: Canonical form of the applied filters
        metadata: Diagnostics about the search
        suggestions: Refinements, only when requested and results are empty
    """
    query: str
    results: List[SearchResult]
    total_matches: int
    elapsed_ms: float
    algorithm_used: Algorithm
    filters_echo: Dict[str, Any] = field(default_factory=dict)
    metadata: SearchMetadata = field(default_factory=SearchMetadata)
    suggestions: List[QuerySuggestion] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "query": self.query,
            "results": [r.to_dict() for r in self.results],
            "total_matches": self.total_matches,
            "elapsed_ms": round(self.elapsed_ms, 3),
            "algorithm_used": self.algorithm_used.value,
            "filters": dict(self.filters_echo),
            "metadata": self.metadata.to_dict(),
            "suggestions": [s.to_dict() for s in self.suggestions],
        }
