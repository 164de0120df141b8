"""Query data model with filtering capabilities."""

from enum import Enum
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from pydantic import BaseModel, Field, field_validator

from .scenario import Severity

# Matches the default SearchConfig.max_query_length
MAX_QUERY_LENGTH = 200


class SortOrder(str, Enum):
    """Result ordering options."""
    RELEVANCE = "relevance"
    TITLE = "title"
    CATEGORY = "category"
    SEVERITY = "severity"


class SortDirection(str, Enum):
    """Direction for non-relevance orderings."""
    ASC = "asc"
    DESC = "desc"


@dataclass
class SearchFilters:
    """
    Predicates applied to candidate results.

    Attributes:
        categories: Allowed categories (None = all categories)
        severities: Allowed severity levels (None = all levels)
        urgent: Keep only urgent (True) or non-urgent (False) scenarios
        only_validated: Keep only validated scenarios
    """
    categories: Optional[List[str]] = None
    severities: Optional[List[Severity]] = None
    urgent: Optional[bool] = None
    only_validated: bool = False

    def __post_init__(self) -> None:
        if self.severities:
            self.severities = [Severity(s) for s in self.severities]

    def is_empty(self) -> bool:
        return (
            not self.categories
            and not self.severities
            and self.urgent is None
            and not self.only_validated
        )

    def to_dict(self) -> Dict[str, Any]:
        """Canonical form with sorted lists, used for echoes and cache keys."""
        return {
            "categories": sorted({c.strip().lower() for c in self.categories}) if self.categories else None,
            "severities": sorted({s.value for s in self.severities}) if self.severities else None,
            "urgent": self.urgent,
            "only_validated": self.only_validated,
        }


@dataclass
class Pagination:
    """1-based page selection."""
    page: int = 1
    page_size: int = 20

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("Page must be at least 1")
        if self.page_size < 1:
            raise ValueError("Page size must be at least 1")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class SearchQuery:
    """
    Search request with filters, pagination and presentation options.

    Text length is checked when the query enters the search pipeline, so
    that malformed queries surface as ValidationError from ``search``.

    Attributes:
        text: Free-text description of the problem
        filters: Optional result predicates
        pagination: Page selection (None = first page of the default size)
        include_highlights: Whether to mark matched tokens in results
        include_suggestions: Whether to suggest refinements for empty results
        sort: Result ordering
        sort_direction: Direction for non-relevance orderings
    """
    text: str
    filters: SearchFilters = field(default_factory=SearchFilters)
    pagination: Optional[Pagination] = None
    include_highlights: bool = False
    include_suggestions: bool = False
    sort: SortOrder = SortOrder.RELEVANCE
    sort_direction: SortDirection = SortDirection.DESC

    @property
    def normalized_text(self) -> str:
        return " ".join(self.text.split()).lower() if self.text else ""


class QueryModel(BaseModel):
    """Pydantic model for query validation in API contexts."""

    text: str = Field(..., min_length=1, description="Search query text, at most 200 characters once trimmed")
    categories: Optional[List[str]] = Field(None, description="Category filters")
    severities: Optional[List[Severity]] = Field(None, description="Severity filters")
    urgent: Optional[bool] = Field(None, description="Urgency filter")
    only_validated: bool = Field(False, description="Only validated scenarios")
    page: int = Field(1, ge=1, description="1-based page number")
    page_size: int = Field(20, ge=1, le=100, description="Results per page")
    include_highlights: bool = Field(False, description="Mark matched tokens")
    include_suggestions: bool = Field(False, description="Suggest refinements")
    sort: SortOrder = Field(SortOrder.RELEVANCE, description="Result ordering")
    sort_direction: SortDirection = Field(SortDirection.DESC, description="Sort direction")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Ensure query text is not just whitespace and fits once trimmed."""
        text = v.strip()
        if not text:
            raise ValueError("Query text cannot be empty or whitespace only")
        if len(text) > MAX_QUERY_LENGTH:
            raise ValueError(f"Query text cannot exceed {MAX_QUERY_LENGTH} characters")
        return text

    def to_query(self) -> SearchQuery:
        """Convert to SearchQuery dataclass."""
        return SearchQuery(
            text=self.text,
            filters=SearchFilters(
                categories=self.categories,
                severities=self.severities,
                urgent=self.urgent,
                only_validated=self.only_validated,
            ),
            pagination=Pagination(page=self.page, page_size=self.page_size),
            include_highlights=self.include_highlights,
            include_suggestions=self.include_suggestions,
            sort=self.sort,
            sort_direction=self.sort_direction,
        )
