"""Search configuration."""

from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, model_validator

DEFAULT_COMMON_PHRASES: Tuple[str, ...] = (
    "salary not paid",
    "wrongful termination",
    "security deposit not returned",
    "landlord eviction notice",
    "defective product refund",
    "police complaint not registered",
    "consumer complaint",
    "workplace harassment",
)


class SearchConfig(BaseModel):
    """
    Tunable knobs for the search core.

    Boost and threshold values are configuration, not derived constants;
    callers override them per deployment.
    """

    model_config = ConfigDict(frozen=True)

    # Semantic path
    similarity_threshold: float = Field(0.5, ge=0.0, le=1.0, description="Minimum cosine similarity")
    embedding_dimension: int = Field(384, ge=1, description="Vector dimension of the default vectorizer")
    embedding_batch_size: int = Field(32, ge=1, description="Texts per embedding chunk")
    max_workers: int = Field(4, ge=1, description="Worker threads for CPU-bound steps")

    # Keyword path
    title_boost: float = Field(2.0, ge=0.0, description="Weight of title token matches")
    keyword_boost: float = Field(1.5, ge=0.0, description="Weight of keyword token matches")
    description_weight: float = Field(1.0, ge=0.0, description="Weight of description token matches")
    variation_weight: float = Field(0.8, ge=0.0, description="Weight of variation token matches")

    # Query shape
    max_query_length: int = Field(200, ge=1, description="Maximum trimmed query length")
    default_page_size: int = Field(20, ge=1, description="Page size when none is given")

    # Cache
    cache_enabled: bool = True
    cache_ttl_seconds: float = Field(300.0, gt=0.0, description="Lifetime of cached responses")
    cache_max_entries: int = Field(1000, ge=1, description="Entry count that triggers eviction")
    cache_low_water_mark: int = Field(800, ge=0, description="Entry count eviction shrinks to")

    # Analytics
    analytics_enabled: bool = True

    # Autocomplete
    autocomplete_min_length: int = Field(2, ge=1, description="Shortest text that gets suggestions")
    autocomplete_limit: int = Field(8, ge=1, description="Default number of suggestions")
    common_phrases: Tuple[str, ...] = DEFAULT_COMMON_PHRASES

    # Highlighting
    highlight_open: str = "<mark>"
    highlight_close: str = "</mark>"
    max_highlights: int = Field(2, ge=1, description="Highlighted fields per result")

    # Content provider
    content_timeout_seconds: float = Field(10.0, gt=0.0, description="Provider call timeout")

    @model_validator(mode="after")
    def check_cache_bounds(self) -> "SearchConfig":
        if self.cache_low_water_mark > self.cache_max_entries:
            raise ValueError("cache_low_water_mark cannot exceed cache_max_entries")
        return self

    @property
    def keyword_weight_total(self) -> float:
        """Highest score one token can earn on the keyword path."""
        return self.title_boost + self.description_weight + self.keyword_boost + self.variation_weight

    @classmethod
    def build(cls, **overrides: Any) -> "SearchConfig":
        """
        Create a config, reporting bad values as ConfigurationError.

        Raises:
            ConfigurationError: If any override is invalid
        """
        # core imports this module, so the exception is resolved lazily
        from .core.exceptions import ConfigurationError

        try:
            return cls(**overrides)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid search configuration: {e}") from e

    def with_overrides(self, **overrides: Any) -> "SearchConfig":
        """Return a copy with some fields replaced, re-validated."""
        data: Dict[str, Any] = self.model_dump()
        data.update(overrides)
        return SearchConfig.build(**data)
