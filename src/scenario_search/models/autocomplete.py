"""Autocomplete request and response models."""

import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class SuggestionType(str, Enum):
    """Source of an autocomplete suggestion."""
    SCENARIO_TITLE = "scenario_title"
    CATEGORY = "category"
    KEYWORD = "keyword"
    COMMON_PHRASE = "common_phrase"


# Older client names for suggestion sources
TYPE_ALIASES: Dict[str, SuggestionType] = {
    "popular": SuggestionType.COMMON_PHRASE,
    "phrase": SuggestionType.COMMON_PHRASE,
    "title": SuggestionType.SCENARIO_TITLE,
}


def parse_suggestion_types(values: Optional[Iterable[Any]]) -> Optional[List[SuggestionType]]:
    """
    Convert requested suggestion sources, dropping names that are not known.

    Returns None (all sources) when nothing was requested, and an empty
    list when every requested name was unknown.
    """
    if not values:
        return None

    parsed: List[SuggestionType] = []
    for value in values:
        if isinstance(value, SuggestionType):
            suggestion_type = value
        else:
            name = str(value).strip().lower()
            suggestion_type = TYPE_ALIASES.get(name)
            if suggestion_type is None:
                try:
                    suggestion_type = SuggestionType(name)
                except ValueError:
                    logger.debug(f"Ignoring unknown suggestion type: {value!r}")
                    continue
        if suggestion_type not in parsed:
            parsed.append(suggestion_type)
    return parsed


@dataclass
class AutocompleteRequest:
    """
    Partial-query suggestion request.

    Attributes:
        text: Partial query typed so far
        limit: Maximum suggestions (None = configured default)
        types: Suggestion sources to include (None = all)
        category: Restrict title and keyword suggestions to one category
    """
    text: str
    limit: Optional[int] = None
    types: Optional[List[SuggestionType]] = None
    category: Optional[str] = None

    def __post_init__(self) -> None:
        self.types = parse_suggestion_types(self.types)


@dataclass
class AutocompleteSuggestion:
    """Single type-ahead suggestion."""
    text: str
    type: SuggestionType
    score: float
    match_count: int = 0
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "type": self.type.value,
            "score": round(self.score, 4),
            "match_count": self.match_count,
            "category": self.category,
        }


@dataclass
class AutocompleteResponse:
    """Suggestions for one autocomplete call."""
    text: str
    suggestions: List[AutocompleteSuggestion] = field(default_factory=list)
    elapsed_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "suggestions": [s.to_dict() for s in self.suggestions],
            "elapsed_ms": round(self.elapsed_ms, 3),
        }
