"""Core engine components for scenario search."""

from .engine import ScenarioSearchEngine, SearchState, StrategyOutcome, resolve_algorithm
from .embeddings import Vectorizer, HashingTextVectorizer
from .cache import ResultCache
from .analytics import AnalyticsRecorder
from .exceptions import (
    ScenarioSearchError,
    ValidationError,
    EmptyInputError,
    DimensionMismatchError,
    VectorizerUnavailableError,
    ContentUnavailableError,
    ConfigurationError
)

__all__ = [
    "ScenarioSearchEngine",
    "SearchState",
    "StrategyOutcome",
    "resolve_algorithm",
    "Vectorizer",
    "HashingTextVectorizer",
    "ResultCache",
    "AnalyticsRecorder",
    "ScenarioSearchError",
    "ValidationError",
    "EmptyInputError",
    "DimensionMismatchError",
    "VectorizerUnavailableError",
    "ContentUnavailableError",
    "ConfigurationError"
]
