"""In-process usage analytics for search and autocomplete."""

import threading
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Tuple


class AnalyticsRecorder:
    """
    Tallies query frequency, category filter usage and response times.

    State lives only as long as the recorder and is guarded by one lock.
    Nothing in the search path reads it to make decisions about results;
    autocomplete reads ``top_queries`` as one of its suggestion sources.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._total_searches = 0
        self._successful_searches = 0
        self._average_response_ms = 0.0
        self._success_rate = 0.0
        self._query_counts: Counter = Counter()
        self._category_counts: Counter = Counter()
        self._interaction_counts: Counter = Counter()
        self._cached_responses = 0
        self._total_autocompletes = 0
        self._average_autocomplete_ms = 0.0

    def record_search(
        self,
        query: str,
        elapsed_ms: float,
        result_count: int,
        categories: Optional[Iterable[str]] = None,
        from_cache: bool = False
    ) -> None:
        """
        Record one completed search.

        Args:
            query: Query text (normalized by the caller)
            elapsed_ms: Time spent serving the search
            result_count: Number of results returned
            categories: Categories the caller filtered on
            from_cache: Whether the response came from the cache
        """
        with self._lock:
            self._total_searches += 1
            n = self._total_searches
            self._average_response_ms += (elapsed_ms - self._average_response_ms) / n

            if query:
                self._query_counts[query] += 1

            for category in categories or ():
                self._category_counts[category] += 1

            if result_count > 0:
                self._successful_searches += 1
            self._success_rate = self._successful_searches / n

            if from_cache:
                self._cached_responses += 1

    def record_autocomplete(self, elapsed_ms: float) -> None:
        with self._lock:
            self._total_autocompletes += 1
            n = self._total_autocompletes
            self._average_autocomplete_ms += (elapsed_ms - self._average_autocomplete_ms) / n

    def record_interaction(self, query: str, scenario_id: str, kind: str = "click") -> None:
        """Count a user interaction with a result (click, view, share)."""
        with self._lock:
            self._interaction_counts[(query, scenario_id, kind)] += 1

    @property
    def total_searches(self) -> int:
        with self._lock:
            return self._total_searches

    @property
    def average_response_ms(self) -> float:
        with self._lock:
            return self._average_response_ms

    @property
    def success_rate(self) -> float:
        with self._lock:
            return self._success_rate

    def top_queries(self, n: int = 10) -> List[Tuple[str, int]]:
        """Most frequent queries, highest count first."""
        with self._lock:
            return _sorted_counts(self._query_counts)[:n]

    def category_usage(self) -> List[Tuple[str, int]]:
        """Filter usage per category, highest count first."""
        with self._lock:
            return _sorted_counts(self._category_counts)

    def interaction_count(self, query: str, scenario_id: str, kind: str = "click") -> int:
        with self._lock:
            return self._interaction_counts[(query, scenario_id, kind)]

    def report(self, top_n: int = 10, cache_stats: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Read-only snapshot of all metrics."""
        with self._lock:
            report = {
                'total_searches': self._total_searches,
                'average_response_ms': self._average_response_ms,
                'success_rate': self._success_rate,
                'cached_responses': self._cached_responses,
                'total_autocompletes': self._total_autocompletes,
                'average_autocomplete_ms': self._average_autocomplete_ms,
                'popular_queries': [
                    {'query': q, 'count': c} for q, c in _sorted_counts(self._query_counts)[:top_n]
                ],
                'category_usage': [
                    {'category': cat, 'count': c} for cat, c in _sorted_counts(self._category_counts)
                ],
                'total_interactions': sum(self._interaction_counts.values()),
            }
        report['cache_hit_rate'] = cache_stats.get('hit_rate', 0.0) if cache_stats else 0.0
        return report


def _sorted_counts(counter: Counter) -> List[Tuple[Any, int]]:
    # Counter preserves first-insertion order, and sorted() is stable
    return sorted(counter.items(), key=lambda item: item[1], reverse=True)
