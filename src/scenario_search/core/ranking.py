"""Filtering, de-duplication and ordering of candidate results."""

from typing import Dict, List, Optional

from ..models.query import SearchFilters, SortDirection, SortOrder
from ..models.result import SearchResult
from ..models.scenario import ScenarioRecord


def matches_filters(scenario: ScenarioRecord, filters: Optional[SearchFilters]) -> bool:
    """
    Check one scenario against the filter predicates.

    Predicates apply in order: category allow-list, severity allow-list,
    urgency, validated-only. Category comparison ignores case.
    """
    if filters is None:
        return True

    if filters.categories:
        allowed = {c.strip().lower() for c in filters.categories}
        if scenario.category.strip().lower() not in allowed:
            return False

    if filters.severities and scenario.severity not in filters.severities:
        return False

    if filters.urgent is not None and scenario.urgent != filters.urgent:
        return False

    if filters.only_validated and not scenario.validated:
        return False

    return True


class FilterRanker:
    """Applies filters, keeps the best result per scenario and sorts."""

    def apply_filters(
        self,
        results: List[SearchResult],
        filters: Optional[SearchFilters]
    ) -> List[SearchResult]:
        """Apply query filters to search results, preserving order."""
        if not results or filters is None or filters.is_empty():
            return list(results)
        return [r for r in results if matches_filters(r.scenario, filters)]

    def deduplicate(self, results: List[SearchResult]) -> List[SearchResult]:
        """
        Keep one result per scenario.

        The highest-scoring result wins; on equal scores the earlier one
        does. The survivor takes the position of the scenario's first
        appearance.
        """
        best: Dict[str, SearchResult] = {}
        order: List[str] = []
        for result in results:
            scenario_id = result.scenario.id
            current = best.get(scenario_id)
            if current is None:
                order.append(scenario_id)
                best[scenario_id] = result
            elif result.score > current.score:
                best[scenario_id] = result
        return [best[scenario_id] for scenario_id in order]

    def rank(self, results: List[SearchResult]) -> List[SearchResult]:
        """Sort by score descending; ties keep insertion order."""
        return sorted(results, key=lambda r: r.score, reverse=True)

    def filter_and_rank(
        self,
        results: List[SearchResult],
        filters: Optional[SearchFilters]
    ) -> List[SearchResult]:
        """Filter, de-duplicate and rank in one pass."""
        return self.rank(self.deduplicate(self.apply_filters(results, filters)))

    def apply_sort(
        self,
        ranked: List[SearchResult],
        sort: SortOrder = SortOrder.RELEVANCE,
        direction: SortDirection = SortDirection.DESC
    ) -> List[SearchResult]:
        """
        Re-order ranked results by a scenario attribute.

        Relevance order is returned unchanged. Other orders are stable, so
        results with equal keys stay in relevance order.
        """
        if sort == SortOrder.RELEVANCE:
            return list(ranked)

        reverse = direction == SortDirection.DESC
        if sort == SortOrder.TITLE:
            key = lambda r: r.scenario.title.lower()
        elif sort == SortOrder.CATEGORY:
            key = lambda r: r.scenario.category.lower()
        else:
            key = lambda r: r.scenario.severity.rank
        return sorted(ranked, key=key, reverse=reverse)
