"""Type-ahead suggestions from titles, categories, keywords and phrases."""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..config import SearchConfig
from ..models.autocomplete import AutocompleteRequest, AutocompleteSuggestion, SuggestionType
from ..models.scenario import ScenarioRecord
from ..utils.text_processing import TextProcessor

logger = logging.getLogger(__name__)

# Base relevance of each source before text-position bonuses
TYPE_WEIGHTS: Dict[SuggestionType, float] = {
    SuggestionType.SCENARIO_TITLE: 0.6,
    SuggestionType.CATEGORY: 0.55,
    SuggestionType.KEYWORD: 0.5,
    SuggestionType.COMMON_PHRASE: 0.45,
}
PREFIX_BONUS = 0.3
WORD_START_BONUS = 0.15
FREQUENCY_BONUS_STEP = 0.02
FREQUENCY_BONUS_CAP = 0.1


class AutocompleteEngine:
    """
    Builds ranked suggestions for a partial query.

    A candidate qualifies when it contains the typed text, ignoring case.
    Its score blends the source weight, a bonus when the candidate starts
    with the text, a bonus when the text starts a word, and a small bonus
    for how many scenarios (or past searches) back it. Suggestions are
    de-duplicated by text, keeping the best-scoring one.
    """

    def __init__(self, config: Optional[SearchConfig] = None, text_processor: Optional[TextProcessor] = None):
        self.config = config or SearchConfig()
        self.text_processor = text_processor or TextProcessor()

    def suggest(
        self,
        request: AutocompleteRequest,
        scenarios: Sequence[ScenarioRecord],
        popular_queries: Iterable[Tuple[str, int]] = ()
    ) -> List[AutocompleteSuggestion]:
        """
        Suggestions for one request, best first.

        Returns an empty list when the text is shorter than the configured
        minimum or the limit is not positive.
        """
        fragment = self.text_processor.clean_text(request.text or "")
        if len(fragment) < self.config.autocomplete_min_length:
            return []

        limit = request.limit if request.limit is not None else self.config.autocomplete_limit
        if limit < 1:
            return []

        wanted = set(SuggestionType) if request.types is None else set(request.types)
        scoped = scenarios
        if request.category:
            category = request.category.strip().lower()
            scoped = [s for s in scenarios if s.category.strip().lower() == category]

        candidates: List[AutocompleteSuggestion] = []
        if SuggestionType.SCENARIO_TITLE in wanted:
            candidates.extend(self._title_suggestions(fragment, scoped))
        if SuggestionType.CATEGORY in wanted:
            candidates.extend(self._category_suggestions(fragment, scenarios))
        if SuggestionType.KEYWORD in wanted:
            candidates.extend(self._keyword_suggestions(fragment, scoped))
        if SuggestionType.COMMON_PHRASE in wanted:
            candidates.extend(self._phrase_suggestions(fragment, popular_queries))

        ranked = self._dedupe(candidates)
        ranked.sort(key=lambda s: s.score, reverse=True)
        return ranked[:limit]

    def score(self, text: str, fragment: str, suggestion_type: SuggestionType, match_count: int = 0) -> float:
        """Blended relevance of one candidate, capped at 1.0."""
        lowered = text.lower()
        value = TYPE_WEIGHTS[suggestion_type]
        if lowered.startswith(fragment):
            value += PREFIX_BONUS
        if self.text_processor.starts_word(lowered, fragment):
            value += WORD_START_BONUS
        value += min(FREQUENCY_BONUS_CAP, FREQUENCY_BONUS_STEP * max(match_count, 0))
        return min(1.0, value)

    def _title_suggestions(self, fragment: str, scenarios: Iterable[ScenarioRecord]) -> List[AutocompleteSuggestion]:
        suggestions = []
        for scenario in scenarios:
            if fragment in scenario.title.lower():
                suggestions.append(AutocompleteSuggestion(
                    text=scenario.title,
                    type=SuggestionType.SCENARIO_TITLE,
                    score=self.score(scenario.title, fragment, SuggestionType.SCENARIO_TITLE, 1),
                    match_count=1,
                    category=scenario.category
                ))
        return suggestions

    def _category_suggestions(self, fragment: str, scenarios: Iterable[ScenarioRecord]) -> List[AutocompleteSuggestion]:
        counts: Dict[str, int] = {}
        for scenario in scenarios:
            counts[scenario.category] = counts.get(scenario.category, 0) + 1

        return [
            AutocompleteSuggestion(
                text=category,
                type=SuggestionType.CATEGORY,
                score=self.score(category, fragment, SuggestionType.CATEGORY, count),
                match_count=count,
                category=category
            )
            for category, count in counts.items()
            if fragment in category.lower()
        ]

    def _keyword_suggestions(self, fragment: str, scenarios: Iterable[ScenarioRecord]) -> List[AutocompleteSuggestion]:
        owners: Dict[str, List[str]] = {}
        display: Dict[str, str] = {}
        for scenario in scenarios:
            for keyword in scenario.sorted_keywords():
                lowered = keyword.lower()
                if fragment not in lowered:
                    continue
                display.setdefault(lowered, keyword)
                owners.setdefault(lowered, []).append(scenario.category)

        suggestions = []
        for lowered, categories in owners.items():
            distinct = set(categories)
            suggestions.append(AutocompleteSuggestion(
                text=display[lowered],
                type=SuggestionType.KEYWORD,
                score=self.score(lowered, fragment, SuggestionType.KEYWORD, len(categories)),
                match_count=len(categories),
                category=categories[0] if len(distinct) == 1 else None
            ))
        return suggestions

    def _phrase_suggestions(
        self,
        fragment: str,
        popular_queries: Iterable[Tuple[str, int]]
    ) -> List[AutocompleteSuggestion]:
        frequencies: Dict[str, int] = {}
        for phrase in self.config.common_phrases:
            frequencies.setdefault(phrase, 0)
        for query, count in popular_queries:
            frequencies[query] = frequencies.get(query, 0) + count

        return [
            AutocompleteSuggestion(
                text=phrase,
                type=SuggestionType.COMMON_PHRASE,
                score=self.score(phrase, fragment, SuggestionType.COMMON_PHRASE, count),
                match_count=count
            )
            for phrase, count in frequencies.items()
            if fragment in phrase.lower()
        ]

    def _dedupe(self, candidates: List[AutocompleteSuggestion]) -> List[AutocompleteSuggestion]:
        best: Dict[str, AutocompleteSuggestion] = {}
        for suggestion in candidates:
            key = suggestion.text.strip().lower()
            current = best.get(key)
            if current is None or suggestion.score > current.score:
                best[key] = suggestion
        return list(best.values())
