"""Token-overlap scoring used as the keyword search path."""

import logging
from typing import Iterable, List, Optional

from ..config import SearchConfig
from ..models.result import MatchedField, MatchType, SearchResult
from ..models.scenario import ScenarioRecord
from ..utils.text_processing import TextProcessor

logger = logging.getLogger(__name__)


class KeywordMatcher:
    """
    Scores scenarios by weighted substring overlap with query tokens.

    Each distinct query token found in a field adds that field's weight:
    ``title_boost`` for the title, ``description_weight`` for the
    description, ``keyword_boost`` when the token occurs in any keyword and
    ``variation_weight`` when it occurs in any variation. The raw score is
    divided by the best score the query could earn, which keeps keyword
    scores in [0, 1] without changing their order.
    """

    def __init__(self, config: Optional[SearchConfig] = None, text_processor: Optional[TextProcessor] = None):
        self.config = config or SearchConfig()
        self.text_processor = text_processor or TextProcessor()

    def match(self, query: str, scenarios: Iterable[ScenarioRecord]) -> List[SearchResult]:
        """
        Score every scenario against the query.

        Args:
            query: Raw query text
            scenarios: Candidate scenarios in catalog order

        Returns:
            Results with a positive score, in catalog order (unsorted)
        """
        tokens = self.text_processor.tokenize(query)
        if not tokens:
            return []

        max_score = len(tokens) * self.config.keyword_weight_total
        if max_score <= 0:
            logger.warning("All keyword weights are zero; keyword search disabled")
            return []

        results = []
        for scenario in scenarios:
            matched_fields = self._score_fields(tokens, scenario)
            raw_score = sum(field.score for field in matched_fields)
            if raw_score <= 0:
                continue

            for field in matched_fields:
                field.score = field.score / max_score

            results.append(SearchResult(
                scenario=scenario,
                score=min(1.0, raw_score / max_score),
                matched_fields=matched_fields,
                match_type=MatchType.KEYWORD
            ))

        logger.debug(f"Keyword path matched {len(results)} scenarios for {len(tokens)} tokens")
        return results

    def _score_fields(self, tokens: List[str], scenario: ScenarioRecord) -> List[MatchedField]:
        tp = self.text_processor
        checks = [
            ("title", tp.matching_tokens(tokens, scenario.title), self.config.title_boost),
            ("description", tp.matching_tokens(tokens, scenario.description), self.config.description_weight),
            ("keywords", tp.matching_tokens_any(tokens, scenario.keywords), self.config.keyword_boost),
            ("variations", tp.matching_tokens_any(tokens, scenario.variations), self.config.variation_weight),
        ]

        matched_fields = []
        for field_name, matches, weight in checks:
            if matches and weight > 0:
                matched_fields.append(MatchedField(
                    field=field_name,
                    score=weight * len(matches),
                    matched_text=" ".join(matches)
                ))
        return matched_fields
