"""Marks query tokens in result text for display."""

from typing import List, Optional

from ..models.result import Highlight, SearchResult
from ..utils.text_processing import TextProcessor

_HIGHLIGHT_FIELDS = ("title", "description")


class Highlighter:
    """
    Wraps case-insensitive token occurrences in highlight markers.

    Title and description are highlighted, at most ``max_highlights``
    fields per result. All tokens are matched by a single pattern, so a
    marker is never inserted inside another marker.
    """

    def __init__(
        self,
        open_marker: str = "<mark>",
        close_marker: str = "</mark>",
        max_highlights: int = 2,
        text_processor: Optional[TextProcessor] = None
    ):
        self.open_marker = open_marker
        self.close_marker = close_marker
        self.max_highlights = max_highlights
        self.text_processor = text_processor or TextProcessor()

    def mark(self, text: str, tokens: List[str]) -> str:
        """Return ``text`` with every token occurrence wrapped."""
        pattern = self.text_processor.build_token_pattern(tokens)
        if pattern is None or not text:
            return text
        return pattern.sub(lambda m: f"{self.open_marker}{m.group(0)}{self.close_marker}", text)

    def highlight(self, result: SearchResult, query: str) -> List[Highlight]:
        """
        Build highlights for one result.

        When neither title nor description contains a token, the first
        matched field is highlighted instead so keyword-only matches still
        show why they were returned.
        """
        tokens = self.text_processor.tokenize(query)
        if not tokens:
            return []

        highlights: List[Highlight] = []
        for field_name in _HIGHLIGHT_FIELDS:
            original = getattr(result.scenario, field_name)
            if not original:
                continue
            marked = self.mark(original, tokens)
            if marked != original:
                highlights.append(Highlight(field=field_name, text=marked, original_text=original))
            if len(highlights) >= self.max_highlights:
                break

        if not highlights and result.matched_fields:
            first = result.matched_fields[0]
            original = self._field_text(result, first.field) or first.matched_text
            marked = self.mark(original, tokens)
            if marked != original:
                highlights.append(Highlight(field=first.field, text=marked, original_text=original))

        return highlights

    def apply(self, results: List[SearchResult], query: str) -> List[SearchResult]:
        """Attach highlights to each result in place and return the list."""
        for result in results:
            result.highlights = self.highlight(result, query)
        return results

    def _field_text(self, result: SearchResult, field_name: str) -> str:
        scenario = result.scenario
        if field_name == "keywords":
            return ", ".join(scenario.sorted_keywords())
        if field_name == "variations":
            return " | ".join(scenario.variations)
        value = getattr(scenario, field_name, None)
        return value if isinstance(value, str) else ""
