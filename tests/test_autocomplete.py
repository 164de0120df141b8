"""Test autocomplete suggestion ranking."""

import pytest

from scenario_search.config import SearchConfig
from scenario_search.core.autocomplete import AutocompleteEngine
from scenario_search.models.autocomplete import AutocompleteRequest, SuggestionType


class TestAutocompleteEngine:
    """Test suggestion sources, scoring and de-duplication."""

    @pytest.fixture
    def autocompleter(self):
        return AutocompleteEngine(SearchConfig())

    def test_short_text_yields_nothing(self, autocompleter, sample_scenarios):
        assert autocompleter.suggest(AutocompleteRequest(text="s"), sample_scenarios) == []
        assert autocompleter.suggest(AutocompleteRequest(text=" s "), sample_scenarios) == []

    def test_non_positive_limit(self, autocompleter, sample_scenarios):
        assert autocompleter.suggest(AutocompleteRequest(text="sal", limit=0), sample_scenarios) == []

    def test_blended_ranking(self, autocompleter, sample_scenarios):
        """Test that prefix and word-start bonuses order the sources."""
        suggestions = autocompleter.suggest(AutocompleteRequest(text="sal"), sample_scenarios)

        assert [(s.text, s.type) for s in suggestions] == [
            ("salary", SuggestionType.KEYWORD),
            ("salary not paid", SuggestionType.COMMON_PHRASE),
            ("Employer Not Paying Salary or Wages", SuggestionType.SCENARIO_TITLE),
        ]
        assert suggestions[0].score == pytest.approx(0.97)
        assert suggestions[2].category == "employment"

    def test_mid_word_match_scores_lower(self, autocompleter, sample_scenarios):
        suggestions = autocompleter.suggest(
            AutocompleteRequest(text="ary", types=[SuggestionType.KEYWORD]),
            sample_scenarios
        )

        assert [s.text for s in suggestions] == ["salary"]
        assert suggestions[0].score == pytest.approx(0.52)

    def test_scores_capped_at_one(self, autocompleter, sample_scenarios):
        suggestions = autocompleter.suggest(AutocompleteRequest(text="emp"), sample_scenarios)

        assert suggestions
        assert all(0.0 < s.score <= 1.0 for s in suggestions)

    def test_category_counts(self, autocompleter, sample_scenarios):
        suggestions = autocompleter.suggest(
            AutocompleteRequest(text="hous", types=[SuggestionType.CATEGORY]),
            sample_scenarios
        )

        assert len(suggestions) == 1
        assert suggestions[0].text == "housing"
        assert suggestions[0].match_count == 2

    def test_popular_queries_become_phrases(self, autocompleter, sample_scenarios):
        suggestions = autocompleter.suggest(
            AutocompleteRequest(text="salary d", types=[SuggestionType.COMMON_PHRASE]),
            sample_scenarios,
            popular_queries=[("salary delayed", 3)]
        )

        assert [s.text for s in suggestions] == ["salary delayed"]
        assert suggestions[0].match_count == 3

    def test_duplicates_keep_best_score(self, autocompleter, sample_scenarios):
        """Test that the same text from two sources appears once."""
        suggestions = autocompleter.suggest(
            AutocompleteRequest(text="salary"),
            sample_scenarios,
            popular_queries=[("Salary", 5)]
        )

        salary = [s for s in suggestions if s.text.lower() == "salary"]
        assert len(salary) == 1
        assert salary[0].type == SuggestionType.COMMON_PHRASE
        assert salary[0].score == pytest.approx(1.0)

    def test_category_scope(self, autocompleter, sample_scenarios):
        """Test that titles and keywords are restricted to the requested category."""
        suggestions = autocompleter.suggest(
            AutocompleteRequest(text="re", category="Consumer", types=[
                SuggestionType.SCENARIO_TITLE, SuggestionType.KEYWORD
            ]),
            sample_scenarios
        )

        assert {s.text for s in suggestions} == {"Defective Product Refund Refused", "refund"}

    def test_limit(self, sample_scenarios):
        autocompleter = AutocompleteEngine(SearchConfig(autocomplete_limit=2))

        suggestions = autocompleter.suggest(AutocompleteRequest(text="la"), sample_scenarios)

        assert len(suggestions) == 2
