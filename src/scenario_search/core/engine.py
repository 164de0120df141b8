"""Hybrid scenario search engine."""

import asyncio
import dataclasses
import logging
import threading
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple
from concurrent.futures import ThreadPoolExecutor

from ..config import SearchConfig
from ..content.provider import ContentProvider
from ..models.autocomplete import AutocompleteRequest, AutocompleteResponse
from ..models.embedding import EmbeddingRecord, SourceField
from ..models.query import SearchQuery
from ..models.result import (
    Algorithm,
    MatchedField,
    MatchType,
    QuerySuggestion,
    SearchMetadata,
    SearchResponse,
    SearchResult,
)
from ..models.scenario import ScenarioRecord
from ..utils.logging_config import StructuredLogger
from ..utils.text_processing import TextProcessor
from ..utils.validators import validate_query
from .analytics import AnalyticsRecorder
from .autocomplete import AutocompleteEngine
from .cache import ResultCache
from .embeddings import HashingTextVectorizer, Vectorizer
from .exceptions import (
    ContentUnavailableError,
    DimensionMismatchError,
    EmptyInputError,
    VectorizerUnavailableError,
)
from .highlighter import Highlighter
from .ingestion import RawEmbeddings, normalize_embeddings
from .keyword_matcher import KeywordMatcher
from .ranking import FilterRanker, matches_filters
from .similarity import find_most_similar

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5


class SearchState(str, Enum):
    """Stages a search call passes through."""
    IDLE = "idle"
    VALIDATING = "validating"
    CACHE_CHECK = "cache_check"
    SEMANTIC_ATTEMPT = "semantic_attempt"
    SUCCESS = "success"
    FALLBACK_KEYWORD = "fallback_keyword"
    FILTER_RANK = "filter_rank"
    HIGHLIGHT = "highlight"
    CACHE_STORE = "cache_store"
    ANALYTICS_UPDATE = "analytics_update"
    DONE = "done"


@dataclasses.dataclass(frozen=True)
class StrategyOutcome:
    """
    Result of one retrieval strategy.

    A strategy either produced candidates (``fallback_reason`` is None) or
    signals that the caller should switch to the keyword path.

    Attributes:
        results: Unfiltered candidates, possibly several per scenario
        algorithm: Algorithm that produced the candidates
        attempted: Whether at least one embedding was compared
        fallback_reason: Why the strategy could not run, if it could not
    """
    results: Tuple[SearchResult, ...] = ()
    algorithm: Algorithm = Algorithm.SEMANTIC
    attempted: bool = False
    fallback_reason: Optional[str] = None

    @property
    def needs_fallback(self) -> bool:
        return self.fallback_reason is not None

    @classmethod
    def ok(cls, results: Sequence[SearchResult], attempted: bool) -> "StrategyOutcome":
        return cls(results=tuple(results), algorithm=Algorithm.SEMANTIC, attempted=attempted)

    @classmethod
    def fallback(cls, reason: str) -> "StrategyOutcome":
        return cls(algorithm=Algorithm.KEYWORD, fallback_reason=reason)


def resolve_algorithm(semantic: StrategyOutcome, semantic_ranked: bool, keyword_found: bool) -> Algorithm:
    """
    Label a response with the algorithm that produced it.

    Args:
        semantic: Outcome of the semantic attempt
        semantic_ranked: Whether semantic candidates survived filtering
        keyword_found: Whether the keyword path contributed results
    """
    if semantic.needs_fallback:
        return Algorithm.KEYWORD
    if semantic_ranked:
        return Algorithm.SEMANTIC
    if keyword_found:
        return Algorithm.HYBRID if semantic.attempted else Algorithm.KEYWORD
    return Algorithm.SEMANTIC if semantic.attempted else Algorithm.KEYWORD


class ScenarioSearchEngine:
    """
    Hybrid relevance search over a scenario catalog.

    A search validates the query, consults the result cache, tries the
    semantic path (query embedding vs. scenario embeddings), falls back to
    keyword scoring when the semantic path cannot run or finds nothing,
    filters and ranks, optionally highlights, caches and records analytics.
    Recoverable failures degrade to the keyword path; only malformed
    queries and an unavailable content provider reach the caller.
    """

    def __init__(
        self,
        content_provider: ContentProvider,
        vectorizer: Optional[Vectorizer] = None,
        config: Optional[SearchConfig] = None,
        cache: Optional[ResultCache] = None,
        analytics: Optional[AnalyticsRecorder] = None,
        executor: Optional[ThreadPoolExecutor] = None
    ):
        """
        Initialize scenario search engine.

        Args:
            content_provider: Source of scenario records
            vectorizer: Text vectorizer (default: hashing vectorizer)
            config: Search configuration
            cache: Result cache (default: built from config when enabled)
            analytics: Analytics recorder (default: new recorder)
            executor: Thread pool for CPU-bound and provider work
        """
        self.config = config or SearchConfig()
        self.content_provider = content_provider

        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(max_workers=self.config.max_workers)

        self.vectorizer = vectorizer or HashingTextVectorizer(
            dimension=self.config.embedding_dimension,
            batch_size=self.config.embedding_batch_size,
            executor=self.executor
        )

        if cache is None and self.config.cache_enabled:
            cache = ResultCache(
                ttl_seconds=self.config.cache_ttl_seconds,
                max_entries=self.config.cache_max_entries,
                low_water_mark=self.config.cache_low_water_mark,
                default_page_size=self.config.default_page_size
            )
        self.cache = cache
        self.analytics = analytics or AnalyticsRecorder()

        self.text_processor = TextProcessor()
        self.keyword_matcher = KeywordMatcher(self.config, self.text_processor)
        self.ranker = FilterRanker()
        self.highlighter = Highlighter(
            open_marker=self.config.highlight_open,
            close_marker=self.config.highlight_close,
            max_highlights=self.config.max_highlights,
            text_processor=self.text_processor
        )
        self.autocompleter = AutocompleteEngine(self.config, self.text_processor)

        self._embeddings: Dict[str, List[EmbeddingRecord]] = {}
        self._embeddings_lock = threading.Lock()
        self._log = StructuredLogger(__name__)

        logger.info("Scenario search engine initialized")

    # ------------------------------------------------------------------
    # Embedding management
    # ------------------------------------------------------------------

    def load_embeddings(self, raw: RawEmbeddings, replace: bool = True) -> int:
        """
        Ingest embeddings in either accepted shape.

        Vectors are padded or truncated to the vectorizer dimension. Cached
        responses are dropped because rankings may change.

        Args:
            raw: Flat record list or nested scenario -> field -> vector mapping
            replace: Whether to discard previously loaded embeddings

        Returns:
            Number of records ingested
        """
        records = normalize_embeddings(raw, self.vectorizer.dimension())
        self._store_embeddings(records, replace)
        logger.info(f"Loaded {len(records)} embeddings")
        return len(records)

    async def index_scenarios(
        self,
        fields: Sequence[SourceField] = (
            SourceField.TITLE,
            SourceField.DESCRIPTION,
            SourceField.COMBINED,
            SourceField.KEYWORDS,
        )
    ) -> int:
        """
        Generate embeddings for every provider scenario.

        Blank source texts are skipped. Existing embeddings are replaced.

        Returns:
            Number of embeddings generated

        Raises:
            ContentUnavailableError: If the provider fails
            VectorizerUnavailableError: If the vectorizer fails
        """
        scenarios = await self._load_scenarios()
        targets: List[Tuple[str, SourceField]] = []
        texts: List[str] = []
        for scenario in scenarios:
            for source_field in fields:
                text = source_text(scenario, source_field)
                if text.strip():
                    targets.append((scenario.id, source_field))
                    texts.append(text)

        vectors = await self.vectorizer.aembed_batch(texts)
        records = [
            EmbeddingRecord(scenario_id=scenario_id, source_field=source_field, vector=vector)
            for (scenario_id, source_field), vector in zip(targets, vectors)
        ]
        self._store_embeddings(records, replace=True)
        logger.info(f"Indexed {len(records)} embeddings for {len(scenarios)} scenarios")
        return len(records)

    def embedding_count(self) -> int:
        with self._embeddings_lock:
            return sum(len(records) for records in self._embeddings.values())

    def _store_embeddings(self, records: List[EmbeddingRecord], replace: bool) -> None:
        with self._embeddings_lock:
            grouped: Dict[str, List[EmbeddingRecord]] = {} if replace else {
                k: list(v) for k, v in self._embeddings.items()
            }
            for record in records:
                grouped.setdefault(record.scenario_id, []).append(record)
            self._embeddings = grouped
        if self.cache is not None:
            self.cache.clear()

    def _embedding_snapshot(self) -> Dict[str, List[EmbeddingRecord]]:
        with self._embeddings_lock:
            return self._embeddings

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(self, query: SearchQuery) -> SearchResponse:
        """
        Search for scenarios matching the query.

        Args:
            query: Search query with filters and pagination

        Returns:
            Response with ranked results; zero results is a normal outcome

        Raises:
            ValidationError: If the query text is empty or too long, or
                pagination is invalid
            ContentUnavailableError: If the content provider fails or times out
        """
        loop = asyncio.get_running_loop()
        start_time = loop.time()
        self._transition(self._log, SearchState.VALIDATING)
        text = validate_query(query, self.config.max_query_length)
        log = self._log.with_context(query=query.normalized_text[:50])

        self._transition(log, SearchState.CACHE_CHECK)
        if self.cache is not None:
            cached = self.cache.get(query)
            if cached is not None:
                elapsed_ms = (loop.time() - start_time) * 1000
                response = dataclasses.replace(cached, elapsed_ms=elapsed_ms)
                self._transition(log, SearchState.ANALYTICS_UPDATE)
                self._record(query, response, from_cache=True)
                self._transition(log, SearchState.DONE)
                log.debug("Served from cache")
                return response

        scenarios = await self._load_scenarios()

        self._transition(log, SearchState.SEMANTIC_ATTEMPT)
        semantic = await loop.run_in_executor(self.executor, self.semantic_attempt, text, scenarios)

        if semantic.needs_fallback:
            self._transition(log, SearchState.FALLBACK_KEYWORD)
            log.warning(f"Semantic search unavailable ({semantic.fallback_reason}), using keyword search")
            candidates = await loop.run_in_executor(self.executor, self.keyword_matcher.match, text, scenarios)
        else:
            self._transition(log, SearchState.SUCCESS)
            candidates = list(semantic.results)

        self._transition(log, SearchState.FILTER_RANK)
        ranked = self.ranker.filter_and_rank(candidates, query.filters)
        semantic_ranked = not semantic.needs_fallback and bool(ranked)
        keyword_found = semantic.needs_fallback and bool(ranked)

        if not ranked and not semantic.needs_fallback:
            log.debug("Semantic search found nothing, trying keyword search")
            keyword_results = await loop.run_in_executor(
                self.executor, self.keyword_matcher.match, text, scenarios
            )
            ranked = self.ranker.filter_and_rank(keyword_results, query.filters)
            keyword_found = bool(ranked)

        algorithm = resolve_algorithm(semantic, semantic_ranked, keyword_found)
        ranked = self.ranker.apply_sort(ranked, query.sort, query.sort_direction)

        page_size = query.pagination.page_size if query.pagination else self.config.default_page_size
        offset = query.pagination.offset if query.pagination else 0
        page = ranked[offset:offset + page_size]

        if query.include_highlights:
            self._transition(log, SearchState.HIGHLIGHT)
            self.highlighter.apply(page, text)

        suggestions: List[QuerySuggestion] = []
        if query.include_suggestions and not ranked:
            suggestions = self.suggest_refinements(text, scenarios)

        metadata = SearchMetadata(
            total_scenarios=len(scenarios),
            filtered_scenarios=sum(1 for s in scenarios if matches_filters(s, query.filters)),
            used_embeddings=semantic.attempted,
            fallback_reason=semantic.fallback_reason
        )
        response = SearchResponse(
            query=query.text,
            results=page,
            total_matches=len(ranked),
            elapsed_ms=(loop.time() - start_time) * 1000,
            algorithm_used=algorithm,
            filters_echo=query.filters.to_dict() if query.filters is not None else {},
            metadata=metadata,
            suggestions=suggestions
        )

        if self.cache is not None:
            self._transition(log, SearchState.CACHE_STORE)
            self.cache.put(query, response)

        self._transition(log, SearchState.ANALYTICS_UPDATE)
        self._record(query, response, from_cache=False)
        self._transition(log, SearchState.DONE)

        log.info(
            f"{algorithm.value.upper()} search completed: "
            f"{len(page)} of {len(ranked)} results in {response.elapsed_ms:.1f}ms"
        )
        return response

    def semantic_attempt(self, text: str, scenarios: Sequence[ScenarioRecord]) -> StrategyOutcome:
        """
        Run the semantic path without raising.

        Every vectorizer or similarity failure becomes a fallback outcome.
        Candidates are produced per embedding record, so one scenario can
        appear once per source field; ties keep catalog order.
        """
        try:
            query_vector = self.vectorizer.embed(text)
        except EmptyInputError:
            return StrategyOutcome.fallback("empty_input")
        except DimensionMismatchError as e:
            logger.warning(f"Query embedding has wrong dimension: {e}")
            return StrategyOutcome.fallback("dimension_mismatch")
        except VectorizerUnavailableError as e:
            logger.warning(f"Vectorizer unavailable: {e}")
            return StrategyOutcome.fallback("vectorizer_unavailable")
        except Exception as e:
            logger.error(f"Vectorizer failed unexpectedly: {e}")
            return StrategyOutcome.fallback("vectorizer_unavailable")

        if len(query_vector) != self.vectorizer.dimension():
            return StrategyOutcome.fallback("dimension_mismatch")

        embeddings = self._embedding_snapshot()
        by_key: Dict[str, Tuple[ScenarioRecord, EmbeddingRecord]] = {}
        candidates = []
        for scenario in scenarios:
            for record in embeddings.get(scenario.id, ()):
                by_key[record.key] = (scenario, record)
                candidates.append((record.key, record.vector))

        if not candidates:
            return StrategyOutcome.ok([], attempted=False)

        try:
            ranked = find_most_similar(query_vector, candidates, limit=len(candidates))
        except DimensionMismatchError as e:
            logger.error(f"Stored embedding has wrong dimension: {e}")
            return StrategyOutcome.fallback("dimension_mismatch")

        threshold = self.config.similarity_threshold
        results = []
        for key, similarity in ranked:
            # NaN compares false both ways
            if not similarity >= threshold:
                break
            scenario, record = by_key[key]
            score = min(1.0, max(0.0, similarity))
            results.append(SearchResult(
                scenario=scenario,
                score=score,
                matched_fields=[MatchedField(
                    field=record.source_field.value,
                    score=score,
                    matched_text=source_text(scenario, record.source_field)
                )],
                match_type=MatchType.SEMANTIC
            ))
        return StrategyOutcome.ok(results, attempted=True)

    def suggest_refinements(self, text: str, scenarios: Sequence[ScenarioRecord]) -> List[QuerySuggestion]:
        """
        Propose alternative queries when a search found nothing.

        Offers a broader query (last token dropped), the categories where the
        query's tokens do occur, and popular past queries.
        """
        suggestions: List[QuerySuggestion] = []
        tokens = self.text_processor.tokenize(text)

        if len(tokens) > 1:
            broader = " ".join(tokens[:-1])
            suggestions.append(QuerySuggestion(
                query=broader,
                reason="broader_scope",
                estimated_results=len(self.keyword_matcher.match(broader, scenarios))
            ))

        category_hits: Dict[str, int] = {}
        for result in self.keyword_matcher.match(text, scenarios):
            category = result.scenario.category
            category_hits[category] = category_hits.get(category, 0) + 1
        for category, count in sorted(category_hits.items(), key=lambda item: item[1], reverse=True):
            suggestions.append(QuerySuggestion(query=category, reason="category_specific", estimated_results=count))

        normalized = " ".join(tokens)
        for popular, _ in self.analytics.top_queries(MAX_SUGGESTIONS):
            if popular != normalized:
                suggestions.append(QuerySuggestion(
                    query=popular,
                    reason="popular",
                    estimated_results=len(self.keyword_matcher.match(popular, scenarios))
                ))

        return suggestions[:MAX_SUGGESTIONS]

    # ------------------------------------------------------------------
    # Autocomplete
    # ------------------------------------------------------------------

    async def autocomplete(self, request: AutocompleteRequest) -> AutocompleteResponse:
        """
        Suggest completions for a partial query.

        Never raises: short text yields no suggestions and provider or
        internal failures are logged and yield no suggestions.
        """
        loop = asyncio.get_running_loop()
        start_time = loop.time()
        text = request.text or ""
        suggestions = []

        if len(text.strip()) >= self.config.autocomplete_min_length:
            try:
                scenarios = await self._load_scenarios()
                popular = self.analytics.top_queries(20)
                suggestions = self.autocompleter.suggest(request, scenarios, popular)
            except Exception as e:
                logger.warning(f"Autocomplete failed for '{text[:50]}': {e}")
                suggestions = []

        elapsed_ms = (loop.time() - start_time) * 1000
        if self.config.analytics_enabled:
            self.analytics.record_autocomplete(elapsed_ms)
        return AutocompleteResponse(text=text, suggestions=suggestions, elapsed_ms=elapsed_ms)

    # ------------------------------------------------------------------
    # Content access
    # ------------------------------------------------------------------

    async def _load_scenarios(self) -> List[ScenarioRecord]:
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(self.executor, self.content_provider.get_all_scenarios),
                timeout=self.config.content_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.error(f"Content provider timed out after {self.config.content_timeout_seconds}s")
            raise ContentUnavailableError(
                f"Content provider did not respond within {self.config.content_timeout_seconds}s"
            )
        except Exception as e:
            logger.error(f"Content provider failed: {str(e)}")
            raise ContentUnavailableError(f"Failed to load scenarios: {str(e)}") from e

    async def get_by_category(self, category: str) -> List[ScenarioRecord]:
        """Scenarios of one category from the content provider."""
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(self.executor, self.content_provider.get_by_category, category),
                timeout=self.config.content_timeout_seconds
            )
        except asyncio.TimeoutError:
            raise ContentUnavailableError("Content provider timed out")
        except Exception as e:
            raise ContentUnavailableError(f"Failed to load category {category}: {str(e)}") from e

    async def get_categories(self) -> Dict[str, int]:
        """Scenario count per category."""
        counts: Dict[str, int] = {}
        for scenario in await self._load_scenarios():
            counts[scenario.category] = counts.get(scenario.category, 0) + 1
        return counts

    # ------------------------------------------------------------------
    # Analytics and lifecycle
    # ------------------------------------------------------------------

    def _record(self, query: SearchQuery, response: SearchResponse, from_cache: bool) -> None:
        if not self.config.analytics_enabled:
            return
        categories = None
        if query.filters is not None and query.filters.categories:
            categories = [c.strip().lower() for c in query.filters.categories]
        self.analytics.record_search(
            query.normalized_text,
            response.elapsed_ms,
            len(response.results),
            categories=categories,
            from_cache=from_cache
        )

    def record_interaction(self, query: str, scenario_id: str, kind: str = "click") -> None:
        """Record a user interaction with a result."""
        if self.config.analytics_enabled:
            self.analytics.record_interaction(" ".join(query.split()).lower(), scenario_id, kind)

    def clear_cache(self) -> None:
        if self.cache is not None:
            self.cache.clear()

    def get_performance_metrics(self, top_n: int = 10) -> Dict[str, Any]:
        """Analytics snapshot including the cache hit rate."""
        cache_stats = self.cache.stats() if self.cache is not None else None
        return self.analytics.report(top_n=top_n, cache_stats=cache_stats)

    def get_stats(self) -> Dict[str, Any]:
        """Get engine statistics."""
        with self._embeddings_lock:
            scenarios_with_embeddings = len(self._embeddings)
        return {
            'embeddings': self.embedding_count(),
            'scenarios_with_embeddings': scenarios_with_embeddings,
            'vectorizer': self.vectorizer.get_model_info(),
            'similarity_threshold': self.config.similarity_threshold,
            'cache': self.cache.stats() if self.cache is not None else None,
            'analytics': self.get_performance_metrics(),
        }

    async def health_check(self) -> Dict[str, Any]:
        """Perform health check of the search engine."""
        loop = asyncio.get_running_loop()
        try:
            scenarios = await self._load_scenarios()
            has_embeddings = self.embedding_count() > 0
            return {
                'status': 'healthy' if scenarios else 'not_ready',
                'is_ready': bool(scenarios),
                'semantic_ready': has_embeddings,
                'total_scenarios': len(scenarios),
                'stats': self.get_stats(),
                'timestamp': loop.time()
            }
        except Exception as e:
            logger.error(f"Health check failed: {str(e)}")
            return {
                'status': 'unhealthy',
                'error': str(e),
                'timestamp': loop.time()
            }

    async def close(self) -> None:
        """Clean up resources."""
        if self._owns_executor:
            self.executor.shutdown(wait=True)
        logger.info("Scenario search engine closed")

    def _transition(self, log: StructuredLogger, state: SearchState) -> None:
        log.debug(f"search state -> {state.value}")


def source_text(scenario: ScenarioRecord, source_field: SourceField) -> str:
    """Text of the scenario field an embedding is generated from."""
    if source_field == SourceField.TITLE:
        return scenario.title
    if source_field == SourceField.DESCRIPTION:
        return scenario.description
    if source_field == SourceField.KEYWORDS:
        return " ".join(scenario.sorted_keywords())
    return f"{scenario.title} {scenario.description}".strip()
