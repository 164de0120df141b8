"""High-level API service for scenario search."""

import logging
from typing import Any, AsyncContextManager, Dict, Iterable, List, Mapping, Optional, Union
from contextlib import asynccontextmanager

from ..core.engine import ScenarioSearchEngine
from ..core.embeddings import Vectorizer
from ..config import SearchConfig
from ..content.provider import ContentProvider, InMemoryContentProvider
from ..core.exceptions import ScenarioSearchError, ValidationError
from ..core.ingestion import RawEmbeddings
from ..models.autocomplete import AutocompleteRequest, AutocompleteResponse, parse_suggestion_types
from ..models.query import Pagination, SearchFilters, SearchQuery, SortDirection, SortOrder
from ..models.result import SearchResponse
from ..models.scenario import ScenarioRecord, Severity
from ..utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


class ScenarioSearchService:
    """
    High-level service interface for scenario search operations.

    Wires a content provider, vectorizer and configuration into a
    ScenarioSearchEngine and manages its lifecycle.
    """

    def __init__(
        self,
        scenarios: Optional[Iterable[Union[ScenarioRecord, Mapping[str, Any]]]] = None,
        content_provider: Optional[ContentProvider] = None,
        vectorizer: Optional[Vectorizer] = None,
        config: Optional[SearchConfig] = None,
        log_level: str = "INFO"
    ):
        """
        Initialize scenario search service.

        Args:
            scenarios: Scenario records for an in-memory provider
            content_provider: Provider to use instead of ``scenarios``
            vectorizer: Text vectorizer (default: hashing vectorizer)
            config: Search configuration
            log_level: Logging level
        """
        setup_logging(level=log_level)

        if content_provider is None:
            content_provider = InMemoryContentProvider(scenarios or ())
        elif scenarios is not None:
            raise ScenarioSearchError("Pass either scenarios or a content provider, not both")

        self.config = config or SearchConfig()
        self.engine = ScenarioSearchEngine(
            content_provider=content_provider,
            vectorizer=vectorizer,
            config=self.config
        )

        self._initialized = False
        logger.info("Scenario search service initialized")

    async def initialize(
        self,
        build_index: bool = True,
        embeddings: Optional[RawEmbeddings] = None
    ) -> None:
        """
        Initialize the service and prepare the semantic index.

        Args:
            build_index: Whether to embed every scenario with the vectorizer
            embeddings: Precomputed embeddings to load instead
        """
        try:
            if embeddings is not None:
                self.engine.load_embeddings(embeddings)
            elif build_index:
                await self.engine.index_scenarios()

            self._initialized = True
            logger.info("Service initialization complete")

        except ScenarioSearchError as e:
            logger.error(f"Failed to initialize service: {str(e)}")
            raise ScenarioSearchError(f"Service initialization failed: {str(e)}") from e

    async def search(self, query: SearchQuery) -> SearchResponse:
        """
        Search for scenarios matching the query.

        Raises:
            ValidationError: If the query is malformed
            ContentUnavailableError: If scenarios cannot be loaded
        """
        self._check_initialized()
        response = await self.engine.search(query)
        logger.debug(f"Search returned {len(response.results)} of {response.total_matches} results")
        return response

    async def search_text(
        self,
        text: str,
        categories: Optional[List[str]] = None,
        severities: Optional[List[str]] = None,
        urgent: Optional[bool] = None,
        only_validated: bool = False,
        page: int = 1,
        page_size: Optional[int] = None,
        include_highlights: bool = True,
        include_suggestions: bool = False,
        sort: str = "relevance",
        sort_direction: str = "desc"
    ) -> SearchResponse:
        """
        Convenience method for simple text search.

        Args:
            text: Search text
            categories: Optional category filters
            severities: Optional severity filters ("low", "medium", ...)
            urgent: Optional urgency filter
            only_validated: Keep only validated scenarios
            page: 1-based page number
            page_size: Results per page (default from config)
            include_highlights: Whether to mark matched tokens
            include_suggestions: Whether to suggest refinements
            sort: Result ordering name
            sort_direction: "asc" or "desc"
        """
        try:
            filters = SearchFilters(
                categories=categories,
                severities=[Severity(s) for s in severities] if severities else None,
                urgent=urgent,
                only_validated=only_validated
            )
            pagination = Pagination(page=page, page_size=page_size or self.config.default_page_size)
            query = SearchQuery(
                text=text,
                filters=filters,
                pagination=pagination,
                include_highlights=include_highlights,
                include_suggestions=include_suggestions,
                sort=SortOrder(sort),
                sort_direction=SortDirection(sort_direction)
            )
        except ValueError as e:
            raise ValidationError(f"Invalid search parameters: {str(e)}") from e

        return await self.search(query)

    async def autocomplete(
        self,
        text: str,
        limit: Optional[int] = None,
        types: Optional[List[str]] = None,
        category: Optional[str] = None
    ) -> AutocompleteResponse:
        """Suggest completions for partial query text."""
        self._check_initialized()
        request = AutocompleteRequest(
            text=text,
            limit=limit,
            types=parse_suggestion_types(types),
            category=category
        )
        return await self.engine.autocomplete(request)

    async def get_categories(self) -> Dict[str, int]:
        self._check_initialized()
        return await self.engine.get_categories()

    async def get_by_category(self, category: str) -> List[ScenarioRecord]:
        self._check_initialized()
        return await self.engine.get_by_category(category)

    def record_interaction(self, query: str, scenario_id: str, kind: str = "click") -> None:
        self.engine.record_interaction(query, scenario_id, kind)

    def clear_cache(self) -> None:
        self.engine.clear_cache()

    async def get_metrics(self) -> Dict[str, Any]:
        """Get service and engine statistics."""
        self._check_initialized()

        return {
            'service': {
                'initialized': self._initialized,
                'config': self.config.model_dump()
            },
            'engine': self.engine.get_stats()
        }

    async def health_check(self) -> Dict[str, Any]:
        """Perform comprehensive health check."""
        if not self._initialized:
            return {
                'status': 'not_initialized',
                'message': 'Service not initialized'
            }

        return await self.engine.health_check()

    def _check_initialized(self) -> None:
        """Check if service is properly initialized."""
        if not self._initialized:
            raise ScenarioSearchError("Service not initialized. Call initialize() first.")

    async def close(self) -> None:
        """Clean up resources and close the service."""
        await self.engine.close()
        self._initialized = False
        logger.info("Service closed successfully")

    @classmethod
    @asynccontextmanager
    async def create(
        cls,
        scenarios: Optional[Iterable[Union[ScenarioRecord, Mapping[str, Any]]]] = None,
        build_index: bool = True,
        embeddings: Optional[RawEmbeddings] = None,
        **kwargs
    ) -> AsyncContextManager['ScenarioSearchService']:
        """
        Create and manage service lifecycle with context manager.

        Args:
            scenarios: Scenario records for an in-memory provider
            build_index: Whether to embed every scenario on startup
            embeddings: Precomputed embeddings to load instead
            **kwargs: Additional service configuration

        Yields:
            Initialized scenario search service
        """
        service = cls(scenarios=scenarios, **kwargs)

        try:
            await service.initialize(build_index=build_index, embeddings=embeddings)
            yield service
        finally:
            await service.close()
