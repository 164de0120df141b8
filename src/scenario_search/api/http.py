"""
REST API over the scenario search service.

Exposes search, autocomplete, category listing, interaction tracking and
metrics as JSON endpoints with OpenAPI documentation.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, List, Optional

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..core.exceptions import ContentUnavailableError, ValidationError
from ..models.query import QueryModel
from .service import ScenarioSearchService

logger = logging.getLogger(__name__)


class AutocompleteRequestModel(BaseModel):
    text: str = Field(..., max_length=200, description="Partial query text")
    limit: Optional[int] = Field(None, ge=1, le=50, description="Maximum suggestions")
    types: Optional[List[str]] = Field(None, description="Suggestion sources; unknown names are ignored")
    category: Optional[str] = Field(None, description="Restrict to one category")


class InteractionModel(BaseModel):
    query: str = Field(..., min_length=1, description="Query the result was shown for")
    scenario_id: str = Field(..., min_length=1, description="Scenario the user acted on")
    kind: str = Field("click", description="Interaction kind (click, view, share)")


def create_app(
    service_factory: Callable[[], ScenarioSearchService],
    build_index: bool = True
) -> FastAPI:
    """
    Build the API application.

    Args:
        service_factory: Returns an uninitialized service; it is initialized
            on startup and closed on shutdown
        build_index: Whether to embed every scenario on startup

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service = service_factory()
        await service.initialize(build_index=build_index)
        app.state.search_service = service
        logger.info("Search service initialized successfully")
        try:
            yield
        finally:
            await service.close()
            logger.info("Search service closed")

    app = FastAPI(
        title="Scenario Search API",
        description="Hybrid relevance search over problem scenarios",
        version="1.0.0",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def get_service() -> ScenarioSearchService:
        service = getattr(app.state, "search_service", None)
        if service is None:
            raise HTTPException(status_code=503, detail="Search service not initialized")
        return service

    @app.get("/health", summary="Health Check")
    async def health_check() -> Dict[str, Any]:
        return await get_service().health_check()

    @app.get("/metrics", summary="Get Metrics")
    async def get_metrics() -> Dict[str, Any]:
        return await get_service().get_metrics()

    @app.post("/search", summary="Search Scenarios")
    async def search(request: QueryModel) -> Dict[str, Any]:
        """Search for scenarios matching the query."""
        try:
            response = await get_service().search(request.to_query())
            return response.to_dict()
        except ValidationError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except ContentUnavailableError as e:
            logger.error(f"Search failed: {e}")
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    @app.post("/autocomplete", summary="Autocomplete Query")
    async def autocomplete(request: AutocompleteRequestModel) -> Dict[str, Any]:
        response = await get_service().autocomplete(
            request.text,
            limit=request.limit,
            types=request.types,
            category=request.category
        )
        return response.to_dict()

    @app.get("/categories", summary="List Categories")
    async def get_categories() -> Dict[str, Any]:
        try:
            return {"categories": await get_service().get_categories()}
        except ContentUnavailableError as e:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    @app.get("/categories/{category}", summary="Scenarios In Category")
    async def get_by_category(category: str) -> Dict[str, Any]:
        try:
            scenarios = await get_service().get_by_category(category)
        except ContentUnavailableError as e:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
        return {"category": category, "scenarios": [s.to_dict() for s in scenarios]}

    @app.post("/interactions", summary="Record Interaction", status_code=status.HTTP_202_ACCEPTED)
    async def record_interaction(interaction: InteractionModel) -> Dict[str, str]:
        get_service().record_interaction(interaction.query, interaction.scenario_id, interaction.kind)
        return {"status": "recorded"}

    @app.delete("/cache", summary="Clear Result Cache")
    async def clear_cache() -> Dict[str, str]:
        get_service().clear_cache()
        return {"status": "cleared"}

    return app
