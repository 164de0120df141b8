"""Input validation utilities."""

from typing import List

from ..models.scenario import ScenarioRecord, Severity
from ..models.query import SearchQuery, Pagination, SearchFilters
from ..core.exceptions import ValidationError


def validate_query(query: SearchQuery, max_length: int = 200) -> str:
    """
    Validate a search query before it enters the pipeline.

    Args:
        query: Query to validate
        max_length: Maximum trimmed text length

    Returns:
        The trimmed query text

    Raises:
        ValidationError: If the query is malformed
    """
    if not isinstance(query, SearchQuery):
        raise ValidationError("Invalid query type")

    if query.text is None:
        raise ValidationError("Search query is required")

    text = query.text.strip()
    if not text:
        raise ValidationError("Search query cannot be empty")

    if len(text) > max_length:
        raise ValidationError(f"Search query must not exceed {max_length} characters")

    if query.pagination is not None:
        validate_pagination(query.pagination)

    if query.filters is not None:
        validate_filters(query.filters)

    return text


def validate_pagination(pagination: Pagination) -> None:
    """
    Validate page selection.

    Raises:
        ValidationError: If page or page size is below 1
    """
    if not isinstance(pagination.page, int) or pagination.page < 1:
        raise ValidationError("Page must be a positive integer")
    if not isinstance(pagination.page_size, int) or pagination.page_size < 1:
        raise ValidationError("Page size must be a positive integer")


def validate_filters(filters: SearchFilters) -> None:
    """
    Validate filter values.

    Raises:
        ValidationError: If a filter value is malformed
    """
    if filters.categories:
        for category in filters.categories:
            if not category or not category.strip():
                raise ValidationError("Empty category in filter")

    if filters.severities:
        for severity in filters.severities:
            if not isinstance(severity, Severity):
                raise ValidationError(f"Invalid severity in filter: {severity}")


def validate_scenario(scenario: ScenarioRecord) -> None:
    """
    Validate scenario object.

    Raises:
        ValidationError: If scenario is invalid
    """
    try:
        if not isinstance(scenario, ScenarioRecord):
            raise ValidationError("Invalid scenario type")

        if not scenario.id or not scenario.id.strip():
            raise ValidationError("Scenario ID is required")

        if not scenario.title or not scenario.title.strip():
            raise ValidationError("Scenario title is required")

        if not isinstance(scenario.severity, Severity):
            raise ValidationError(f"Invalid severity: {scenario.severity}")

    except Exception as e:
        if isinstance(e, ValidationError):
            raise
        raise ValidationError(f"Scenario validation failed: {str(e)}")


def validate_scenarios_batch(scenarios: List[ScenarioRecord]) -> None:
    """
    Validate a batch of scenarios.

    Raises:
        ValidationError: If any scenario is invalid or IDs repeat
    """
    scenario_ids = set()
    for scenario in scenarios:
        validate_scenario(scenario)

        if scenario.id in scenario_ids:
            raise ValidationError(f"Duplicate scenario ID found: {scenario.id}")
        scenario_ids.add(scenario.id)
