"""Content provider contract and an in-memory implementation."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Union

from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import ValidationError
from ..models.scenario import ScenarioModel, ScenarioRecord
from ..utils.validators import validate_scenarios_batch

logger = logging.getLogger(__name__)


class ContentProvider(ABC):
    """Source of scenario records consumed by the search core."""

    @abstractmethod
    def get_all_scenarios(self) -> List[ScenarioRecord]:
        """Return every scenario in catalog order."""

    def get_by_category(self, category: str) -> List[ScenarioRecord]:
        """Return scenarios of one category (case-insensitive)."""
        wanted = category.strip().lower()
        return [s for s in self.get_all_scenarios() if s.category.strip().lower() == wanted]

    def get_categories(self) -> Dict[str, int]:
        """Scenario count per category, in first-seen order."""
        counts: Dict[str, int] = {}
        for scenario in self.get_all_scenarios():
            counts[scenario.category] = counts.get(scenario.category, 0) + 1
        return counts


class InMemoryContentProvider(ContentProvider):
    """
    Content provider over a list held in memory.

    Accepts ScenarioRecord objects or plain mappings, which are validated
    through ScenarioModel.
    """

    def __init__(self, scenarios: Iterable[Union[ScenarioRecord, Mapping[str, Any]]] = ()):
        self._lock = threading.Lock()
        self._scenarios: List[ScenarioRecord] = []
        self.replace(scenarios)

    def replace(self, scenarios: Iterable[Union[ScenarioRecord, Mapping[str, Any]]]) -> None:
        """
        Swap the whole scenario set.

        Raises:
            ValidationError: If a scenario is invalid or IDs repeat
        """
        records = [self._to_record(s) for s in scenarios]
        validate_scenarios_batch(records)
        with self._lock:
            self._scenarios = records
        logger.info(f"Loaded {len(records)} scenarios into memory")

    def get_all_scenarios(self) -> List[ScenarioRecord]:
        with self._lock:
            return list(self._scenarios)

    def __len__(self) -> int:
        with self._lock:
            return len(self._scenarios)

    @staticmethod
    def _to_record(item: Union[ScenarioRecord, Mapping[str, Any]]) -> ScenarioRecord:
        if isinstance(item, ScenarioRecord):
            return item
        try:
            return ScenarioModel(**dict(item)).to_scenario()
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid scenario {item.get('id')!r}: {e}") from e
