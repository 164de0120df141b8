"""Embedding record model."""

from datetime import datetime, timezone
from enum import Enum
from dataclasses import dataclass, field

import numpy as np


class SourceField(str, Enum):
    """Scenario field an embedding was generated from."""
    TITLE = "title"
    DESCRIPTION = "description"
    COMBINED = "combined"
    KEYWORDS = "keywords"


@dataclass
class EmbeddingRecord:
    """
    Vector representation of one field of a scenario.

    A scenario may own several records, one per source field. All vectors
    held by an engine share the vectorizer's dimension.

    Attributes:
        scenario_id: ID of the scenario this vector represents
        source_field: Field the vector was generated from
        vector: Fixed-length float vector
        generated_at: When the vector was produced
    """
    scenario_id: str
    source_field: SourceField
    vector: np.ndarray
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.scenario_id or not self.scenario_id.strip():
            raise ValueError("Embedding scenario ID cannot be empty")
        if not isinstance(self.source_field, SourceField):
            raise ValueError(f"Invalid source field: {self.source_field}")
        self.vector = np.asarray(self.vector, dtype=np.float64).ravel()

    @property
    def dimension(self) -> int:
        return int(self.vector.shape[0])

    @property
    def key(self) -> str:
        """Identifier of this record among all candidates."""
        return f"{self.scenario_id}-{self.source_field.value}"
