"""Scenario data model with validation."""

from enum import Enum
from typing import Dict, Any, FrozenSet, List, Tuple
from dataclasses import dataclass, field
from pydantic import BaseModel, Field, field_validator


class Severity(str, Enum):
    """Ordered severity levels for scenarios."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Position of this level in the low -> critical ordering."""
        return _SEVERITY_ORDER.index(self)

    def __lt__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank


_SEVERITY_ORDER = [Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]


@dataclass(frozen=True)
class ScenarioRecord:
    """
    Catalogued real-world situation that the search core ranks.

    Attributes:
        id: Unique scenario identifier
        title: Human-readable title
        description: Longer description of the situation
        category: Category the scenario belongs to (employment, housing, ...)
        severity: Severity level of the situation
        keywords: Keywords used for matching
        variations: Alternate natural-language phrasings
        validated: Whether the content has been validated
        urgent: Whether the situation is time sensitive
    """
    id: str
    title: str
    description: str
    category: str
    severity: Severity = Severity.MEDIUM
    keywords: FrozenSet[str] = field(default_factory=frozenset)
    variations: Tuple[str, ...] = ()
    validated: bool = False
    urgent: bool = False

    def __post_init__(self) -> None:
        """Validate and normalize the record after initialization."""
        if not self.id or not self.id.strip():
            raise ValueError("Scenario ID cannot be empty")
        if not self.title or not self.title.strip():
            raise ValueError("Scenario title cannot be empty")
        if not self.category or not self.category.strip():
            raise ValueError("Scenario category cannot be empty")
        if not isinstance(self.severity, Severity):
            raise ValueError(f"Invalid severity: {self.severity}")
        # Frozen dataclass: normalize collections through object.__setattr__
        object.__setattr__(self, "keywords", frozenset(self.keywords))
        object.__setattr__(self, "variations", tuple(self.variations))

    def sorted_keywords(self) -> List[str]:
        """Keywords in a stable order for display and serialization."""
        return sorted(self.keywords)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "severity": self.severity.value,
            "keywords": self.sorted_keywords(),
            "variations": list(self.variations),
            "validated": self.validated,
            "urgent": self.urgent,
        }


class ScenarioModel(BaseModel):
    """Pydantic model for scenario validation at the content boundary."""

    id: str = Field(..., min_length=1, description="Unique scenario identifier")
    title: str = Field(..., min_length=1, description="Scenario title")
    description: str = Field("", description="Scenario description")
    category: str = Field(..., min_length=1, description="Scenario category")
    severity: Severity = Field(Severity.MEDIUM, description="Severity level")
    keywords: List[str] = Field(default_factory=list, description="Matching keywords")
    variations: List[str] = Field(default_factory=list, description="Alternate phrasings")
    validated: bool = Field(False, description="Content validation status")
    urgent: bool = Field(False, description="Time sensitivity flag")

    @field_validator("id", "title", "category")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Ensure identifying text fields are not just whitespace."""
        if not v.strip():
            raise ValueError("Field cannot be empty or whitespace only")
        return v.strip()

    @field_validator("keywords", "variations")
    @classmethod
    def drop_blank_entries(cls, v: List[str]) -> List[str]:
        """Remove blank keywords and variations."""
        return [item.strip() for item in v if item and item.strip()]

    def to_scenario(self) -> ScenarioRecord:
        """Convert to ScenarioRecord dataclass."""
        return ScenarioRecord(
            id=self.id,
            title=self.title,
            description=self.description,
            category=self.category,
            severity=self.severity,
            keywords=frozenset(self.keywords),
            variations=tuple(self.variations),
            validated=self.validated,
            urgent=self.urgent,
        )
