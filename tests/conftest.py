"""Pytest configuration and shared fixtures."""

import time
import pytest
from typing import List

import numpy as np

from scenario_search.config import SearchConfig
from scenario_search.content.provider import ContentProvider, InMemoryContentProvider
from scenario_search.core.embeddings import Vectorizer
from scenario_search.core.engine import ScenarioSearchEngine
from scenario_search.models.scenario import ScenarioRecord, Severity

VOCABULARY = [
    "salary", "paid", "wages", "employer", "work", "harassment",
    "landlord", "deposit", "rent", "refund", "product", "defective",
    "police", "complaint",
]


class BagOfWordsVectorizer(Vectorizer):
    """Marks which vocabulary words occur in the text; counts backend calls."""

    def __init__(self, vocabulary: List[str] = None, batch_size: int = 32):
        super().__init__(batch_size=batch_size)
        self.vocabulary = vocabulary or VOCABULARY
        self.calls = 0

    def dimension(self) -> int:
        return len(self.vocabulary)

    def _encode(self, texts: List[str]) -> np.ndarray:
        self.calls += 1
        return np.array([
            [1.0 if word in text.lower() else 0.0 for word in self.vocabulary]
            for text in texts
        ])


class FailingVectorizer(Vectorizer):
    """Vectorizer whose backend is always down."""

    def __init__(self):
        super().__init__()
        self.calls = 0

    def dimension(self) -> int:
        return len(VOCABULARY)

    def _encode(self, texts: List[str]) -> np.ndarray:
        self.calls += 1
        raise RuntimeError("model offline")


class BrokenProvider(ContentProvider):
    """Content provider that cannot reach its store."""

    def get_all_scenarios(self) -> List[ScenarioRecord]:
        raise OSError("scenario store unreachable")


class SlowProvider(InMemoryContentProvider):
    """Content provider that answers after a delay."""

    def __init__(self, scenarios, delay: float):
        super().__init__(scenarios)
        self.delay = delay

    def get_all_scenarios(self) -> List[ScenarioRecord]:
        time.sleep(self.delay)
        return super().get_all_scenarios()


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def sample_scenarios() -> List[ScenarioRecord]:
    """Create a small scenario catalog spanning three categories."""
    return [
        ScenarioRecord(
            id="emp_salary",
            title="Employer Not Paying Salary or Wages",
            description="Your employer has not paid your salary or wages for work already done.",
            category="employment",
            severity=Severity.HIGH,
            keywords=frozenset({"salary", "wages", "unpaid"}),
            variations=("salary not paid", "boss not giving pay"),
            validated=True,
            urgent=True
        ),
        ScenarioRecord(
            id="emp_harassment",
            title="Workplace Harassment",
            description="Harassment by a colleague or manager at work.",
            category="employment",
            severity=Severity.MEDIUM,
            keywords=frozenset({"harassment", "workplace"}),
            validated=True
        ),
        ScenarioRecord(
            id="housing_deposit",
            title="Landlord Not Returning Security Deposit",
            description="The landlord keeps the deposit after you moved out of the rented home.",
            category="housing",
            severity=Severity.MEDIUM,
            keywords=frozenset({"deposit", "landlord", "rent"})
        ),
        ScenarioRecord(
            id="housing_eviction",
            title="Landlord Eviction Without Notice",
            description="The landlord is forcing you out of the rented home without a notice period.",
            category="housing",
            severity=Severity.HIGH,
            keywords=frozenset({"eviction", "landlord"}),
            urgent=True
        ),
        ScenarioRecord(
            id="consumer_refund",
            title="Defective Product Refund Refused",
            description="A shop refuses to refund or replace a defective product.",
            category="consumer",
            severity=Severity.LOW,
            keywords=frozenset({"refund", "defective", "product"}),
            validated=True
        ),
    ]


@pytest.fixture
def provider(sample_scenarios) -> InMemoryContentProvider:
    return InMemoryContentProvider(sample_scenarios)


@pytest.fixture
def vectorizer() -> BagOfWordsVectorizer:
    return BagOfWordsVectorizer()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def search_config() -> SearchConfig:
    """Configuration with a short provider timeout for tests."""
    return SearchConfig(content_timeout_seconds=2.0, max_workers=2)


@pytest.fixture
async def engine(provider, vectorizer, search_config):
    """Create an indexed search engine over the sample catalog."""
    engine = ScenarioSearchEngine(
        content_provider=provider,
        vectorizer=vectorizer,
        config=search_config
    )
    await engine.index_scenarios()
    yield engine
    await engine.close()


@pytest.fixture
async def unindexed_engine(provider, vectorizer, search_config):
    """Create a search engine without any embeddings."""
    engine = ScenarioSearchEngine(
        content_provider=provider,
        vectorizer=vectorizer,
        config=search_config
    )
    yield engine
    await engine.close()
