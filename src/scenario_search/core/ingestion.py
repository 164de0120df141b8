"""Normalization of externally supplied embeddings."""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import numpy as np

from ..models.embedding import EmbeddingRecord, SourceField

logger = logging.getLogger(__name__)

RawEmbeddings = Union[
    Iterable[Union[EmbeddingRecord, Mapping[str, Any]]],
    Mapping[str, Mapping[str, Any]],
]

_SCENARIO_ID_KEYS = ("scenarioId", "scenario_id")
_SOURCE_KEYS = ("sourceField", "source_field", "source")
_GENERATED_AT_KEYS = ("generatedAt", "generated_at", "createdAt", "created_at")


def fit_dimension(vector: Any, dimension: int) -> np.ndarray:
    """
    Zero-pad or truncate a vector to exactly ``dimension`` entries.

    Args:
        vector: Sequence of numbers
        dimension: Target length

    Returns:
        New float64 array of length ``dimension``
    """
    values = np.asarray(vector, dtype=np.float64).ravel()
    if values.shape[0] == dimension:
        return values.copy()
    if values.shape[0] > dimension:
        return values[:dimension].copy()
    padded = np.zeros(dimension, dtype=np.float64)
    padded[:values.shape[0]] = values
    return padded


def parse_source_field(value: Any) -> SourceField:
    """Map a source field name onto SourceField; unknown names become combined."""
    if isinstance(value, SourceField):
        return value
    try:
        return SourceField(str(value).strip().lower())
    except ValueError:
        logger.debug(f"Unknown embedding source field {value!r}, treating as combined")
        return SourceField.COMBINED


def normalize_embeddings(raw: RawEmbeddings, dimension: int) -> List[EmbeddingRecord]:
    """
    Convert either accepted embedding shape into EmbeddingRecords.

    Accepted shapes:
        - a flat list of ``{scenarioId, vector, sourceField}`` mappings or
          EmbeddingRecord objects
        - a nested mapping ``{scenario_id: {source_field: vector}}``

    Every vector is padded or truncated to ``dimension``. Malformed entries
    are logged and skipped.

    Args:
        raw: Embeddings in either shape
        dimension: Vectorizer dimension

    Returns:
        Records in input order
    """
    if raw is None:
        return []

    if isinstance(raw, Mapping):
        return _normalize_nested(raw, dimension)
    return _normalize_flat(raw, dimension)


def _normalize_nested(raw: Mapping[str, Mapping[str, Any]], dimension: int) -> List[EmbeddingRecord]:
    records = []
    for scenario_id, by_field in raw.items():
        if not isinstance(by_field, Mapping):
            logger.warning(f"Skipping embeddings for {scenario_id}: expected field mapping")
            continue
        for source, vector in by_field.items():
            record = _build_record(scenario_id, source, vector, None, dimension)
            if record is not None:
                records.append(record)
    return records


def _normalize_flat(raw: Iterable[Any], dimension: int) -> List[EmbeddingRecord]:
    records = []
    for i, item in enumerate(raw):
        if isinstance(item, EmbeddingRecord):
            record = _build_record(item.scenario_id, item.source_field, item.vector, item.generated_at, dimension)
        elif isinstance(item, Mapping):
            scenario_id = _first_present(item, _SCENARIO_ID_KEYS)
            source = _first_present(item, _SOURCE_KEYS) or SourceField.COMBINED
            generated_at = _first_present(item, _GENERATED_AT_KEYS)
            record = _build_record(scenario_id, source, item.get("vector"), generated_at, dimension)
        else:
            logger.warning(f"Skipping embedding at position {i}: unsupported type {type(item).__name__}")
            continue

        if record is not None:
            records.append(record)
    return records


def _build_record(
    scenario_id: Any,
    source: Any,
    vector: Any,
    generated_at: Any,
    dimension: int
) -> Optional[EmbeddingRecord]:
    if not scenario_id or vector is None:
        logger.warning(f"Skipping embedding without scenario id or vector (scenario={scenario_id!r})")
        return None

    try:
        fitted = fit_dimension(vector, dimension)
    except (TypeError, ValueError) as e:
        logger.warning(f"Skipping embedding for {scenario_id}: {str(e)}")
        return None

    if not np.all(np.isfinite(fitted)):
        logger.warning(f"Skipping embedding for {scenario_id}: vector contains NaN or infinite values")
        return None

    original_length = int(np.asarray(vector, dtype=object).size)
    if original_length != dimension:
        logger.debug(f"Resized embedding for {scenario_id} from {original_length} to {dimension}")

    kwargs: Dict[str, Any] = {}
    parsed_at = _parse_timestamp(generated_at)
    if parsed_at is not None:
        kwargs["generated_at"] = parsed_at

    return EmbeddingRecord(
        scenario_id=str(scenario_id),
        source_field=parse_source_field(source),
        vector=fitted,
        **kwargs
    )


def _first_present(item: Mapping[str, Any], keys) -> Any:
    for key in keys:
        if item.get(key) is not None:
            return item[key]
    return None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
