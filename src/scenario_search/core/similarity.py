"""Cosine similarity and top-K selection."""

from typing import Iterable, List, Sequence, Tuple, Union

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as pairwise_cosine

from .exceptions import DimensionMismatchError

VectorLike = Union[np.ndarray, Sequence[float]]


def cosine_similarity(a: VectorLike, b: VectorLike) -> float:
    """
    Cosine similarity of two equal-length vectors.

    Returns 0.0 when either vector has zero magnitude.

    Raises:
        DimensionMismatchError: If the vectors differ in length
    """
    a = np.asarray(a, dtype=np.float64).ravel()
    b = np.asarray(b, dtype=np.float64).ravel()
    if a.shape[0] != b.shape[0]:
        raise DimensionMismatchError(a.shape[0], b.shape[0])

    norm_a = float(np.linalg.norm(a))
    norm_b = float(np.linalg.norm(b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    return float(np.dot(a, b) / (norm_a * norm_b))


def find_most_similar(
    query: VectorLike,
    candidates: Iterable[Tuple[str, VectorLike]],
    limit: int
) -> List[Tuple[str, float]]:
    """
    Rank candidates by similarity to the query.

    All candidates are scored in one pairwise pass. Candidates with zero
    magnitude, or holding NaN or infinite values, score 0.0.

    Args:
        query: Query vector
        candidates: (id, vector) pairs in insertion order
        limit: Maximum number of pairs to return

    Returns:
        (id, similarity) pairs, most similar first; equal similarities keep
        their insertion order

    Raises:
        DimensionMismatchError: If any candidate differs in length from the query
    """
    if limit <= 0:
        return []

    query_vector = np.asarray(query, dtype=np.float64).ravel()
    ids = []
    rows = []
    for candidate_id, vector in candidates:
        row = np.asarray(vector, dtype=np.float64).ravel()
        if row.shape[0] != query_vector.shape[0]:
            raise DimensionMismatchError(query_vector.shape[0], row.shape[0])
        ids.append(candidate_id)
        rows.append(row)

    if not ids:
        return []

    matrix = np.vstack(rows)
    similarities = np.zeros(len(ids), dtype=np.float64)
    finite = np.all(np.isfinite(matrix), axis=1)
    if np.all(np.isfinite(query_vector)) and finite.any():
        similarities[finite] = pairwise_cosine(query_vector.reshape(1, -1), matrix[finite]).ravel()

    # stable sort keeps ties in insertion order
    order = np.argsort(-similarities, kind="stable")[:limit]
    return [(ids[i], float(similarities[i])) for i in order]
