"""Vectorizer adapters that turn text into fixed-length vectors."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional, Sequence, Tuple
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from sklearn.feature_extraction.text import HashingVectorizer

from .exceptions import DimensionMismatchError, EmptyInputError, VectorizerUnavailableError

logger = logging.getLogger(__name__)


class Vectorizer(ABC):
    """
    Deterministic text -> vector function with a fixed output dimension.

    Subclasses implement ``_encode`` for a list of non-blank texts; this
    base class owns input checks, dimension checks, error translation and
    batch chunking.
    """

    def __init__(self, batch_size: int = 32, executor: Optional[ThreadPoolExecutor] = None):
        if batch_size < 1:
            raise ValueError("Batch size must be positive")
        self.batch_size = batch_size
        self._executor = executor

    @abstractmethod
    def dimension(self) -> int:
        """Length of every vector this vectorizer produces."""

    @abstractmethod
    def _encode(self, texts: List[str]) -> np.ndarray:
        """Encode texts into a (len(texts), dimension) array."""

    def embed(self, text: str) -> np.ndarray:
        """
        Embed a single text.

        Args:
            text: Non-blank text

        Returns:
            Vector of length ``dimension()``

        Raises:
            EmptyInputError: If text is blank after trimming
            VectorizerUnavailableError: If the backend fails
            DimensionMismatchError: If the backend returns a wrong-sized vector
        """
        if text is None or not text.strip():
            raise EmptyInputError("Text cannot be empty")
        return self._encode_checked([text])[0]

    def embed_batch(self, texts: Sequence[str]) -> List[np.ndarray]:
        """
        Embed texts in order, processing ``batch_size`` texts at a time.

        Raises:
            EmptyInputError: If any text is blank
        """
        self._check_batch(texts)
        vectors: List[np.ndarray] = []
        for chunk in self._chunks(texts):
            vectors.extend(self._encode_checked(chunk))
        return vectors

    async def aembed(self, text: str) -> np.ndarray:
        """Embed a single text on the executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self.embed, text)

    async def aembed_batch(self, texts: Sequence[str]) -> List[np.ndarray]:
        """
        Embed texts with chunks computed concurrently on the executor.

        Chunks are joined in input order, so the result matches
        ``embed_batch`` exactly.
        """
        self._check_batch(texts)
        if not texts:
            return []
        loop = asyncio.get_running_loop()
        chunk_results = await asyncio.gather(*[
            loop.run_in_executor(self._executor, self._encode_checked, chunk)
            for chunk in self._chunks(texts)
        ])
        vectors: List[np.ndarray] = []
        for chunk_vectors in chunk_results:
            vectors.extend(chunk_vectors)
        return vectors

    def _check_batch(self, texts: Sequence[str]) -> None:
        for i, text in enumerate(texts):
            if text is None or not text.strip():
                raise EmptyInputError(f"Text at position {i} cannot be empty")

    def _chunks(self, texts: Sequence[str]) -> List[List[str]]:
        return [list(texts[i:i + self.batch_size]) for i in range(0, len(texts), self.batch_size)]

    def _encode_checked(self, texts: List[str]) -> List[np.ndarray]:
        try:
            matrix = self._encode(texts)
        except (EmptyInputError, VectorizerUnavailableError):
            raise
        except Exception as e:
            logger.error(f"Vectorizer backend failed: {str(e)}")
            raise VectorizerUnavailableError(f"Failed to embed text: {str(e)}") from e

        matrix = np.asarray(matrix, dtype=np.float64)
        if matrix.ndim != 2 or matrix.shape[0] != len(texts):
            raise VectorizerUnavailableError(
                f"Vectorizer returned shape {matrix.shape} for {len(texts)} texts"
            )
        if matrix.shape[1] != self.dimension():
            raise DimensionMismatchError(self.dimension(), matrix.shape[1])
        return [row.copy() for row in matrix]

    def get_model_info(self) -> Dict[str, Any]:
        """Describe the vectorizer for stats and health checks."""
        return {
            "name": type(self).__name__,
            "dimensions": self.dimension(),
            "batch_size": self.batch_size,
        }


class HashingTextVectorizer(Vectorizer):
    """
    Hashing-trick vectorizer built on scikit-learn.

    Tokens are hashed straight into ``dimension`` buckets, so there is no
    vocabulary to fit and the same text maps to the same vector in every
    process.
    """

    def __init__(
        self,
        dimension: int = 384,
        ngram_range: Tuple[int, int] = (1, 2),
        batch_size: int = 32,
        executor: Optional[ThreadPoolExecutor] = None
    ):
        """
        Initialize hashing vectorizer.

        Args:
            dimension: Number of hash buckets (vector length)
            ngram_range: N-gram range for feature extraction
            batch_size: Texts per chunk in batch embedding
            executor: Thread pool executor for async operations
        """
        super().__init__(batch_size=batch_size, executor=executor)
        if dimension < 1:
            raise ValueError("Dimension must be positive")
        self._dimension = dimension
        self.ngram_range = ngram_range

        self.vectorizer = HashingVectorizer(
            n_features=dimension,
            ngram_range=ngram_range,
            alternate_sign=False,
            norm='l2',
            stop_words='english',
            lowercase=True,
            strip_accents='ascii',
            token_pattern=r'\b[a-zA-Z][a-zA-Z0-9]*\b'
        )

    def dimension(self) -> int:
        return self._dimension

    def _encode(self, texts: List[str]) -> np.ndarray:
        return self.vectorizer.transform(texts).toarray()

    def get_model_info(self) -> Dict[str, Any]:
        info = super().get_model_info()
        info["ngram_range"] = self.ngram_range
        return info
