"""Transformer-based vectorizer for semantic search."""

import logging
import threading
from typing import List, Dict, Any, Optional
from concurrent.futures import ThreadPoolExecutor

import numpy as np

try:
    from sentence_transformers import SentenceTransformer
    TRANSFORMERS_AVAILABLE = True
except ImportError:
    SentenceTransformer = None
    TRANSFORMERS_AVAILABLE = False

from .embeddings import Vectorizer
from .exceptions import VectorizerUnavailableError

logger = logging.getLogger(__name__)


class SentenceTransformerVectorizer(Vectorizer):
    """
    Sentence-BERT vectorizer.

    The model is loaded on first use so that constructing the engine never
    blocks on a model download. Any load or encode failure surfaces as
    VectorizerUnavailableError, which the search orchestrator answers with
    the keyword fallback.
    """

    def __init__(
        self,
        model_name: str = "sentence-transformers/all-MiniLM-L6-v2",
        vector_dim: int = 384,
        device: Optional[str] = None,
        batch_size: int = 32,
        executor: Optional[ThreadPoolExecutor] = None
    ):
        """
        Initialize transformer vectorizer.

        Args:
            model_name: Sentence transformer model name
            vector_dim: Declared dimension of embedding vectors
            device: Device to run the model on ('cpu', 'cuda', 'mps')
            batch_size: Texts per chunk in batch embedding
            executor: Thread pool executor for async operations
        """
        super().__init__(batch_size=batch_size, executor=executor)
        self.model_name = model_name
        self.vector_dim = vector_dim
        self.device = device
        self._model = None
        self._load_lock = threading.Lock()

    def dimension(self) -> int:
        return self.vector_dim

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    def _get_model(self):
        if self._model is not None:
            return self._model

        if not TRANSFORMERS_AVAILABLE:
            raise VectorizerUnavailableError(
                "Transformer dependencies not available. Install with: "
                "pip install sentence-transformers"
            )

        with self._load_lock:
            if self._model is None:
                try:
                    logger.info(f"Loading sentence transformer model: {self.model_name}")
                    self._model = SentenceTransformer(self.model_name, device=self.device)
                except Exception as e:
                    logger.error(f"Failed to load transformer model: {e}")
                    raise VectorizerUnavailableError(f"Failed to load transformer model: {e}") from e

                model_dim = self._model.get_sentence_embedding_dimension()
                if model_dim is not None and model_dim != self.vector_dim:
                    logger.warning(
                        f"Model {self.model_name} produces {model_dim}-dim vectors, "
                        f"declared dimension is {self.vector_dim}"
                    )
        return self._model

    def _encode(self, texts: List[str]) -> np.ndarray:
        model = self._get_model()
        embeddings = model.encode(
            texts,
            batch_size=self.batch_size,
            convert_to_numpy=True,
            normalize_embeddings=True,
            show_progress_bar=False
        )
        return np.asarray(embeddings, dtype=np.float32)

    def get_model_info(self) -> Dict[str, Any]:
        info = super().get_model_info()
        info.update({
            "model_name": self.model_name,
            "device": self.device,
            "loaded": self.is_loaded,
            "available": TRANSFORMERS_AVAILABLE,
        })
        return info
