"""Sentence Transformers embedding provider.

Runs the model in-process with the sentence-transformers library.
"""

import threading

from sentence_transformers import SentenceTransformer

from .base import EmbeddingProvider


class SentenceTransformersEmbeddings(EmbeddingProvider):
    """Embedding provider using a local Sentence Transformers model.

    Attributes:
        model: The loaded SentenceTransformer model
        model_name: Name of the model being used
        normalize: Whether vectors are L2-normalized
    """

    def __init__(self, model_name: str, normalize: bool = True) -> None:
        """Load the model.

        Args:
            model_name: Name of the Sentence Transformers model
                (e.g. 'all-MiniLM-L6-v2')
            normalize: Return unit-length vectors
        """
        self.model_name = model_name
        self.normalize = normalize
        self.model = SentenceTransformer(model_name)
        # encode() isn't documented as thread-safe; collections call us from workers.
        self._lock = threading.Lock()

    def embed_query(self, text: str) -> list[float]:
        with self._lock:
            embedding = self.model.encode(
                text,
                show_progress_bar=False,
                normalize_embeddings=self.normalize,
            )
        result: list[float] = embedding.tolist()
        return result

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        with self._lock:
            embeddings = self.model.encode(
                texts,
                show_progress_bar=False,
                normalize_embeddings=self.normalize,
            )
        return [embedding.tolist() for embedding in embeddings]

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        dimension: int = self.model.get_sentence_embedding_dimension()
        return dimension
