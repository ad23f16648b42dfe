"""Base interface for embedding providers.

A provider is also a plain callable ``text -> list[float]``, which is the only
thing a :class:`~vecstore.collection.Collection` needs from it.
"""

from abc import ABC, abstractmethod


class EmbeddingProvider(ABC):
    """Abstract base class for embedding providers.

    Implementations must be safe to call from several threads at once, since
    collections embed documents concurrently.
    """

    model_name: str

    @abstractmethod
    def embed_query(self, text: str) -> list[float]:
        """Generate the embedding for a single text.

        Args:
            text: Text to embed

        Returns:
            Embedding vector
        """
        pass

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for several texts.

        The default implementation embeds texts one by one.
        """
        return [self.embed_query(text) for text in texts]

    def __call__(self, text: str) -> list[float]:
        return self.embed_query(text)
