"""Embedding providers for vecstore.

Any callable ``text -> list[float]`` works as a collection's embedding
function; the providers here cover a local Sentence Transformers model and an
Ollama server.
"""

from vecstore.config import EmbeddingConfig, EmbeddingProviderType

from .base import EmbeddingProvider
from .ollama import OllamaEmbeddings

__all__ = [
    "EmbeddingProvider",
    "OllamaEmbeddings",
    "get_embedding_function",
]


def get_embedding_function(config: EmbeddingConfig) -> EmbeddingProvider:
    """Factory function to create an embedding provider from configuration.

    Args:
        config: Embedding configuration

    Returns:
        Embedding provider instance

    Raises:
        ValueError: If the provider type is not supported
    """
    if config.provider == EmbeddingProviderType.SENTENCE_TRANSFORMERS:
        # Import here so torch is only loaded when this provider is used
        from .sentence_transformers import SentenceTransformersEmbeddings

        return SentenceTransformersEmbeddings(config.model_name)
    elif config.provider == EmbeddingProviderType.OLLAMA:
        return OllamaEmbeddings(
            config.model_name,
            api_base=config.api_base,
            timeout=config.timeout,
        )
    else:
        raise ValueError(f"Unsupported embedding provider: {config.provider}")
