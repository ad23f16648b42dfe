"""
Ollama embedding provider.

Talks to a local Ollama server over HTTP (``POST /api/embeddings``). Transport
failures are retried with exponential backoff; HTTP error statuses and
malformed responses are not.
"""

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from vecstore.errors import EmbeddingError
from vecstore.utils.logger import get_logger

from .base import EmbeddingProvider

logger = get_logger(__name__)


class OllamaEmbeddings(EmbeddingProvider):
    """
    Embedding provider backed by an Ollama server.

    Example:
        >>> embed = OllamaEmbeddings("nomic-embed-text")
        >>> vector = embed("Failed to connect to database")
    """

    def __init__(
        self,
        model_name: str,
        api_base: str = "http://localhost:11434",
        timeout: int = 30,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the provider.

        Args:
            model_name: Ollama model (e.g. 'nomic-embed-text')
            api_base: Ollama server URL
            timeout: Request timeout in seconds
            transport: Custom httpx transport (used by tests)
        """
        self.model_name = model_name
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.client = httpx.Client(
            base_url=self.api_base,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> "OllamaEmbeddings":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    def _post(self, text: str) -> httpx.Response:
        return self.client.post(
            "/api/embeddings",
            json={"model": self.model_name, "prompt": text},
        )

    def embed_query(self, text: str) -> list[float]:
        """
        Embed ``text`` with the configured model.

        Raises:
            EmbeddingError: On HTTP errors, exhausted retries or an invalid response
        """
        try:
            response = self._post(text)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise EmbeddingError(
                f"Ollama returned {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise EmbeddingError(f"Ollama request failed: {e}") from e

        try:
            embedding = response.json()["embedding"]
        except (ValueError, KeyError, TypeError) as e:
            raise EmbeddingError(f"invalid Ollama response: {e}") from e

        if not isinstance(embedding, list) or not embedding:
            raise EmbeddingError("Ollama returned an empty embedding")

        logger.debug(
            "Embedded text",
            extra={"context": {"model": self.model_name, "dimension": len(embedding)}},
        )
        return [float(x) for x in embedding]
