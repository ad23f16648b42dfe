"""
Data model for documents stored in a collection.

A document is the unit of ingestion and retrieval: an identifier, an
embedding vector, string metadata for filtering, and the original content the
embedding was derived from.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Document:
    """
    A document with its embedding.

    Attributes:
        id: Identifier, unique within a collection
        embedding: Embedding vector; computed from ``content`` when empty
        metadata: String key/value pairs usable in ``where`` filters
        content: Original text; required when no embedding is supplied
    """

    id: str
    embedding: list[float] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)
    content: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "embedding": list(self.embedding),
            "metadata": dict(self.metadata),
            "content": self.content,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Document":
        """
        Build a document from a dictionary produced by :meth:`to_dict`.

        Missing optional keys default to empty values, so hand-written input
        such as ``{"id": "a", "content": "..."}`` is accepted as well.
        """
        return cls(
            id=str(data["id"]),
            embedding=[float(x) for x in data.get("embedding") or []],
            metadata={str(k): str(v) for k, v in (data.get("metadata") or {}).items()},
            content=data.get("content") or "",
        )


@dataclass
class Result:
    """
    A query hit.

    Attributes:
        document: The matched document
        similarity: Cosine similarity to the query (higher is more similar)
    """

    document: Document
    similarity: float

    @property
    def id(self) -> str:
        return self.document.id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for display or JSON output (embedding omitted)."""
        return {
            "id": self.document.id,
            "similarity": self.similarity,
            "metadata": dict(self.document.metadata),
            "content": self.document.content,
        }
