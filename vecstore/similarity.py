"""Cosine similarity scoring and ranking of candidate documents."""

from collections.abc import Sequence

import numpy as np

from vecstore.document import Document, Result
from vecstore.errors import SimilarityError


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors in [-1, 1]; 0.0 if either has zero norm.

    Raises:
        SimilarityError: If the vectors have different dimensions
    """
    if len(a) != len(b):
        raise SimilarityError(
            f"vectors must have the same length (got {len(a)} and {len(b)})"
        )
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    denom = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if denom == 0.0:
        return 0.0
    return float(np.dot(va, vb) / denom)


def rank(
    query_embedding: Sequence[float],
    documents: Sequence[Document],
) -> list[Result]:
    """
    Score every document against the query and sort best-first.

    Equal scores are ordered by ascending document id so results are
    reproducible regardless of insertion order.

    Args:
        query_embedding: Query vector
        documents: Candidate documents, all with embeddings

    Returns:
        Results sorted by descending similarity

    Raises:
        SimilarityError: If a document's dimension differs from the query's
    """
    results = [
        Result(document=doc, similarity=cosine_similarity(query_embedding, doc.embedding))
        for doc in documents
    ]
    results.sort(key=lambda r: (-r.similarity, r.document.id))
    return results
