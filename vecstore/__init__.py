"""
vecstore - embedded, in-process vector database.

A collection holds documents (id, embedding, metadata, content), embeds them
concurrently on ingestion and answers similarity queries with optional
metadata and content filters. Collections can be mirrored to disk.

Main components:
- collection: Collection with ingestion and query pipelines
- db: Registry of collections, reload of persisted ones
- embeddings: Embedding providers
- cli: Command-line interface

Public API (for use as a library):
"""

from vecstore.cancellation import CancellationToken
from vecstore.collection import Collection, EmbeddingFunc
from vecstore.config import DBConfig, EmbeddingConfig, EmbeddingProviderType
from vecstore.db import DB
from vecstore.document import Document, Result
from vecstore.errors import (
    CollectionExistsError,
    CollectionNotFoundError,
    DocumentAddError,
    EmbeddingError,
    OperationCancelledError,
    PersistenceError,
    SimilarityError,
    UnsupportedOperatorError,
    ValidationError,
    VecstoreError,
)
from vecstore.filters import SUPPORTED_OPERATORS

__version__ = "0.1.0"

__all__ = [
    # Data model
    "Document",
    "Result",
    # Core
    "Collection",
    "EmbeddingFunc",
    "DB",
    "CancellationToken",
    "SUPPORTED_OPERATORS",
    # Config
    "DBConfig",
    "EmbeddingConfig",
    "EmbeddingProviderType",
    # Errors
    "VecstoreError",
    "ValidationError",
    "UnsupportedOperatorError",
    "EmbeddingError",
    "PersistenceError",
    "SimilarityError",
    "DocumentAddError",
    "OperationCancelledError",
    "CollectionNotFoundError",
    "CollectionExistsError",
]
