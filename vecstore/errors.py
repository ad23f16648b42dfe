"""Exception hierarchy for vecstore.

All errors raised by the library derive from :class:`VecstoreError` so that
callers can catch everything coming out of a collection in one place.
"""


class VecstoreError(Exception):
    """Base exception for vecstore errors."""
    pass


class ValidationError(VecstoreError, ValueError):
    """Raised when arguments are rejected before any work starts."""
    pass


class UnsupportedOperatorError(ValidationError):
    """Raised when a content filter uses an operator outside the supported set."""

    def __init__(self, operator: str) -> None:
        self.operator = operator
        super().__init__(f"unsupported operator: {operator!r}")


class EmbeddingError(VecstoreError):
    """Raised when the embedding function fails for a document or query."""
    pass


class PersistenceError(VecstoreError):
    """Raised when a document or collection metadata can't be written or read."""
    pass


class SimilarityError(VecstoreError):
    """Raised when similarity scores can't be computed (e.g. dimension mismatch)."""
    pass


class DocumentAddError(VecstoreError):
    """Wraps the first failure of a batch ingestion with the offending document id."""

    def __init__(self, doc_id: str, cause: BaseException) -> None:
        self.doc_id = doc_id
        super().__init__(f"couldn't add document '{doc_id}': {cause}")


class OperationCancelledError(VecstoreError):
    """Raised when a caller-supplied cancellation token stopped an operation."""

    def __init__(self, cause: BaseException | None = None) -> None:
        self.cause = cause
        message = "operation cancelled"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class CollectionNotFoundError(VecstoreError, KeyError):
    """Raised when a collection name is unknown to the DB."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"collection not found: {name!r}")

    def __str__(self) -> str:
        return str(self.args[0])


class CollectionExistsError(VecstoreError):
    """Raised when creating a collection whose name is already taken."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"collection already exists: {name!r}")
