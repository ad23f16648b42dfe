"""Metadata and content filters applied before similarity ranking.

``where`` is a metadata equality filter: every key must be present on the
document with exactly the given value. ``where_document`` filters on the
document content using the operators in :data:`SUPPORTED_OPERATORS`.
"""

from collections.abc import Iterable, Mapping

from vecstore.document import Document
from vecstore.errors import UnsupportedOperatorError

CONTAINS = "$contains"
NOT_CONTAINS = "$not_contains"

SUPPORTED_OPERATORS: tuple[str, ...] = (CONTAINS, NOT_CONTAINS)


def validate_where_document(where_document: Mapping[str, str] | None) -> None:
    """Raise :class:`UnsupportedOperatorError` for any unknown operator key."""
    for operator in where_document or {}:
        if operator not in SUPPORTED_OPERATORS:
            raise UnsupportedOperatorError(operator)


def matches_metadata(metadata: Mapping[str, str], where: Mapping[str, str]) -> bool:
    for key, value in where.items():
        if metadata.get(key) != value:
            return False
    return True


def matches_content(content: str, where_document: Mapping[str, str]) -> bool:
    for operator, value in where_document.items():
        if operator == CONTAINS and value not in content:
            return False
        if operator == NOT_CONTAINS and value in content:
            return False
    return True


def filter_documents(
    documents: Iterable[Document],
    where: Mapping[str, str] | None = None,
    where_document: Mapping[str, str] | None = None,
) -> list[Document]:
    """
    Return the documents that satisfy both filters, in iteration order.

    Empty or missing filters match everything. Operators are assumed to have
    been checked with :func:`validate_where_document`.
    """
    where = where or {}
    where_document = where_document or {}
    return [
        doc
        for doc in documents
        if matches_metadata(doc.metadata, where)
        and matches_content(doc.content, where_document)
    ]
