"""Tests for filters module."""

import pytest

from vecstore.document import Document
from vecstore.errors import UnsupportedOperatorError
from vecstore.filters import (
    SUPPORTED_OPERATORS,
    filter_documents,
    matches_content,
    matches_metadata,
    validate_where_document,
)


@pytest.fixture
def documents() -> list[Document]:
    return [
        Document(id="1", embedding=[1.0], metadata={"lang": "en"}, content="hello world"),
        Document(id="2", embedding=[1.0], metadata={"lang": "de"}, content="hallo welt"),
        Document(id="3", embedding=[1.0], metadata={}, content="hello again"),
    ]


class TestValidateWhereDocument:
    """Tests for operator validation."""

    def test_supported_operators(self) -> None:
        """Test that both documented operators are accepted."""
        assert set(SUPPORTED_OPERATORS) == {"$contains", "$not_contains"}
        validate_where_document({"$contains": "a", "$not_contains": "b"})

    def test_none_and_empty(self) -> None:
        """Test that missing filters are valid."""
        validate_where_document(None)
        validate_where_document({})

    def test_unknown_operator(self) -> None:
        """Test that unknown operators are reported by name."""
        with pytest.raises(UnsupportedOperatorError) as exc_info:
            validate_where_document({"$contains": "a", "$regex": "b"})

        assert exc_info.value.operator == "$regex"
        assert "$regex" in str(exc_info.value)


class TestMatching:
    """Tests for metadata and content predicates."""

    def test_metadata_equality(self) -> None:
        """Test that every key must match exactly."""
        assert matches_metadata({"a": "1", "b": "2"}, {"a": "1"})
        assert not matches_metadata({"a": "1"}, {"a": "2"})
        assert not matches_metadata({}, {"a": "1"})
        assert matches_metadata({}, {})

    def test_empty_value_requires_present_key(self) -> None:
        """Test that an empty expected value doesn't match a missing key."""
        assert not matches_metadata({}, {"a": ""})
        assert matches_metadata({"a": ""}, {"a": ""})

    def test_content_operators(self) -> None:
        """Test $contains and $not_contains."""
        assert matches_content("hello world", {"$contains": "world"})
        assert not matches_content("hello world", {"$contains": "moon"})
        assert matches_content("hello world", {"$not_contains": "moon"})
        assert not matches_content("hello world", {"$not_contains": "hello"})

    def test_content_match_is_case_sensitive(self) -> None:
        """Test that substring matching is case-sensitive."""
        assert not matches_content("Hello", {"$contains": "hello"})


class TestFilterDocuments:
    """Tests for filter_documents."""

    def test_no_filters(self, documents: list[Document]) -> None:
        """Test that no filters keeps every document."""
        assert filter_documents(documents) == documents

    def test_both_filters(self, documents: list[Document]) -> None:
        """Test that both filters must pass."""
        result = filter_documents(
            documents,
            where={"lang": "en"},
            where_document={"$contains": "hello"},
        )

        assert [d.id for d in result] == ["1"]

    def test_content_only(self, documents: list[Document]) -> None:
        """Test content filtering preserves input order."""
        result = filter_documents(documents, where_document={"$contains": "hello"})

        assert [d.id for d in result] == ["1", "3"]
