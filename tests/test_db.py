"""Tests for the DB collection registry."""

from pathlib import Path

import pytest

from tests.fakes import FakeEmbedder
from vecstore.config import DBConfig
from vecstore.db import DB
from vecstore.errors import (
    CollectionExistsError,
    CollectionNotFoundError,
    PersistenceError,
    ValidationError,
)
from vecstore.persistence import hash_to_hex


class TestInMemoryDB:
    """Tests for a database without a persist directory."""

    def test_create_and_get(self, embedder: FakeEmbedder) -> None:
        db = DB()

        created = db.create_collection("notes", metadata={"a": "b"}, embed=embedder)

        assert db.get_collection("notes") is created
        assert created.metadata == {"a": "b"}
        assert "notes" in db
        assert len(db) == 1
        assert created.persist_directory is None

    def test_empty_name(self) -> None:
        with pytest.raises(ValidationError):
            DB().create_collection("")

    def test_duplicate_name(self) -> None:
        db = DB()
        db.create_collection("notes")

        with pytest.raises(CollectionExistsError, match="notes"):
            db.create_collection("notes")

    def test_missing_collection(self) -> None:
        """Test that lookups of unknown names fail with a KeyError subclass."""
        with pytest.raises(CollectionNotFoundError) as exc_info:
            DB().get_collection("missing")

        assert isinstance(exc_info.value, KeyError)
        assert "missing" in str(exc_info.value)

    def test_get_or_create(self, embedder: FakeEmbedder) -> None:
        db = DB()

        first = db.get_or_create_collection("notes", embed=embedder)
        second = db.get_or_create_collection("notes")

        assert first is second
        assert len(db) == 1

    def test_get_collection_attaches_missing_embedder(self, embedder: FakeEmbedder) -> None:
        """Test that an embedding function is attached only when none is set."""
        db = DB()
        db.create_collection("bare")
        other = FakeEmbedder()

        assert db.get_collection("bare", embed=embedder).embedding_function is embedder
        assert db.get_collection("bare", embed=other).embedding_function is embedder

    def test_list_collections_is_a_copy(self) -> None:
        db = DB()
        db.create_collection("a")
        db.create_collection("b")

        listed = db.list_collections()
        listed.pop("a")

        assert sorted(db.list_collections()) == ["a", "b"]

    def test_delete(self) -> None:
        db = DB()
        db.create_collection("notes")

        db.delete_collection("notes")

        assert "notes" not in db
        with pytest.raises(CollectionNotFoundError):
            db.delete_collection("notes")


class TestPersistentDB:
    """Tests for a database backed by a directory."""

    def test_reload(self, tmp_path: Path, embedder: FakeEmbedder) -> None:
        """Test that a new DB on the same directory sees earlier collections."""
        db = DB(persist_directory=tmp_path)
        notes = db.create_collection("notes", metadata={"team": "ops"}, embed=embedder)
        notes.add(ids=["a", "b"], contents=["alpha", "beta"])
        db.create_collection("empty")

        reopened = DB(persist_directory=tmp_path)

        assert sorted(reopened.list_collections()) == ["empty", "notes"]
        loaded = reopened.get_collection("notes")
        assert loaded.count() == 2
        assert loaded.metadata == {"team": "ops"}
        assert loaded.embedding_function is None
        doc = loaded.get_by_id("a")
        assert doc is not None
        assert doc.content == "alpha"
        assert doc.embedding == notes.get_by_id("a").embedding

    def test_reloaded_collection_is_queryable(
        self, tmp_path: Path, embedder: FakeEmbedder
    ) -> None:
        db = DB(persist_directory=tmp_path)
        db.create_collection("notes", embed=embedder).add(
            ids=["a", "b"], contents=["alpha", "beta"]
        )

        loaded = DB(persist_directory=tmp_path).get_collection("notes", embed=embedder)
        results = loaded.query("alpha", n_results=1)

        assert [r.id for r in results] == ["a"]

    def test_compressed_reload(self, tmp_path: Path) -> None:
        """Test that gzip-compressed collections reload and stay compressed."""
        db = DB(persist_directory=tmp_path, compress=True)
        db.create_collection("z").add(ids=["a"], embeddings=[[1.0, 2.0]])

        reopened = DB(persist_directory=tmp_path)
        loaded = reopened.get_collection("z")
        loaded.add(ids=["b"], embeddings=[[2.0, 1.0]])

        assert loaded.count() == 2
        names = {p.name for p in (tmp_path / hash_to_hex("z")).iterdir()}
        assert f"{hash_to_hex('b')}.json.gz" in names

    def test_reload_rejects_document_without_embedding(self, tmp_path: Path) -> None:
        """Test that a hand-edited document without a vector fails the reload."""
        db = DB(persist_directory=tmp_path)
        notes = db.create_collection("notes")
        notes.add(ids=["a"], embeddings=[[1.0, 0.0]])
        (notes.persist_directory / f"{hash_to_hex('b')}.json").write_text(
            '{"id": "b", "content": "x"}', encoding="utf-8"
        )

        with pytest.raises(PersistenceError, match="empty embedding"):
            DB(persist_directory=tmp_path)

    def test_ignores_foreign_directories(self, tmp_path: Path) -> None:
        (tmp_path / "not-a-collection").mkdir()
        (tmp_path / "stray.txt").write_text("x", encoding="utf-8")

        db = DB(persist_directory=tmp_path)

        assert len(db) == 0

    def test_delete_removes_directory(self, tmp_path: Path) -> None:
        db = DB(persist_directory=tmp_path)
        db.create_collection("notes").add(ids=["a"], embeddings=[[1.0]])

        db.delete_collection("notes")

        assert not (tmp_path / hash_to_hex("notes")).exists()
        assert len(DB(persist_directory=tmp_path)) == 0

    def test_creates_directory(self, tmp_path: Path) -> None:
        root = tmp_path / "nested" / "db"

        DB(persist_directory=root)

        assert root.is_dir()

    def test_from_config(self, tmp_path: Path) -> None:
        config = DBConfig(persist_directory=tmp_path, compress=True)

        db = DB.from_config(config)

        assert db.persist_directory == tmp_path
        assert db.compress is True
