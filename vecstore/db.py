"""
Database: a registry of named collections.

An in-memory DB keeps collections for the lifetime of the process. A
persistent DB additionally reloads every collection found under its directory
on startup, so documents written by a previous process are queryable again.
"""

import shutil
import threading
from collections.abc import Mapping
from pathlib import Path

from vecstore.collection import Collection, EmbeddingFunc
from vecstore.config import DBConfig
from vecstore.errors import (
    CollectionExistsError,
    CollectionNotFoundError,
    PersistenceError,
    ValidationError,
)
from vecstore.persistence import METADATA_FILE_NAME, load_collection_dir
from vecstore.utils.logger import get_logger

logger = get_logger(__name__)


class DB:
    """Registry of collections, optionally backed by a directory.

    Example:
        >>> db = DB(persist_directory=Path(".vecstore"))
        >>> notes = db.get_or_create_collection("notes", embed=embedding_function)
        >>> db.list_collections().keys()
        dict_keys(['notes'])
    """

    def __init__(
        self,
        persist_directory: Path | str | None = None,
        compress: bool = False,
    ) -> None:
        """
        Open a database.

        Args:
            persist_directory: Directory holding persisted collections; None for
                a purely in-memory database
            compress: Gzip documents of collections created through this DB

        Raises:
            PersistenceError: If the directory or a stored collection can't be read
        """
        self.persist_directory = Path(persist_directory) if persist_directory else None
        self.compress = compress
        self._collections: dict[str, Collection] = {}
        self._lock = threading.RLock()

        if self.persist_directory is not None:
            try:
                self.persist_directory.mkdir(mode=0o700, parents=True, exist_ok=True)
            except OSError as e:
                raise PersistenceError(f"couldn't create database directory: {e}") from e
            self._load(self.persist_directory)

    @classmethod
    def from_config(cls, config: DBConfig) -> "DB":
        return cls(persist_directory=config.persist_directory, compress=config.compress)

    def _load(self, directory: Path) -> None:
        for collection_dir in sorted(directory.iterdir()):
            if not (collection_dir / METADATA_FILE_NAME).is_file():
                continue
            name, metadata, documents = load_collection_dir(collection_dir)
            # Documents may have been written compressed by an earlier process.
            compress = any(p.suffix == ".gz" for p in collection_dir.iterdir())
            collection = Collection(
                name,
                metadata=metadata,
                persist_root=directory,
                compress=compress or self.compress,
            )
            collection._restore(documents)
            self._collections[name] = collection

        logger.info(
            f"Loaded {len(self._collections)} collection(s)",
            extra={"context": {"persist_directory": str(directory)}},
        )

    def create_collection(
        self,
        name: str,
        metadata: Mapping[str, str] | None = None,
        embed: EmbeddingFunc | None = None,
    ) -> Collection:
        """
        Create a new collection.

        Raises:
            ValidationError: If the name is empty
            CollectionExistsError: If a collection with that name exists
            PersistenceError: If the collection directory can't be written
        """
        if not name:
            raise ValidationError("collection name is empty")
        with self._lock:
            if name in self._collections:
                raise CollectionExistsError(name)
            collection = Collection(
                name,
                metadata=metadata,
                embed=embed,
                persist_root=self.persist_directory,
                compress=self.compress,
            )
            self._collections[name] = collection
            return collection

    def get_collection(self, name: str, embed: EmbeddingFunc | None = None) -> Collection:
        """
        Return an existing collection.

        Args:
            name: Collection name
            embed: Embedding function to attach if the collection has none
                (typical for collections loaded from disk)

        Raises:
            CollectionNotFoundError: If the name is unknown
        """
        with self._lock:
            collection = self._collections.get(name)
            if collection is None:
                raise CollectionNotFoundError(name)
            if embed is not None and collection.embedding_function is None:
                collection.set_embedding_function(embed)
            return collection

    def get_or_create_collection(
        self,
        name: str,
        metadata: Mapping[str, str] | None = None,
        embed: EmbeddingFunc | None = None,
    ) -> Collection:
        with self._lock:
            if name in self._collections:
                return self.get_collection(name, embed)
            return self.create_collection(name, metadata, embed)

    def list_collections(self) -> dict[str, Collection]:
        with self._lock:
            return dict(self._collections)

    def delete_collection(self, name: str) -> None:
        """
        Remove a collection and, for persistent databases, its directory.

        Raises:
            CollectionNotFoundError: If the name is unknown
            PersistenceError: If the directory can't be removed
        """
        with self._lock:
            collection = self._collections.pop(name, None)
            if collection is None:
                raise CollectionNotFoundError(name)
            if collection.persist_directory is not None:
                try:
                    shutil.rmtree(collection.persist_directory)
                except FileNotFoundError:
                    pass
                except OSError as e:
                    raise PersistenceError(
                        f"couldn't remove collection directory: {e}"
                    ) from e

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._collections

    def __len__(self) -> int:
        with self._lock:
            return len(self._collections)
