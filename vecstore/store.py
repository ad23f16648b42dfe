"""In-memory document store guarded by a reader/writer lock.

The store is the single source of truth for a collection's documents. Any
number of readers may hold the lock at once; a writer holds it alone. Once a
writer is waiting, new readers queue behind it so that a steady stream of
queries cannot starve ingestion.
"""

import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from types import MappingProxyType

from vecstore.document import Document


class ReadWriteLock:
    """Many-readers / single-writer lock with writer preference."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            if self._readers == 0:
                raise RuntimeError("release_read() called without a read lock held")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write() called without the write lock held")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class DocumentStore:
    """Mapping of document id to :class:`Document`, safe for concurrent use.

    The raw dictionary is never handed out for mutation. Scans go through
    :meth:`read`, which yields a read-only view for as long as the read lock
    is held.
    """

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}
        self._lock = ReadWriteLock()

    def count(self) -> int:
        with self._lock.read_locked():
            return len(self._documents)

    def upsert(self, doc: Document) -> None:
        """Insert the document, fully replacing any record with the same id."""
        with self._lock.write_locked():
            self._documents[doc.id] = doc

    def get(self, doc_id: str) -> Document | None:
        with self._lock.read_locked():
            return self._documents.get(doc_id)

    @contextmanager
    def read(self) -> Iterator[Mapping[str, Document]]:
        """Hold the read lock and yield a point-in-time view of all documents.

        Example:
            >>> with store.read() as docs:
            ...     ids = sorted(docs)
        """
        with self._lock.read_locked():
            yield MappingProxyType(self._documents)

    def __len__(self) -> int:
        return self.count()
