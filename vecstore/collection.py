"""
Collection: a named set of documents with ingestion and similarity query.

Ingestion fans documents out to a bounded pool of worker threads. Each worker
computes a missing embedding, writes the document into the store and, when the
collection is persistent, mirrors it to disk. The first failure cancels every
document that hasn't started yet and is the one reported to the caller.

Queries hold the store's read lock for their whole filter/embed/rank sequence,
so they observe a consistent snapshot while ingestion waits.
"""

import threading
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from types import MappingProxyType

from vecstore.cancellation import CancellationToken
from vecstore.document import Document, Result
from vecstore.errors import (
    DocumentAddError,
    EmbeddingError,
    OperationCancelledError,
    PersistenceError,
    SimilarityError,
    ValidationError,
)
from vecstore.filters import filter_documents, validate_where_document
from vecstore.persistence import (
    METADATA_FILE_NAME,
    collection_path,
    document_path,
    persist,
)
from vecstore.similarity import rank
from vecstore.store import DocumentStore
from vecstore.utils.logger import get_logger

logger = get_logger(__name__)

EmbeddingFunc = Callable[[str], list[float]]


class Collection:
    """
    A named collection of documents sharing one embedding function.

    Attributes:
        name: Collection name (immutable)
        persist_directory: Directory mirroring this collection, or None
        compress: Whether documents are written gzip-compressed

    Example:
        >>> collection = Collection("notes", embed=my_embedding_function)
        >>> collection.add(ids=["a", "b"], contents=["first note", "second note"])
        >>> results = collection.query("note", n_results=1)
    """

    def __init__(
        self,
        name: str,
        metadata: Mapping[str, str] | None = None,
        embed: EmbeddingFunc | None = None,
        persist_root: Path | str | None = None,
        compress: bool = False,
    ) -> None:
        """
        Create a collection.

        Args:
            name: Collection name
            metadata: Collection metadata (copied)
            embed: Function turning text into an embedding vector; required
                for documents without embeddings and for text queries
            persist_root: Database directory; when set, the collection gets
                its own subdirectory there and every write is mirrored to disk
            compress: Gzip persisted documents

        Raises:
            PersistenceError: If the directory or metadata file can't be written
        """
        self.name = name
        self.compress = compress
        self._metadata = dict(metadata or {})
        self._embed_fn = embed
        self._store = DocumentStore()
        self.persist_directory: Path | None = None

        if persist_root is not None:
            self.persist_directory = collection_path(Path(persist_root), name)
            try:
                self.persist_directory.mkdir(mode=0o700, parents=True, exist_ok=True)
            except OSError as e:
                raise PersistenceError(f"couldn't create collection directory: {e}") from e
            persist(
                self.persist_directory / METADATA_FILE_NAME,
                {"name": name, "metadata": self._metadata},
            )

        logger.debug(
            f"Created collection '{name}'",
            extra={"context": {"persist_directory": str(self.persist_directory)}},
        )

    @property
    def metadata(self) -> Mapping[str, str]:
        return MappingProxyType(self._metadata)

    @property
    def embedding_function(self) -> EmbeddingFunc | None:
        return self._embed_fn

    def set_embedding_function(self, embed: EmbeddingFunc) -> None:
        """Attach an embedding function to a collection loaded without one."""
        self._embed_fn = embed

    def count(self) -> int:
        """Return the number of documents in the collection."""
        return self._store.count()

    def __len__(self) -> int:
        return self.count()

    def __repr__(self) -> str:
        return f"Collection(name={self.name!r}, count={self.count()})"

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def add(
        self,
        ids: Sequence[str],
        embeddings: Sequence[Sequence[float]] | None = None,
        metadatas: Sequence[Mapping[str, str] | None] | None = None,
        contents: Sequence[str] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        """
        Add documents given as parallel lists, one at a time.

        Args:
            ids: Document ids
            embeddings: Embeddings, or empty/None to compute them from contents
            metadatas: Metadata per document, or empty/None
            contents: Contents per document, or empty/None when embeddings are given
            cancel_token: Caller cancellation

        Raises:
            ValidationError: If the lists are empty or their lengths disagree
            DocumentAddError: If a document failed to embed or persist
            OperationCancelledError: If ``cancel_token`` stopped the batch
        """
        self.add_concurrently(
            ids, embeddings, metadatas, contents, concurrency=1, cancel_token=cancel_token
        )

    def add_concurrently(
        self,
        ids: Sequence[str],
        embeddings: Sequence[Sequence[float]] | None = None,
        metadatas: Sequence[Mapping[str, str] | None] | None = None,
        contents: Sequence[str] | None = None,
        concurrency: int = 1,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        """
        Like :meth:`add`, but embeds up to ``concurrency`` documents in parallel.

        Mostly useful when embeddings have to be computed from contents.
        """
        embeddings = embeddings if embeddings is not None else []
        metadatas = metadatas if metadatas is not None else []
        contents = contents if contents is not None else []

        if len(ids) == 0:
            raise ValidationError("ids are empty")
        if len(embeddings) == 0 and len(contents) == 0:
            raise ValidationError("either embeddings or contents must be filled")
        if len(embeddings) != 0 and len(embeddings) != len(ids):
            raise ValidationError("ids and embeddings must have the same length")
        if len(metadatas) != 0 and len(metadatas) != len(ids):
            raise ValidationError(
                "when metadatas is not empty it must have the same length as ids"
            )
        if len(contents) != 0 and len(contents) != len(ids):
            raise ValidationError("ids and contents must have the same length")
        if concurrency < 1:
            raise ValidationError("concurrency must be at least 1")

        docs = [
            Document(
                id=doc_id,
                embedding=list(embeddings[i]) if len(embeddings) else [],
                metadata=dict((metadatas[i] if len(metadatas) else None) or {}),
                content=contents[i] if len(contents) else "",
            )
            for i, doc_id in enumerate(ids)
        ]

        self.add_documents(docs, concurrency=concurrency, cancel_token=cancel_token)

    def add_documents(
        self,
        documents: Sequence[Document],
        concurrency: int = 1,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        """
        Add documents with at most ``concurrency`` of them in flight at once.

        Documents without embeddings are embedded with the collection's
        embedding function. On the first failure, documents that haven't
        started are skipped; documents already in flight finish normally.

        Args:
            documents: Documents to add
            concurrency: Maximum number of documents processed in parallel
            cancel_token: Caller cancellation, checked before each document

        Raises:
            ValidationError: If ``documents`` is empty or concurrency < 1
            DocumentAddError: The first failure, chained to its cause
            OperationCancelledError: If ``cancel_token`` was cancelled before
                every document was added
        """
        if not documents:
            raise ValidationError("documents are empty")
        if concurrency < 1:
            raise ValidationError("concurrency must be at least 1")
        # Everything else is validated per document in add_document.

        token = cancel_token.child() if cancel_token is not None else CancellationToken()
        error_lock = threading.Lock()
        first_error: tuple[str, Exception] | None = None
        added = 0

        def record(doc_id: str, error: Exception | None) -> None:
            nonlocal first_error, added
            with error_lock:
                if error is None:
                    added += 1
                elif first_error is None:
                    first_error = (doc_id, error)
                    token.cancel(error)

        gate = threading.BoundedSemaphore(concurrency)

        def work(doc: Document) -> None:
            try:
                if token.cancelled:
                    return
                self.add_document(doc)
            except Exception as e:
                record(doc.id, e)
            else:
                record(doc.id, None)
            finally:
                gate.release()

        logger.debug(
            f"Adding {len(documents)} document(s) to '{self.name}'",
            extra={"context": {"concurrency": concurrency}},
        )

        with ThreadPoolExecutor(
            max_workers=min(concurrency, len(documents)),
            thread_name_prefix="vecstore-add",
        ) as executor:
            for doc in documents:
                if token.cancelled:
                    break
                gate.acquire()
                if token.cancelled:
                    gate.release()
                    break
                executor.submit(work, doc)

        if first_error is not None:
            doc_id, error = first_error
            raise DocumentAddError(doc_id, error) from error
        if cancel_token is not None and cancel_token.cancelled and added < len(documents):
            raise OperationCancelledError(cancel_token.cause)

        logger.debug(f"Added {added} document(s) to '{self.name}'")

    def add_document(
        self,
        document: Document,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        """
        Add a single document, computing its embedding if it has none.

        The caller's metadata dict is copied, so later changes to it don't
        affect the stored document. A persistence failure is raised after the
        in-memory store has already been updated.

        Raises:
            ValidationError: If the id is empty or neither embedding nor content is set
            EmbeddingError: If the embedding couldn't be created (nothing is stored)
            PersistenceError: If the document couldn't be written to disk
            OperationCancelledError: If ``cancel_token`` is already cancelled
        """
        if not document.id:
            raise ValidationError("document ID is empty")
        if len(document.embedding) == 0 and not document.content:
            raise ValidationError("either document embedding or content must be filled")
        if cancel_token is not None and cancel_token.cancelled:
            raise OperationCancelledError(cancel_token.cause)

        doc = Document(
            id=document.id,
            embedding=[float(x) for x in document.embedding],
            metadata=dict(document.metadata or {}),
            content=document.content,
        )

        if len(doc.embedding) == 0:
            doc.embedding = self._embed(doc.content, f"document '{doc.id}'")

        self._store.upsert(doc)

        if self.persist_directory is not None:
            persist(
                document_path(self.persist_directory, doc.id, self.compress),
                doc,
                compress=self.compress,
            )

    def _restore(self, documents: Sequence[Document]) -> None:
        """Load already-persisted documents into memory without rewriting them."""
        for doc in documents:
            self._store.upsert(doc)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def get_by_id(self, doc_id: str) -> Document | None:
        """Return a copy of the document with the given id, or None."""
        if not doc_id:
            raise ValidationError("document ID is empty")
        doc = self._store.get(doc_id)
        if doc is None:
            return None
        return Document(
            id=doc.id,
            embedding=list(doc.embedding),
            metadata=dict(doc.metadata),
            content=doc.content,
        )

    def query(
        self,
        query_text: str,
        n_results: int,
        where: Mapping[str, str] | None = None,
        where_document: Mapping[str, str] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> list[Result]:
        """
        Return the ``n_results`` documents most similar to ``query_text``.

        The read lock is held while the embedding function runs, so that
        function must not call back into this collection; with a writer
        waiting, a nested read would deadlock.

        Args:
            query_text: Text to search for
            n_results: Maximum number of results; must be > 0
            where: Metadata equality filter. Optional.
            where_document: Content filter using ``$contains`` /
                ``$not_contains``. Optional.
            cancel_token: Caller cancellation, checked before embedding the query

        Returns:
            Results sorted by descending similarity. Fewer than ``n_results``
            when fewer documents match; empty when the collection is empty
            or nothing passes the filters (the query is not embedded then).

        Raises:
            ValidationError: On empty text or n_results < 1
            UnsupportedOperatorError: On unknown ``where_document`` operators
            EmbeddingError: If the query couldn't be embedded
            SimilarityError: If embedding dimensions don't match
            OperationCancelledError: If ``cancel_token`` was cancelled
        """
        if not query_text:
            raise ValidationError("queryText is empty")
        self._validate_query(n_results, where_document)

        with self._store.read() as documents:
            candidates = self._candidates(documents, where, where_document)
            if not candidates:
                return []

            if cancel_token is not None and cancel_token.cancelled:
                raise OperationCancelledError(cancel_token.cause)

            query_vector = self._embed(query_text, "query")
            return self._rank(query_vector, candidates, n_results)

    def query_embedding(
        self,
        embedding: Sequence[float],
        n_results: int,
        where: Mapping[str, str] | None = None,
        where_document: Mapping[str, str] | None = None,
    ) -> list[Result]:
        """Like :meth:`query`, but with a precomputed query embedding."""
        if len(embedding) == 0:
            raise ValidationError("query embedding is empty")
        self._validate_query(n_results, where_document)

        with self._store.read() as documents:
            candidates = self._candidates(documents, where, where_document)
            if not candidates:
                return []
            return self._rank(list(embedding), candidates, n_results)

    @staticmethod
    def _validate_query(n_results: int, where_document: Mapping[str, str] | None) -> None:
        if n_results <= 0:
            raise ValidationError("nResults must be > 0")
        validate_where_document(where_document)

    @staticmethod
    def _candidates(
        documents: Mapping[str, Document],
        where: Mapping[str, str] | None,
        where_document: Mapping[str, str] | None,
    ) -> list[Document]:
        if not documents:
            return []
        return filter_documents(documents.values(), where, where_document)

    @staticmethod
    def _rank(
        query_vector: list[float],
        candidates: list[Document],
        n_results: int,
    ) -> list[Result]:
        try:
            results = rank(query_vector, candidates)
        except SimilarityError as e:
            raise SimilarityError(f"couldn't calculate cosine similarity: {e}") from e
        # Slicing clamps to the number of candidates.
        return results[:n_results]

    def _embed(self, text: str, kind: str) -> list[float]:
        if self._embed_fn is None:
            raise EmbeddingError(
                f"couldn't create embedding of {kind}: "
                f"collection '{self.name}' has no embedding function"
            )
        try:
            vector = self._embed_fn(text)
        except Exception as e:
            raise EmbeddingError(f"couldn't create embedding of {kind}: {e}") from e
        if vector is None or len(vector) == 0:
            raise EmbeddingError(
                f"couldn't create embedding of {kind}: embedding function returned an empty vector"
            )
        return [float(x) for x in vector]
