"""
Durable mirror of collections on the local filesystem.

Layout under a database root::

    <root>/<hash(collection name)>/collection.json
    <root>/<hash(collection name)>/<hash(document id)>.json[.gz]

Names are hashed so arbitrary collection names and document ids map to safe,
fixed-length file names. Files are written whole (temp file + rename), never
appended to.
"""

import gzip
import hashlib
import json
import os
import threading
from pathlib import Path
from typing import Any

from vecstore.document import Document
from vecstore.errors import PersistenceError
from vecstore.utils.logger import get_logger

logger = get_logger(__name__)

METADATA_FILE_NAME = "collection.json"
DOCUMENT_SUFFIX = ".json"
COMPRESSED_SUFFIX = ".json.gz"


def hash_to_hex(name: str) -> str:
    """Return the first 8 bytes of the SHA-256 of ``name`` as 16 hex characters."""
    return hashlib.sha256(name.encode("utf-8")).hexdigest()[:16]


def collection_path(root: Path, name: str) -> Path:
    return root / hash_to_hex(name)


def document_path(collection_dir: Path, doc_id: str, compress: bool = False) -> Path:
    suffix = COMPRESSED_SUFFIX if compress else DOCUMENT_SUFFIX
    return collection_dir / f"{hash_to_hex(doc_id)}{suffix}"


def persist(path: Path, value: Any, compress: bool = False) -> None:
    """
    Write ``value`` as JSON to ``path``.

    Objects exposing ``to_dict()`` are serialized through it. The file is
    written to a temporary sibling first and then renamed over the target, so
    readers never observe a half-written file.

    Args:
        path: Destination file
        value: JSON-serializable value or object with ``to_dict()``
        compress: Gzip the JSON payload

    Raises:
        PersistenceError: If the value can't be serialized or written
    """
    if hasattr(value, "to_dict"):
        value = value.to_dict()

    temp_file = path.with_name(f".{path.name}.{os.getpid()}.{threading.get_ident()}.tmp")
    try:
        payload = json.dumps(value, ensure_ascii=False).encode("utf-8")
        if compress:
            payload = gzip.compress(payload)
        temp_file.write_bytes(payload)
        temp_file.replace(path)
    except (OSError, TypeError, ValueError) as e:
        temp_file.unlink(missing_ok=True)
        raise PersistenceError(f"couldn't persist {path}: {e}") from e


def load(path: Path) -> Any:
    """
    Read a JSON value written by :func:`persist`.

    Compression is detected from the ``.gz`` suffix.

    Raises:
        PersistenceError: If the file is missing or not valid JSON
    """
    try:
        payload = path.read_bytes()
        if path.suffix == ".gz":
            payload = gzip.decompress(payload)
        return json.loads(payload.decode("utf-8"))
    except (OSError, ValueError) as e:
        raise PersistenceError(f"couldn't load {path}: {e}") from e


def load_collection_dir(
    collection_dir: Path,
) -> tuple[str, dict[str, str], list[Document]]:
    """
    Load a persisted collection directory.

    Args:
        collection_dir: Directory holding ``collection.json`` and document files

    Returns:
        Tuple of (collection name, collection metadata, documents)

    Raises:
        PersistenceError: If the metadata file is missing or any file is invalid
    """
    meta = load(collection_dir / METADATA_FILE_NAME)
    if not isinstance(meta, dict) or not meta.get("name"):
        raise PersistenceError(f"invalid collection metadata in {collection_dir}")

    documents: list[Document] = []
    for path in sorted(collection_dir.iterdir()):
        if path.name == METADATA_FILE_NAME or path.name.startswith("."):
            continue
        if not path.name.endswith((DOCUMENT_SUFFIX, COMPRESSED_SUFFIX)):
            continue
        data = load(path)
        try:
            doc = Document.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f"invalid document file {path}: {e}") from e
        if not doc.id:
            raise PersistenceError(f"invalid document file {path}: empty id")
        if not doc.embedding:
            raise PersistenceError(f"invalid document file {path}: empty embedding")
        documents.append(doc)

    logger.debug(
        f"Loaded collection '{meta['name']}' with {len(documents)} document(s)",
        extra={"context": {"path": str(collection_dir)}},
    )
    return meta["name"], dict(meta.get("metadata") or {}), documents
