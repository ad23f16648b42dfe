"""
Command-line interface for vecstore.

Provides a small front end over a persistent database: ingest JSONL files
into a collection, query a collection, and list stored collections.
"""

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError as ConfigValidationError
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from vecstore.config import DBConfig
from vecstore.db import DB
from vecstore.document import Document
from vecstore.embeddings import get_embedding_function
from vecstore.errors import VecstoreError
from vecstore.utils.logger import get_logger

app = typer.Typer(
    name="vecstore",
    help="Embedded vector database - add documents to collections and query them",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)

DEFAULT_DB_PATH = Path(".vecstore")


def _load_config(
    db_path: Path | None,
    provider: str | None = None,
    model: str | None = None,
    concurrency: int | None = None,
) -> DBConfig:
    embedding = {"provider": provider, "model_name": model}
    config = DBConfig.from_env(
        persist_directory=db_path,
        concurrency=concurrency,
        embedding=embedding,
    )
    if config.persist_directory is None:
        config = config.model_copy(update={"persist_directory": DEFAULT_DB_PATH})
    return config


def _read_documents(input_file: Path) -> list[Document]:
    """Read one JSON document per line; blank lines are skipped."""
    documents: list[Document] = []
    with open(input_file, encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                data: dict[str, Any] = json.loads(line)
                documents.append(Document.from_dict(data))
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                raise ValueError(f"{input_file}:{line_number}: invalid document: {e}") from e
    return documents


def _parse_where(values: list[str] | None) -> dict[str, str]:
    where: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got {item!r}", param_hint="--where")
        where[key] = value
    return where


@app.command()
def add(
    input_file: Annotated[
        Path,
        typer.Argument(
            help="JSONL file with one document per line (id, content, embedding, metadata)",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    collection: Annotated[
        str,
        typer.Option("--collection", "-c", help="Collection name"),
    ],
    db_path: Annotated[
        Path | None,
        typer.Option("--db", help="Database directory (default: $VECSTORE_PERSIST_DIR or .vecstore)"),
    ] = None,
    concurrency: Annotated[
        int | None,
        typer.Option("--concurrency", "-j", help="Documents embedded in parallel"),
    ] = None,
    provider: Annotated[
        str | None,
        typer.Option("--provider", help="Embedding provider (sentence-transformers, ollama)"),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option("--model", "-m", help="Embedding model name"),
    ] = None,
) -> None:
    """
    Add documents from a JSONL file to a collection.

    Documents without an embedding are embedded with the configured provider.
    """
    try:
        config = _load_config(db_path, provider, model, concurrency)
        documents = _read_documents(input_file)
        if not documents:
            console.print("[yellow]No documents found in input file.[/yellow]")
            raise typer.Exit(0)

        db = DB.from_config(config)
        embed = None
        if any(len(doc.embedding) == 0 for doc in documents):
            embed = get_embedding_function(config.embedding)
        target = db.get_or_create_collection(collection, embed=embed)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"Adding {len(documents)} document(s)...", total=None)
            target.add_documents(documents, concurrency=config.concurrency)

        logger.info(
            f"Added {len(documents)} document(s) to '{collection}'",
            extra={"context": {"persist_directory": str(config.persist_directory)}},
        )

        console.print(
            f"[bold green]Success![/bold green] Collection '{collection}' "
            f"now has {target.count()} document(s)"
        )

    except typer.Exit:
        raise
    except (VecstoreError, ValueError, ConfigValidationError, OSError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1) from e


@app.command()
def query(
    text: Annotated[str, typer.Argument(help="Query text")],
    collection: Annotated[
        str,
        typer.Option("--collection", "-c", help="Collection name"),
    ],
    top_k: Annotated[
        int,
        typer.Option("--top-k", "-k", min=1, help="Number of results"),
    ] = 5,
    where: Annotated[
        list[str] | None,
        typer.Option("--where", "-w", help="Metadata filter key=value (repeatable)"),
    ] = None,
    contains: Annotated[
        str | None,
        typer.Option("--contains", help="Only documents whose content contains this text"),
    ] = None,
    not_contains: Annotated[
        str | None,
        typer.Option("--not-contains", help="Only documents whose content lacks this text"),
    ] = None,
    db_path: Annotated[
        Path | None,
        typer.Option("--db", help="Database directory"),
    ] = None,
    provider: Annotated[
        str | None,
        typer.Option("--provider", help="Embedding provider"),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option("--model", "-m", help="Embedding model name"),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print results as JSON"),
    ] = False,
) -> None:
    """Query a collection by text similarity."""
    where_filter = _parse_where(where)
    where_document: dict[str, str] = {}
    if contains is not None:
        where_document["$contains"] = contains
    if not_contains is not None:
        where_document["$not_contains"] = not_contains

    try:
        config = _load_config(db_path, provider, model)
        db = DB.from_config(config)
        target = db.get_collection(collection)
        if target.embedding_function is None:
            target.set_embedding_function(get_embedding_function(config.embedding))

        results = target.query(
            text,
            n_results=top_k,
            where=where_filter or None,
            where_document=where_document or None,
        )
    except (VecstoreError, ValueError, ConfigValidationError, OSError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1) from e

    if as_json:
        typer.echo(json.dumps([r.to_dict() for r in results], ensure_ascii=False, indent=2))
        return

    if not results:
        console.print("[yellow]No matching documents.[/yellow]")
        return

    table = Table(title=f"Top {len(results)} result(s) in '{collection}'")
    table.add_column("#", justify="right")
    table.add_column("ID")
    table.add_column("Similarity", justify="right")
    table.add_column("Content")
    for i, result in enumerate(results, start=1):
        content = result.document.content
        if len(content) > 80:
            content = content[:77] + "..."
        table.add_row(str(i), result.id, f"{result.similarity:.4f}", content)
    console.print(table)


@app.command("collections")
def list_collections(
    db_path: Annotated[
        Path | None,
        typer.Option("--db", help="Database directory"),
    ] = None,
) -> None:
    """List persisted collections with their document counts."""
    try:
        config = _load_config(db_path)
        db = DB.from_config(config)
    except (VecstoreError, ConfigValidationError, OSError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1) from e

    collections = db.list_collections()
    if not collections:
        console.print("[yellow]No collections found.[/yellow]")
        return

    table = Table(title=f"Collections in {config.persist_directory}")
    table.add_column("Name")
    table.add_column("Documents", justify="right")
    table.add_column("Metadata")
    for name in sorted(collections):
        c = collections[name]
        table.add_row(name, str(c.count()), json.dumps(dict(c.metadata), ensure_ascii=False))
    console.print(table)


def main() -> None:
    """Entry point for the console script."""
    app()


if __name__ == "__main__":
    main()
