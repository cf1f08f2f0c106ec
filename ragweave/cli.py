"""Command-line interface for RAGWeave."""

import asyncio
import sys
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from .config.logging import setup_logging
from .config.settings import Settings
from .core.exceptions import RagWeaveError
from .core.server import RagWeaveServer
from .generation.factory import create_generation_client
from .ingestion.pipeline import IngestionPipeline
from .models.chat import AskRequest
from .rag.embeddings.factory import create_embedding_provider
from .rag.pipeline import AskPipeline
from .rag.vector_store import ChromaVectorStore
from .utils.text_utils import filter_models

T = TypeVar("T")

app = typer.Typer(
    name="ragweave",
    help="RAGWeave - retrieval-augmented generation over heterogeneous documents",
    add_completion=False,
)
collections_app = typer.Typer(help="Manage vector store collections")
app.add_typer(collections_app, name="collections")

console = Console()


def _load_settings(debug: bool = False) -> Settings:
    settings = Settings()
    if debug:
        settings.DEBUG = True
        settings.LOG_LEVEL = "DEBUG"
    setup_logging(settings)
    return settings


def _run(factory: Callable[[], Awaitable[T]]) -> T:
    """Run a coroutine, printing domain errors and exiting with status 1."""
    try:
        return asyncio.run(factory())
    except RagWeaveError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        sys.exit(1)


@app.command("server")
def run_server(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Host to bind to"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to bind to"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode"),
) -> None:
    """Start the RAGWeave HTTP server."""
    try:
        settings = Settings()
        if debug:
            settings.DEBUG = True
            settings.LOG_LEVEL = "DEBUG"
        if host:
            settings.SERVER_HOST = host
        if port:
            settings.SERVER_PORT = port

        console.print(
            f"[green]Starting RAGWeave server on {settings.SERVER_HOST}:{settings.SERVER_PORT}[/green]"
        )

        server = RagWeaveServer(settings)
        asyncio.run(server.start())

    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped by user[/yellow]")
    except Exception as e:
        console.print(f"[red]Error starting server: {e}[/red]")
        sys.exit(1)


@app.command("ingest")
def ingest(
    collection: str = typer.Argument(..., help="Target collection name"),
    data_dir: Optional[Path] = typer.Option(
        None, "--data-dir", "-d", help="Directory to scan (defaults to DATA_DIRECTORY)"
    ),
    pattern: str = typer.Option("**/*", "--pattern", help="Glob pattern for files to ingest"),
    chunk_size: Optional[int] = typer.Option(None, "--chunk-size", help="Chunk size in characters"),
    chunk_overlap: Optional[int] = typer.Option(
        None, "--chunk-overlap", help="Chunk overlap in characters"
    ),
    language: Optional[str] = typer.Option(None, "--language", help="OCR language"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode"),
) -> None:
    """Index local files into a collection."""
    settings = _load_settings(debug)
    directory = (data_dir or settings.DATA_DIRECTORY).resolve()

    paths: List[Path] = sorted(path for path in directory.glob(pattern) if path.is_file())
    if not paths:
        console.print(f"[yellow]No files matching '{pattern}' in {directory}[/yellow]")
        sys.exit(1)

    console.print(f"Indexing {len(paths)} file(s) from {directory} into '{collection}'")

    async def _ingest():
        embedding_provider = create_embedding_provider(settings)
        async with embedding_provider, ChromaVectorStore(settings) as vector_store:
            pipeline = IngestionPipeline(settings, embedding_provider, vector_store)
            return await pipeline.ingest_files(
                collection,
                paths,
                chunk_size if chunk_size is not None else settings.DEFAULT_CHUNK_SIZE,
                chunk_overlap if chunk_overlap is not None else settings.DEFAULT_CHUNK_OVERLAP,
                language,
            )

    report = _run(_ingest)

    table = Table(title=f"Ingestion into '{report.collection}'")
    table.add_column("File")
    table.add_column("Documents", justify="right")
    table.add_column("Chunks", justify="right")
    table.add_column("Status")
    for result in report.files:
        status = "[green]ok[/green]" if result.succeeded else f"[red]{result.error}[/red]"
        table.add_row(result.name, str(result.documents), str(result.chunks), status)
    console.print(table)

    if len(report.failed) == len(report.files):
        console.print("[red]Error: no file could be indexed[/red]")
        sys.exit(1)


@app.command("ask")
def ask(
    query: str = typer.Argument(..., help="The question"),
    collections: List[str] = typer.Option(
        ..., "--collection", "-c", help="Collection to search (repeatable)"
    ),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="'provider:model' identifier"),
    temperature: Optional[float] = typer.Option(None, "--temperature", "-t"),
    max_tokens: Optional[int] = typer.Option(None, "--max-tokens"),
    docs: Optional[int] = typer.Option(None, "--docs", help="Matches retrieved per collection"),
    language: Optional[str] = typer.Option(None, "--language", help="Answer language"),
    no_rerank: bool = typer.Option(False, "--no-rerank", help="Keep per-collection order"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode"),
) -> None:
    """Answer a question from one or more collections."""
    settings = _load_settings(debug)

    try:
        request = AskRequest(
            collections=collections,
            model=model or settings.DEFAULT_CHAT_MODEL,
            query=query,
            temperature=temperature,
            max_tokens=max_tokens,
            number_of_vector_docs=docs,
            language=language,
            rerank=not no_rerank,
        )
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    async def _ask():
        embedding_provider = create_embedding_provider(settings)
        async with embedding_provider, ChromaVectorStore(settings) as vector_store:
            pipeline = AskPipeline(settings, embedding_provider, vector_store)
            return await pipeline.ask(request)

    response = _run(_ask)
    answer = response.answer

    console.print(answer.content)
    if answer.sources:
        console.print("\n[bold]Sources[/bold]")
        for source in answer.sources:
            location = source.get("page") or source.get("sheet") or ""
            suffix = f" ({location})" if location else ""
            console.print(
                f"- {source.get('source', source['id'])}{suffix} "
                f"[dim]{source.get('collection', '')}[/dim]"
            )


@collections_app.command("list")
def list_collections() -> None:
    """List collections."""
    settings = _load_settings()

    async def _list():
        async with ChromaVectorStore(settings) as vector_store:
            return await vector_store.list_collections()

    records = _run(_list)

    table = Table(title="Collections")
    table.add_column("ID")
    table.add_column("Name")
    for record in records:
        table.add_row(record.id, record.name)
    console.print(table)


@collections_app.command("create")
def create_collection(name: str = typer.Argument(..., help="Collection name")) -> None:
    """Create a collection (the name is slugified)."""
    settings = _load_settings()

    async def _create():
        async with ChromaVectorStore(settings) as vector_store:
            return await vector_store.create_collection(name)

    record = _run(_create)
    console.print(f"[green]Created collection '{record.name}' ({record.id})[/green]")


@collections_app.command("delete")
def delete_collection(collection_id: str = typer.Argument(..., help="Collection id")) -> None:
    """Delete a collection by id."""
    settings = _load_settings()

    async def _delete():
        async with ChromaVectorStore(settings) as vector_store:
            await vector_store.delete_collection(collection_id)

    _run(_delete)
    console.print(f"[green]Deleted collection {collection_id}[/green]")


@app.command("models")
def list_models(
    provider: str = typer.Argument(..., help="Provider: 'ollama' or 'openai'"),
    pattern: Optional[str] = typer.Option(None, "--filter", help="Regular expression filter"),
) -> None:
    """List chat models available on a provider."""
    settings = _load_settings()

    async def _models():
        client = create_generation_client(settings, provider)
        async with client:
            names = await client.list_models()
        return filter_models(names, pattern or settings.MODEL_FILTER)

    for name in _run(_models):
        console.print(name)


@app.command("init")
def init_project(
    directory: Path = typer.Argument(Path("."), help="Directory to initialize"),
    force: bool = typer.Option(False, "--force", help="Overwrite existing files"),
) -> None:
    """Initialize a new RAGWeave project."""
    directory = directory.resolve()

    if not directory.exists():
        directory.mkdir(parents=True)

    config_file = directory / ".env"
    data_dir = directory / "data"

    if config_file.exists() and not force:
        console.print(f"[yellow]Configuration file already exists: {config_file}[/yellow]")
        console.print("Use --force to overwrite")
        return

    data_dir.mkdir(exist_ok=True)

    config_content = """# RAGWeave Configuration
SERVER_HOST=localhost
SERVER_PORT=8080
DEBUG=false
LOG_LEVEL=INFO
DATA_DIRECTORY=./data

# Backends
OLLAMA_BASE_URL=http://localhost:11434
# OPENAI_API_KEY=
CHROMA_BASE_URL=http://localhost:8000

# Models
EMBEDDING_PROVIDER=ollama
EMBEDDING_MODEL=nomic-embed-text
DEFAULT_CHAT_MODEL=ollama:llama4
"""

    config_file.write_text(config_content)
    console.print(f"[green]Initialized RAGWeave project in {directory}[/green]")
    console.print(f"Configuration file: {config_file}")
    console.print(f"Data directory: {data_dir}")


@app.command("version")
def show_version() -> None:
    """Show version information."""
    from . import __version__
    console.print(f"RAGWeave version {__version__}")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
