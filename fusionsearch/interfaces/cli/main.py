"""
CLI Main - Typer-based command-line interface.

Usage:
    fusionsearch init
    fusionsearch seed --clear
    fusionsearch index "Zero-Copy Forks" "Forks allow copy-on-write branching" --meta topic=forks
    fusionsearch search "copy-on-write" --method hybrid
    fusionsearch embed "hello world"
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from fusionsearch.config import FusionSearchError, Settings, get_settings

if TYPE_CHECKING:
    from fusionsearch.domains.search import SearchMethod

app = typer.Typer(
    name="fusionsearch",
    help="FusionSearch - Hybrid BM25 + vector document search",
    add_completion=False,
)
console = Console()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@app.callback()
def cli(
    ctx: typer.Context,
    db: Path | None = typer.Option(None, "--db", help="SQLite database path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Hybrid BM25 + vector document search."""
    settings = get_settings()
    if db is not None:
        settings = settings.model_copy(update={"db_path": db})
    _configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = settings


def _parse_meta(pairs: list[str]) -> dict[str, str]:
    """Parse key=value pairs."""
    metadata: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected key=value, got '{pair}'", param_hint="--meta")
        metadata[key.strip()] = value
    return metadata


@app.command()
def init(ctx: typer.Context) -> None:
    """Create the document store schema."""
    asyncio.run(_init_async(ctx.obj))


async def _init_async(settings: Settings) -> None:
    from fusionsearch.domains.search import SearchService

    async with await SearchService.create(settings) as service:
        vectors = await service.store.has_vector_support()

    console.print("\n[green]Initialization complete![/green]")
    console.print(f"[dim]Database: {settings.db_path}[/dim]")
    console.print(f"[dim]Vector search: {'enabled' if vectors else 'disabled'}[/dim]")


@app.command()
def index(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Document title"),
    content: str = typer.Argument(..., help="Document content"),
    meta: list[str] = typer.Option([], "--meta", "-m", help="Metadata as key=value (repeatable)"),
) -> None:
    """Index a single document."""
    metadata = _parse_meta(meta)
    asyncio.run(_index_async(ctx.obj, title, content, metadata))


async def _index_async(
    settings: Settings,
    title: str,
    content: str,
    metadata: dict[str, str],
) -> None:
    from fusionsearch.domains.search import SearchService

    async with await SearchService.create(settings) as service:
        try:
            doc_id = await service.index_document(title, content, metadata)
        except (FusionSearchError, ValidationError) as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)

    console.print(f"[green]Indexed[/green] '{title}' as document {doc_id}")


@app.command()
def seed(
    ctx: typer.Context,
    clear: bool = typer.Option(False, "--clear", help="Delete existing documents first"),
) -> None:
    """Index the curated sample corpus."""
    asyncio.run(_seed_async(ctx.obj, clear))


async def _seed_async(settings: Settings, clear: bool) -> None:
    from fusionsearch.domains.search import SAMPLE_DOCUMENTS, SearchService

    async with await SearchService.create(settings) as service:
        if clear:
            removed = await service.store.clear_documents()
            console.print(f"[dim]Cleared {removed} documents[/dim]")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            progress.add_task(f"Indexing {len(SAMPLE_DOCUMENTS)} documents...", total=None)
            report = await service.batch_index(SAMPLE_DOCUMENTS)

        total = await service.store.get_document_count()

    table = Table(title="Seed Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Indexed", str(len(report.document_ids)))
    table.add_row("Failed", str(len(report.failures)))
    table.add_row("Documents in store", str(total))
    console.print(table)

    for failure in report.failures:
        console.print(f"[red]Failed:[/red] {failure.title} ({failure.error_code}: {failure.error})")
    if report.failures:
        raise typer.Exit(1)


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Search query"),
    method: str = typer.Option("hybrid", "--method", help="bm25, vector or hybrid"),
    limit: int = typer.Option(10, "--limit", "-n", min=1, max=100, help="Number of results"),
    stats: bool = typer.Option(False, "--stats", help="Show embedding statistics"),
) -> None:
    """Search indexed documents."""
    from fusionsearch.domains.search import SearchMethod

    try:
        search_method = SearchMethod(method.lower())
    except ValueError:
        raise typer.BadParameter("must be one of bm25, vector, hybrid", param_hint="--method")

    asyncio.run(_search_async(ctx.obj, query, search_method, limit, stats))


async def _search_async(
    settings: Settings,
    query: str,
    method: SearchMethod,
    limit: int,
    show_stats: bool,
) -> None:
    from fusionsearch.domains.search import SearchService

    async with await SearchService.create(settings) as service:
        results = await service.search(query, method=method, limit=limit)
        service_stats = await service.stats() if show_stats else None

    if not results:
        console.print(f"[yellow]No results for:[/yellow] {query}")
    else:
        table = Table(title=f"Results for '{query}'")
        table.add_column("#", style="dim")
        table.add_column("ID", style="cyan")
        table.add_column("Title")
        table.add_column("BM25", justify="right")
        table.add_column("Vector", justify="right")
        table.add_column("Score", justify="right", style="green")
        table.add_column("Source", style="dim")
        for rank, result in enumerate(results, 1):
            table.add_row(
                str(rank),
                str(result.doc_id),
                result.title,
                f"{result.bm25_score:.4f}",
                f"{result.vector_score:.4f}",
                f"{result.hybrid_score:.4f}",
                result.source,
            )
        console.print(table)

    if service_stats is not None:
        embedding = service_stats.embedding
        lines = [
            f"[bold]Documents:[/bold] {service_stats.documents}",
            f"[bold]Vector support:[/bold] {service_stats.vector_support}",
            f"[bold]Provider:[/bold] {'configured' if embedding.provider_configured else 'none'}",
            f"[bold]Cache:[/bold] {embedding.cache.size}/{embedding.cache.max_size} "
            f"(hits {embedding.cache.hits}, misses {embedding.cache.misses})",
            f"[bold]Provider calls:[/bold] {embedding.provider_calls}",
            f"[bold]Fallback embeddings:[/bold] {embedding.fallback_embeddings}",
        ]
        if embedding.provider_failures:
            failures = ", ".join(f"{k}={v}" for k, v in sorted(embedding.provider_failures.items()))
            lines.append(f"[bold]Provider failures:[/bold] {failures}")
        console.print(Panel("\n".join(lines), title="Statistics"))


@app.command()
def embed(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="Text to embed"),
) -> None:
    """Embed text and show a summary of the vector."""
    asyncio.run(_embed_async(ctx.obj, text))


async def _embed_async(settings: Settings, text: str) -> None:
    import numpy as np

    from fusionsearch.domains.embedding import EmbeddingGenerator

    generator = EmbeddingGenerator.from_settings(settings)
    try:
        result = await generator.embed_with_source(text)
    except FusionSearchError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)
    finally:
        await generator.close()

    head = ", ".join(f"{v:.4f}" for v in result.vector[:5])
    console.print(
        Panel(
            f"[bold]Dimension:[/bold] {result.vector.shape[0]}\n"
            f"[bold]Norm:[/bold] {float(np.linalg.norm(result.vector)):.4f}\n"
            f"[bold]First values:[/bold] [{head}, ...]\n"
            f"[bold]Strategy:[/bold] {result.source}",
            title="Embedding",
        )
    )


@app.command()
def version() -> None:
    """Show version information."""
    from fusionsearch import __version__

    console.print(f"FusionSearch v{__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
