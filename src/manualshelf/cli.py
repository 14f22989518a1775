"""Command line interface for ManualShelf."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from manualshelf.config import DEFAULT_ROOT, AppConfig
from manualshelf.extraction.llm import DEFAULT_LLM_MODEL, MetadataExtractor
from manualshelf.index.indexer import Indexer
from manualshelf.index.storage import IndexLoadError, read_index
from manualshelf.index.tags import group_tags
from manualshelf.web.app import app as web_app
from manualshelf.web.app import configure


console = Console()
app = typer.Typer(help="ManualShelf - personal library of PDF manuals")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


@app.command()
def index(
    root: Path = typer.Argument(DEFAULT_ROOT, help="Directory containing the manuals."),
    output: Optional[Path] = typer.Argument(None, help="Index file (default: ROOT/index.json)."),
    model: str = typer.Option(DEFAULT_LLM_MODEL, help="Chat model used for metadata extraction"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Scan ROOT and write the JSON index."""
    _setup_logging(verbose)
    config = AppConfig(root=root, index_path=output, llm_model=model)
    resolved_root = config.resolve_root(Path.cwd())
    if not resolved_root.is_dir():
        raise typer.BadParameter(f"Directory not found: {resolved_root}")
    index_path = config.resolve_index_path(Path.cwd())

    indexer = Indexer(
        MetadataExtractor(model=config.llm_model),
        cache_path=config.resolve_cache_path(Path.cwd()),
    )
    console.print(f"Indexing [bold]{resolved_root}[/bold]...")
    stats = indexer.run(resolved_root, index_path)

    if not stats.documents:
        console.print("[yellow]No PDFs found.[/yellow]")
    console.print(
        f"Manuals: {stats.documents}, cached: {stats.cache_hits}, "
        f"extracted: {stats.extracted}, tag files: {stats.tag_files}"
    )
    console.print(f"Index built at [bold]{index_path}[/bold]")


@app.command()
def tags(
    index_file: Path = typer.Argument(DEFAULT_ROOT / "index.json", help="Index file to read"),
) -> None:
    """Show the tag sections derived from an index."""
    try:
        document = read_index(index_file)
    except IndexLoadError as exc:
        raise typer.BadParameter(str(exc)) from exc

    sections = group_tags(manual.tags for manual in document.manuals)
    if not sections:
        console.print("[yellow]No tags found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Section")
    table.add_column("Values")
    for section in sections:
        table.add_row(section.key, ", ".join(section.values))
    console.print(table)


@app.command()
def web(
    root: Path = typer.Option(DEFAULT_ROOT, help="Directory containing the manuals"),
    index_file: Optional[Path] = typer.Option(None, "--index", help="Index file (default: ROOT/index.json)"),
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
) -> None:
    """Start the library viewer."""
    import uvicorn

    config = AppConfig(root=root, index_path=index_file)
    index_path = config.resolve_index_path(Path.cwd())
    if not index_path.exists():
        console.print("[yellow]Warning: index not found, run 'manualshelf index' first.[/yellow]")

    configure(config)
    console.print(f"Starting library viewer on http://{host}:{port} (index: {index_path})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
