"""CLI command for searching trip evidence."""

import logging
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from src.errors import EvidenceError
from src.models.enums import SourceType
from src.service import build_service

console = Console()
app = typer.Typer()


@app.command()
def search(
    query: Annotated[
        str,
        typer.Argument(help="Free-text question about the trip"),
    ],
    trip_id: Annotated[
        str,
        typer.Option("--trip-id", "-t", help="Trip to search"),
    ],
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-k", help="Maximum number of results"),
    ] = None,
    num_candidates: Annotated[
        Optional[int],
        typer.Option("--num-candidates", help="Candidate pool size for the approximate search"),
    ] = None,
    source_types: Annotated[
        Optional[list[SourceType]],
        typer.Option("--source-type", "-s", help="Restrict to these categories (repeatable)"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging"),
    ] = False,
):
    """Retrieve the most relevant evidence for a trip."""
    if verbose:
        logging.basicConfig(level=logging.INFO)
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        service = build_service()
        with console.status("[bold green]Searching..."):
            results = service.retrieve(
                trip_id,
                query,
                limit=limit,
                num_candidates=num_candidates,
                source_types=[s.value for s in source_types] if source_types else None,
            )
    except EvidenceError as e:
        console.print(f"[bold red]Search failed:[/bold red] {e}")
        raise typer.Exit(1)

    if not results:
        console.print(f"[yellow]No evidence found for trip {trip_id}.[/yellow]")
        return

    table = Table(title=f"Evidence for {trip_id}: {query}")
    table.add_column("Score", justify="right", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Text")
    table.add_column("URL", style="dim")
    for r in results:
        table.add_row(f"{r['score']:.4f}", r["title"], r["text"], r["url"])
    console.print(table)
