"""CLI command for ingesting scraped travel records."""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from src.errors import EvidenceError
from src.models.enums import SourceType
from src.service import build_service

console = Console()
app = typer.Typer()


def load_records(path: Path) -> list[dict]:
    """Load a JSON array of records, or a ``{"records": [...]}`` object."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("records", [])
    if not isinstance(data, list):
        raise typer.BadParameter("expected a JSON array of records", param_hint="FILE")
    return data


@app.command()
def ingest(
    file: Annotated[
        Path,
        typer.Argument(help="JSON file holding an array of scraped records", exists=True, dir_okay=False),
    ],
    trip_id: Annotated[
        str,
        typer.Option("--trip-id", "-t", help="Trip that owns the evidence"),
    ],
    source_type: Annotated[
        SourceType,
        typer.Option("--source-type", "-s", help="Record category"),
    ] = SourceType.WEB,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging"),
    ] = False,
):
    """Ingest scraped records into the evidence store."""
    if verbose:
        logging.basicConfig(level=logging.INFO)
    else:
        logging.basicConfig(level=logging.WARNING)

    records = load_records(file)

    console.print("[bold]Trip Evidence Ingestion[/bold]")
    console.print(f"Trip: {trip_id}  Source type: {source_type.value}  Records: {len(records)}")
    console.print()

    try:
        service = build_service()
        with console.status("[bold green]Embedding and storing..."):
            result = service.ingest(trip_id, source_type, records)
    except EvidenceError as e:
        console.print(f"[bold red]Ingestion failed:[/bold red] {e}")
        raise typer.Exit(1)

    console.print("[bold green]Ingestion complete![/bold green]")
    console.print(f"  Inserted: {result.inserted}")
    console.print(f"  Replaced: {result.replaced}")
    console.print(f"  Skipped (unchanged): {result.skipped}")
    console.print(f"  Total in store: {service.store.count} chunks")
