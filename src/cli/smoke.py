"""CLI command for an end-to-end store and search smoke test."""

import json
import logging
from typing import Annotated

import typer
from rich.console import Console

from src.errors import EvidenceError
from src.models.enums import SourceType
from src.service import build_service

console = Console()
app = typer.Typer()

SMOKE_TRIP_ID = "smoke_trip"
SMOKE_RECORD = {
    "sourceId": "smoke_source",
    "url": "https://example.com/smoke",
    "title": "Smoke test source",
    "text": "Affordable Tokyo itinerary with refundable lodging and transit passes.",
    "tags": ["smoke"],
}
SMOKE_QUERY = "Tokyo refundable lodging"


@app.command()
def smoke(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging"),
    ] = False,
):
    """Seed one web chunk into the smoke trip and search it back."""
    if verbose:
        logging.basicConfig(level=logging.INFO)
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        service = build_service()
        ingested = service.ingest(SMOKE_TRIP_ID, SourceType.WEB, [SMOKE_RECORD])
        results = service.retrieve(SMOKE_TRIP_ID, SMOKE_QUERY, limit=5)
    except EvidenceError as e:
        console.print(f"[bold red]Smoke test failed:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"Ingest: {ingested.as_dict()}")
    console.print_json(json.dumps(results))
    if not results:
        console.print("[bold red]Smoke test returned no results.[/bold red]")
        raise typer.Exit(1)
