"""Trip evidence CLI entry point."""

import typer

from src.cli.ingest import ingest
from src.cli.search import search
from src.cli.smoke import smoke

app = typer.Typer(
    name="tripevidence",
    help="Trip evidence store - ingest scraped flight, lodging and web results and search them per trip.",
)

app.command(name="ingest")(ingest)
app.command(name="search")(search)
app.command(name="smoke")(smoke)


if __name__ == "__main__":
    app()
