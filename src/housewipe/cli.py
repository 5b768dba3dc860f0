"""CLI interface for HouseWipe."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from housewipe import __version__
from housewipe.config import load_settings
from housewipe.database.engine import Database
from housewipe.database.repository import ScrapeRunRepository
from housewipe.enrichment.geocoder import open_geocoder
from housewipe.models.pydantic_models import ScrapeRunRead
from housewipe.scrapers.payload import JsonFileExtractor
from housewipe.services.feed_service import FeedService
from housewipe.services.scrape_service import (
    EmptyExtractionError,
    ScrapeCoordinator,
    ScrapeRunInProgressError,
    StoreUnavailableError,
)

app = typer.Typer(
    name="housewipe",
    help="Real-estate listing reconciliation, price tracking and alerts",
    add_completion=False,
)
console = Console()


def output_json(data: Any) -> None:
    """Output JSON to stdout (for programmatic consumption)."""
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def format_price(price: int | None) -> str:
    return f"${price:,}" if price is not None else "-"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"housewipe version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Show debug logging.",
    ),
) -> None:
    """Real-estate listing reconciliation, price tracking and alerts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@app.command()
def init_database(
    db_path: Path | None = typer.Option(
        None,
        "--db",
        "-d",
        help="Path to SQLite database file.",
    ),
) -> None:
    """Initialize the database, creating all tables."""
    console.print("[bold blue]Initializing database...[/bold blue]")

    try:
        database = Database.from_path(db_path)
        console.print(f"[green]Database initialized at: {database.engine.url}[/green]")
        database.dispose()
    except Exception as e:
        console.print(f"[red]Error initializing database: {e}[/red]")
        raise typer.Exit(1) from e


async def run_ingest(
    database: Database,
    payload: Path,
    config_path: Path | None,
    geocode: bool | None,
) -> ScrapeRunRead:
    """Run one pass over a payload file.

    Args:
        database: Store handle.
        payload: JSON file with the scraped listings.
        config_path: Optional settings file.
        geocode: Override for geocoding.enabled (None keeps the setting).

    Returns:
        The completed ScrapeRun.
    """
    settings = load_settings(config_path)
    if geocode is not None:
        settings = settings.model_copy(
            update={"geocoding": settings.geocoding.model_copy(update={"enabled": geocode})}
        )

    async with open_geocoder(settings.geocoding) as geocoder:
        coordinator = ScrapeCoordinator(database, settings, geocoder=geocoder)
        return await coordinator.run_pass(JsonFileExtractor(payload))


@app.command()
def ingest(
    payload: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="JSON file with scraped listings (a list or {\"listings\": [...]}).",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to settings YAML file.",
    ),
    db_path: Path | None = typer.Option(
        None,
        "--db",
        "-d",
        help="Path to SQLite database file.",
    ),
    geocode: bool | None = typer.Option(
        None,
        "--geocode/--no-geocode",
        help="Geocode listings without coordinates (overrides config).",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output the run as JSON.",
    ),
) -> None:
    """Reconcile a payload of scraped listings against the database."""
    database = Database.from_path(db_path)
    try:
        run = asyncio.run(run_ingest(database, payload, config, geocode))
    except ScrapeRunInProgressError as e:
        console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(2) from e
    except (EmptyExtractionError, StoreUnavailableError, ValueError) as e:
        console.print(f"[red]Ingest failed: {e}[/red]")
        raise typer.Exit(1) from e
    finally:
        database.dispose()

    if json_output:
        output_json(run.model_dump(mode="json"))
        return

    console.print("[green]Ingest complete![/green]")
    console.print(f"  Run: #{run.id}")
    console.print(f"  Found: {run.listings_found}")
    console.print(f"  New: {run.listings_new}")
    console.print(f"  Updated: {run.listings_updated}")
    console.print(f"  Price changes: {run.price_changes}")
    console.print(f"  Failed: {run.listings_failed}")
    console.print(f"  Retired: {run.listings_retired}")


@app.command()
def runs(
    limit: int = typer.Option(10, "--limit", "-n", help="Maximum runs to show."),
    db_path: Path | None = typer.Option(None, "--db", "-d", help="Path to SQLite database file."),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """List recent scrape runs."""
    database = Database.from_path(db_path)
    try:
        with database.session() as session:
            recent = [
                ScrapeRunRead.model_validate(run)
                for run in ScrapeRunRepository(session).get_recent_runs(limit=limit)
            ]
    finally:
        database.dispose()

    if json_output:
        output_json([run.model_dump(mode="json") for run in recent])
        return

    if not recent:
        console.print("[yellow]No scrape runs yet.[/yellow]")
        return

    table = Table(title=f"Scrape Runs ({len(recent)} shown)")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Started")
    table.add_column("Status", no_wrap=True, min_width=9)
    table.add_column("Found", justify="right")
    table.add_column("New", justify="right")
    table.add_column("Updated", justify="right")
    table.add_column("Price Δ", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Retired", justify="right")

    status_styles = {"completed": "green", "failed": "red", "running": "yellow"}
    for run in recent:
        style = status_styles.get(run.status.value, "white")
        table.add_row(
            str(run.id),
            run.started_at.strftime("%m-%d %H:%M"),
            f"[{style}]{run.status.value}[/{style}]",
            str(run.listings_found),
            str(run.listings_new),
            str(run.listings_updated),
            str(run.price_changes),
            str(run.listings_failed),
            str(run.listings_retired),
        )

    console.print(table)


@app.command()
def show(
    listing_id: int = typer.Argument(..., help="Listing ID to show."),
    db_path: Path | None = typer.Option(None, "--db", "-d", help="Path to SQLite database file."),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON (for programmatic consumption).",
    ),
) -> None:
    """Show a listing with its price history."""
    database = Database.from_path(db_path)
    try:
        with database.session() as session:
            listing = FeedService(session).get_listing_detail(listing_id)
    finally:
        database.dispose()

    if listing is None:
        if json_output:
            output_json({"error": f"Listing #{listing_id} not found"})
        else:
            console.print(f"[red]Listing #{listing_id} not found.[/red]")
        raise typer.Exit(1)

    if json_output:
        output_json(listing.model_dump(mode="json", exclude={"is_favorite", "notes", "rating"}))
        return

    status = "[green]ACTIVE[/green]" if listing.is_active else "[red]RETIRED[/red]"
    location = ", ".join(part for part in (listing.town, listing.province) if part) or "-"
    details = [
        f"[bold]Address:[/bold] {listing.street}",
        f"[bold]Location:[/bold] {location}",
        f"[bold]URL:[/bold] {listing.source_url}",
        "",
        f"[bold]Price:[/bold] {format_price(listing.price)}",
        f"[bold]Beds / Baths:[/bold] {listing.beds} / {listing.baths:g}",
        f"[bold]Size:[/bold] {f'{listing.sqft:,} sqft' if listing.sqft else '-'}",
        f"[bold]Status:[/bold] {status}",
        "",
        f"[bold]Listed:[/bold] {listing.listed_at.strftime('%Y-%m-%d') if listing.listed_at else '-'}",
        f"[bold]First Seen:[/bold] {listing.first_seen_at.strftime('%Y-%m-%d %H:%M')}",
        f"[bold]Last Seen:[/bold] {listing.last_seen_at.strftime('%Y-%m-%d %H:%M')}",
    ]

    if listing.price_history:
        details.append("")
        details.append("[bold]Price History:[/bold]")
        for point in listing.price_history:
            details.append(f"  {point.recorded_at.strftime('%Y-%m-%d %H:%M')}  {format_price(point.price)}")

    panel = Panel(
        "\n".join(details),
        title=f"[bold blue]Listing #{listing.id}[/bold blue]",
        expand=False,
    )
    console.print(panel)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address."),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port."),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes."),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("housewipe.api.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
