"""
adapters.cli.main - CLI adapter for the banana API.

Uses the same ServiceFactory as the REST API, so the catalog a command
shows is exactly the catalog the API serves.

Commands
--------
  seed      Replace the catalog with the ten built-in bananas
  bananas   List the catalog (falls back to demo data when the DB is down)
  serve     Run the REST API with uvicorn

Usage
-----
  banana-api seed
  banana-api bananas --rarity legendary
  banana-api serve --reload
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from domain.entities import Rarity, Taste
from domain.models import BananaFilter
from factory import ServiceFactory
from infrastructure.config import Settings, configure_logging
from infrastructure.demo_data import SEED_BANANAS

__version__ = "1.0.0"

console = Console()
app = typer.Typer(
    help="The Invention of the Banana - backend CLI",
    add_completion=False,
    no_args_is_help=True,
)

_RARITY_STYLE = {
    Rarity.COMMON: "white",
    Rarity.UNCOMMON: "green",
    Rarity.RARE: "cyan",
    Rarity.LEGENDARY: "bold magenta",
}


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

async def _make_factory() -> ServiceFactory:
    config = Settings.from_env()
    configure_logging(config)
    factory = ServiceFactory(config)
    await factory.initialize()
    return factory


def _year(year: Optional[int]) -> str:
    if year is None:
        return "?"
    return f"{-year} BCE" if year < 0 else str(year)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"banana-api v{__version__}")
        raise typer.Exit()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command()
def seed() -> None:
    """Clear the catalog and insert the built-in bananas."""
    async def _run() -> None:
        factory = await _make_factory()
        if not factory.db_connected:
            console.print(
                f"[bold red]Cannot open database[/bold red] at {factory.config.db_path}."
            )
            raise typer.Exit(code=1)
        with console.status("[bold cyan]Seeding bananas…", spinner="dots"):
            count = await factory.create_catalog_service().seed(SEED_BANANAS)
        console.print(Panel(
            f"[bold green]Seeded {count} bananas[/bold green] into {factory.config.db_path}.",
            border_style="green",
        ))

    asyncio.run(_run())


@app.command()
def bananas(
    rarity: Optional[Rarity] = typer.Option(None, "--rarity", "-r", help="Filter by rarity."),
    taste: Optional[Taste] = typer.Option(None, "--taste", "-t", help="Filter by taste."),
    page: int = typer.Option(1, min=1, help="Page number."),
    limit: int = typer.Option(20, min=1, max=100, help="Items per page."),
) -> None:
    """List the catalog, rarest first within the page."""
    async def _run() -> None:
        factory = await _make_factory()
        result = await factory.create_catalog_service().list(
            BananaFilter(rarity=rarity, taste=taste), page, limit,
        )

        title = f"Bananas (page {result.page}/{max(result.pages, 1)}, {result.total} total)"
        if result.demo:
            title += " [yellow][demo data][/yellow]"
        table = Table(title=title, box=box.ROUNDED, show_lines=False)
        table.add_column("ID", style="dim")
        table.add_column("Name", style="bold")
        table.add_column("Origin")
        table.add_column("Year", justify="right")
        table.add_column("Taste")
        table.add_column("Rarity")

        items = sorted(result.items, key=lambda i: i.banana.rarity.rank, reverse=True)
        for item in items:
            b = item.banana
            table.add_row(
                b.id or "",
                b.name,
                b.origin,
                _year(b.year_discovered),
                b.taste.value,
                f"[{_RARITY_STYLE[b.rarity]}]{b.rarity.value}[/]",
            )
        console.print(table)

    asyncio.run(_run())


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address."),
    port: Optional[int] = typer.Option(None, help="Port (defaults to PORT or 4000)."),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes."),
) -> None:
    """Run the REST API."""
    import uvicorn

    config = Settings.from_env()
    uvicorn.run(
        "adapters.rest.app:app",
        host=host,
        port=port or config.port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# Global version option
# ---------------------------------------------------------------------------

@app.callback()
def _callback(
    version: bool = typer.Option(
        False, "--version", "-v",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """The Invention of the Banana - backend CLI"""


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
