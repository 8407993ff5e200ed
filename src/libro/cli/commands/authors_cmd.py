# ABOUTME: The `libro authors` command for ranking the most-read authors.
# ABOUTME: Counts books and reviews per author from the aggregated catalog.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from libro.cli.options import db_option
from libro.core.stats import author_stats
from libro.db.connection import open_library
from libro.db.errors import LibroError

console = Console()


@click.command("authors")
@click.option("--limit", type=int, default=10, show_default=True, help="How many authors to show.")
@db_option
def authors(limit: int, db_path: Path | None) -> None:
    """Show the authors with the most books in the log."""
    try:
        with open_library(db_path) as library:
            books = library.books.get_books()
    except LibroError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    ranked = author_stats(books, limit=limit)
    if not ranked:
        console.print("[yellow]No authors in the library.[/yellow]")
        return

    table = Table(title=f"Top {len(ranked)} authors")
    table.add_column("Author", style="bold")
    table.add_column("Books", justify="right")
    table.add_column("Reviews", justify="right")
    table.add_column("Avg rating", justify="right")
    for stats in ranked:
        average = f"{stats.average_rating:.1f}" if stats.average_rating is not None else "-"
        table.add_row(stats.name, str(stats.books), str(stats.reviews), average)
    console.print(table)
