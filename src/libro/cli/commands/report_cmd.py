# ABOUTME: The `libro report` command for reading statistics.
# ABOUTME: Prints a catalog summary, readings per year, or the books read in one year.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from libro.cli.options import db_option
from libro.core.stats import books_read_by_year, books_read_in_year, summarize
from libro.db.connection import open_library
from libro.db.errors import LibroError

console = Console()


@click.command("report")
@click.option("--year", type=int, default=None, help="List the books read in this year.")
@click.option("--years", is_flag=True, help="Show how many books were read each year.")
@db_option
def report(year: int | None, years: bool, db_path: Path | None) -> None:
    """Show statistics about the reading log."""
    try:
        with open_library(db_path) as library:
            books = library.books.get_books()
    except LibroError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    if not books:
        console.print("[yellow]No books in the library.[/yellow]")
        return

    if year is not None:
        read = books_read_in_year(books, year)
        if not read:
            console.print(f"[yellow]No books read in {year}.[/yellow]")
            return
        table = Table(title=f"Books read in {year}")
        table.add_column("Title", style="bold")
        table.add_column("Author")
        table.add_column("Rating", width=6)
        table.add_column("Date Read")
        prefix = f"{year:04d}"
        for book in read:
            entry = next(r for r in book.reviews if r.date_read and r.date_read.startswith(prefix))
            rating = str(entry.rating) if entry.rating is not None else "-"
            table.add_row(book.title, book.author, rating, entry.date_read or "")
        console.print(table)
        return

    if years:
        counts = books_read_by_year(books)
        if not counts:
            console.print("[yellow]No reviews with read dates yet.[/yellow]")
            return
        table = Table(title="Books read by year")
        table.add_column("Year")
        table.add_column("Count", justify="right")
        for read_year, count in counts.items():
            table.add_row(read_year, str(count))
        console.print(table)
        return

    summary = summarize(books)
    average = f"{summary.average_rating:.1f}" if summary.average_rating is not None else "N/A"
    console.print(f"[bold green]Library statistics ({summary.total_books} books)[/bold green]")
    console.print(f"Books with reviews: {summary.reviewed_books}")
    console.print(f"Average rating: {average}")
    console.print(f"Unique authors: {summary.unique_authors}")
    if summary.genres:
        table = Table(title="Genres")
        table.add_column("Genre")
        table.add_column("Books", justify="right")
        for genre, count in summary.genres.items():
            table.add_row(genre, str(count))
        console.print(table)
