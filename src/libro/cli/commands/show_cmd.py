# ABOUTME: The `libro show` command for listing books or showing one book in detail.
# ABOUTME: Renders Rich tables from the aggregated BookView records.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from libro.cli.options import db_option
from libro.db.connection import open_library
from libro.db.errors import LibroError
from libro.db.mapping import BookView

console = Console()


@click.command("show")
@click.argument("book_id", type=int, required=False)
@click.option("--year", type=int, default=None, help="Only books published in this year.")
@db_option
def show(book_id: int | None, year: int | None, db_path: Path | None) -> None:
    """List books, or show one book with its reviews."""
    try:
        with open_library(db_path) as library:
            books = library.books.get_books(book_id=book_id, year=year)
    except LibroError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    if book_id is not None:
        if not books:
            console.print(f"[red]Book {book_id} not found.[/red]")
            raise SystemExit(1)
        _print_detail(books[0])
        return

    if not books:
        console.print("[yellow]No books in the library.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("Year", width=6)
    table.add_column("Genre")
    table.add_column("Rating", width=6)

    for book in books:
        latest = book.reviews[0] if book.reviews else None
        table.add_row(
            str(book.id),
            book.title,
            book.author or "[dim]unknown[/dim]",
            str(book.pub_year) if book.pub_year is not None else "",
            book.genre or "",
            str(latest.rating) if latest and latest.rating is not None else "-",
        )

    console.print(table)
    console.print(f"\n[dim]{len(books)} book(s)[/dim]")


def _print_detail(book: BookView) -> None:
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=12)
    table.add_column("Value")

    table.add_row("ID", str(book.id))
    table.add_row("Title", book.title)
    table.add_row("Author", book.author or "unknown")
    if book.translators:
        table.add_row("Translator", book.translator)
    if book.pages is not None:
        table.add_row("Pages", str(book.pages))
    if book.pub_year is not None:
        table.add_row("Year", str(book.pub_year))
    if book.genre:
        table.add_row("Genre", book.genre)
    console.print(table)

    if not book.reviews:
        console.print("\n[dim]No reviews yet.[/dim]")
        return

    for entry in book.reviews:
        stars = "★" * (entry.rating or 0)
        console.print(f"\n[bold]{entry.date_read or '?'}[/bold]  [yellow]{stars}[/yellow]")
        if entry.review:
            console.print(entry.review)
