# ABOUTME: The `libro review` command for recording a reading of an existing book.
# ABOUTME: Validates the rating and date through ReviewRepository before saving.

from pathlib import Path

import click
from rich.console import Console

from libro.cli.options import db_option
from libro.db.connection import open_library
from libro.db.errors import LibroError

console = Console()


@click.command("review")
@click.argument("book_id", type=int)
@click.option("--rating", "-r", type=int, required=True, help="Rating from 1 to 5.")
@click.option("--text", "review_text", default="", help="Review text.")
@click.option("--date-read", default=None, help="Date read as YYYY-MM-DD (default: today).")
@db_option
def review(
    book_id: int, rating: int, review_text: str, date_read: str | None, db_path: Path | None
) -> None:
    """Add a review to a book."""
    try:
        with open_library(db_path) as library:
            book = library.books.get_book(book_id)
            if book is None:
                console.print(f"[red]Book {book_id} not found.[/red]")
                raise SystemExit(1)
            review_id = library.reviews.add_review(book_id, rating, review_text, date_read)
    except LibroError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    console.print(f"Added review {review_id} to [bold]{book.title}[/bold].")
