# ABOUTME: The `libro add` command for adding a book, its writers, and an optional review.
# ABOUTME: Everything is written in one transaction so a bad review leaves no half-added book.

from pathlib import Path

import click
from rich.console import Console

from libro.cli.options import db_option
from libro.db.connection import open_library
from libro.db.errors import LibroError
from libro.db.mapping import NewBook, NewReview

console = Console()


@click.command("add")
@click.argument("title")
@click.option("--author", "-a", "authors", multiple=True, help="Author name (repeatable).")
@click.option(
    "--translator", "-t", "translators", multiple=True, help="Translator name (repeatable)."
)
@click.option("--pages", type=int, default=None, help="Number of pages.")
@click.option("--year", "pub_year", type=int, default=None, help="Publication year.")
@click.option("--genre", default=None, help="Genre, e.g. Fiction or Nonfiction.")
@click.option("--rating", type=int, default=None, help="Rating from 1 to 5; adds a review.")
@click.option("--review", "review_text", default="", help="Review text.")
@click.option("--date-read", default=None, help="Date read as YYYY-MM-DD (default: today).")
@db_option
def add(
    title: str,
    authors: tuple[str, ...],
    translators: tuple[str, ...],
    pages: int | None,
    pub_year: int | None,
    genre: str | None,
    rating: int | None,
    review_text: str,
    date_read: str | None,
    db_path: Path | None,
) -> None:
    """Add a book to the reading log."""
    new_book = NewBook(
        title=title,
        authors=list(authors),
        translators=list(translators),
        pages=pages,
        pub_year=pub_year,
        genre=genre,
    )
    new_review = None
    if rating is not None:
        new_review = NewReview(rating=rating, review=review_text, date_read=date_read)

    try:
        with open_library(db_path) as library:
            created = library.add_book_with_review(new_book, new_review)
    except LibroError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    console.print(f"Added [bold]{title}[/bold] with id {created.book_id}.")
    if created.review_id is not None:
        console.print(f"Added review {created.review_id}.")
