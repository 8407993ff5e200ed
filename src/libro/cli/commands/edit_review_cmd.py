# ABOUTME: The `libro edit-review` command for changing parts of an existing review.
# ABOUTME: Only the options given on the command line are written back.

from pathlib import Path

import click
from rich.console import Console

from libro.cli.options import db_option
from libro.db.connection import open_library
from libro.db.errors import LibroError

console = Console()


@click.command("edit-review")
@click.argument("review_id", type=int)
@click.option("--rating", "-r", type=int, default=None, help="New rating from 1 to 5.")
@click.option("--text", "review_text", default=None, help="New review text.")
@click.option("--date-read", default=None, help="New read date as YYYY-MM-DD.")
@db_option
def edit_review(
    review_id: int,
    rating: int | None,
    review_text: str | None,
    date_read: str | None,
    db_path: Path | None,
) -> None:
    """Edit the rating, text, or read date of a review."""
    fields = {
        name: value
        for name, value in (("rating", rating), ("review", review_text), ("date_read", date_read))
        if value is not None
    }
    if not fields:
        console.print("[yellow]Nothing to change.[/yellow]")
        return

    try:
        with open_library(db_path) as library:
            library.reviews.update_review(review_id, **fields)
    except LibroError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    console.print(f"Updated review {review_id}: {', '.join(sorted(fields))}.")
