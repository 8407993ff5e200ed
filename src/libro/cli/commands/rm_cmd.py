# ABOUTME: The `libro rm` command for deleting a book from the reading log.
# ABOUTME: Removes the book's reviews and writer links along with it.

from pathlib import Path

import click
from rich.console import Console

from libro.cli.options import db_option
from libro.db.connection import open_library
from libro.db.errors import LibroError

console = Console()


@click.command("rm")
@click.argument("book_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Delete without asking for confirmation.")
@db_option
def rm(book_id: int, yes: bool, db_path: Path | None) -> None:
    """Delete a book and its reviews."""
    try:
        with open_library(db_path) as library:
            book = library.books.get_book(book_id)
            if book is None:
                console.print(f"[red]Book {book_id} not found.[/red]")
                raise SystemExit(1)
            if not yes and not click.confirm(
                f"Delete '{book.title}' and {len(book.reviews)} review(s)?"
            ):
                console.print("Aborted.")
                return
            library.books.delete_book(book_id)
    except LibroError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    console.print(f"Deleted [bold]{book.title}[/bold].")
