# ABOUTME: SQLite connection management for the libro catalog.
# ABOUTME: Opens or creates the database, runs migrations, and owns the connection for its lifetime.

import logging
import os
import sqlite3
from pathlib import Path
from types import TracebackType

from libro.db.books import BookRepository
from libro.db.errors import database_errors
from libro.db.mapping import BookCreation, NewBook, NewReview
from libro.db.migrations import SchemaMigrator
from libro.db.reviews import ReviewRepository
from libro.db.writers import WriterRegistry

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".libro" / "libro.db"


class Library:
    """The single owner of an open libro database.

    Holds the connection and the repositories built on it. Use as a context
    manager so the connection is closed on every exit path.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self.writers = WriterRegistry(conn)
        self.books = BookRepository(conn, self.writers)
        self.reviews = ReviewRepository(conn)

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    @property
    def closed(self) -> bool:
        return self._conn is None

    def add_book_with_review(
        self, new_book: NewBook, review: NewReview | None = None
    ) -> BookCreation:
        """Add a book, its writers and an optional first review in one transaction.

        Nothing is written if any part fails.
        """
        with database_errors("books", "add_book_with_review"), self._conn:
            book_id = self.books.insert_new_book(new_book)
            review_id = None
            if review is not None:
                review_id = self.reviews.insert(
                    book_id, review.rating, review.review, review.date_read
                )
        return BookCreation(book_id=book_id, review_id=review_id)

    def close(self) -> None:
        """Close the connection. Closing twice is a no-op."""
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None  # type: ignore[assignment]

    def __enter__(self) -> "Library":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def resolve_db_path(path: Path | None = None) -> Path:
    """Pick the database path: explicit argument, then $LIBRO_DB, then the default."""
    if path is not None:
        return path
    env = os.environ.get("LIBRO_DB")
    return Path(env) if env else DEFAULT_DB_PATH


def open_library(path: Path | None = None) -> Library:
    """Open or create the libro database and bring its schema up to date.

    Creates the database file and parent directories if they don't exist.
    Sets WAL journal mode, enables foreign keys and uses the sqlite3.Row
    factory. Migrations run to completion before the Library is returned.

    Args:
        path: Path to the database file. Defaults to $LIBRO_DB or ~/.libro/libro.db.

    Returns:
        An open Library.

    Raises:
        MigrationError: If the schema cannot be brought up to date. The
            connection is closed before the error propagates.
    """
    db_path = resolve_db_path(path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        version = SchemaMigrator(conn).migrate()
    except BaseException:
        conn.close()
        raise

    logger.debug("Opened %s at schema version %d", db_path, version)
    return Library(conn)
