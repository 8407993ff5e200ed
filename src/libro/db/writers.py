# ABOUTME: Writer deduplication and book-writer links for the libro catalog.
# ABOUTME: Maps (name, type) pairs to stable writer ids and records which books they wrote.

import sqlite3

from libro.db.errors import ValidationError, database_errors
from libro.db.mapping import Writer, WriterType, row_to_writer


def as_writer_type(value: str | WriterType) -> WriterType:
    """Coerce a string to WriterType, raising ValidationError for unknown roles."""
    try:
        return WriterType(value)
    except ValueError as exc:
        raise ValidationError(
            f"Writer type must be 'author' or 'translator', got {value!r}", field="type"
        ) from exc


class WriterRegistry:
    """Resolves writer names to ids and maintains the book_writers table.

    Names are matched exactly: no case folding or whitespace normalization,
    so "Ursula K. Le Guin" and "Ursula K Le Guin" are two writers.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def get_or_add_writer(self, name: str, writer_type: str | WriterType) -> int:
        """Return the id of the writer with this name and role, creating it if needed.

        Raises:
            ValidationError: If the name is blank or the type is unknown.
        """
        writer_id = self.resolve(name, writer_type)
        with database_errors("writers", "get_or_add_writer"):
            self._conn.commit()
        return writer_id

    def resolve(self, name: str, writer_type: str | WriterType) -> int:
        """Like get_or_add_writer, but leaves committing to the caller.

        Used by BookRepository to create writers inside a larger transaction.
        """
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Writer name cannot be empty", field="name")
        role = as_writer_type(writer_type)

        with database_errors("writers", "get_or_add_writer"):
            cursor = self._conn.execute(
                "SELECT id FROM writers WHERE name = ? AND type = ?", (name, role.value)
            )
            row = cursor.fetchone()
            if row is not None:
                return row[0]
            cursor = self._conn.execute(
                "INSERT INTO writers (name, type) VALUES (?, ?)", (name, role.value)
            )
        return cursor.lastrowid  # type: ignore[return-value]

    def add_book_writer_link(
        self, book_id: int, writer_id: int, writer_type: str | WriterType
    ) -> None:
        """Link a writer to a book under a role.

        The (book_id, writer_id, type) triple is the primary key of
        book_writers, so linking the same triple twice is an error.

        Raises:
            DatabaseError: If the link already exists or either id is unknown.
        """
        self.link(book_id, writer_id, writer_type)
        with database_errors("book_writers", "add_book_writer_link"):
            self._conn.commit()

    def link(self, book_id: int, writer_id: int, writer_type: str | WriterType) -> None:
        """Insert a book_writers row without committing."""
        role = as_writer_type(writer_type)
        with database_errors("book_writers", "add_book_writer_link"):
            self._conn.execute(
                "INSERT INTO book_writers (book_id, writer_id, type) VALUES (?, ?, ?)",
                (book_id, writer_id, role.value),
            )

    def unlink_all(self, book_id: int, writer_type: str | WriterType) -> None:
        """Remove every link of one role from a book without committing."""
        role = as_writer_type(writer_type)
        with database_errors("book_writers", "unlink"):
            self._conn.execute(
                "DELETE FROM book_writers WHERE book_id = ? AND type = ?", (book_id, role.value)
            )

    def get_book_writers(self, book_id: int) -> list[Writer]:
        """All writers linked to a book, ordered by role then name."""
        with database_errors("writers", "get_book_writers"):
            cursor = self._conn.execute(
                "SELECT w.id, w.name, bw.type FROM writers w "
                "JOIN book_writers bw ON w.id = bw.writer_id "
                "WHERE bw.book_id = ? "
                "ORDER BY bw.type, w.name",
                (book_id,),
            )
            return [row_to_writer(row) for row in cursor.fetchall()]

    def list_writers(self, writer_type: str | WriterType | None = None) -> list[Writer]:
        """All writers, optionally only those of one role, ordered by name."""
        with database_errors("writers", "list_writers"):
            if writer_type is None:
                cursor = self._conn.execute(
                    "SELECT id, name, type FROM writers ORDER BY name, type"
                )
            else:
                cursor = self._conn.execute(
                    "SELECT id, name, type FROM writers WHERE type = ? ORDER BY name",
                    (as_writer_type(writer_type).value,),
                )
            return [row_to_writer(row) for row in cursor.fetchall()]
