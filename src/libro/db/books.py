# ABOUTME: CRUD and aggregated queries for books in the libro catalog.
# ABOUTME: Joins books with their writers and reviews into BookView records.

import sqlite3
from typing import Any

from libro.db.errors import RecordNotFoundError, ValidationError, database_errors
from libro.db.mapping import (
    BookView,
    NewBook,
    WriterRef,
    WriterType,
    row_to_book_view,
    row_to_review_entry,
)
from libro.db.writers import WriterRegistry, as_writer_type

BOOK_FIELDS = ("title", "pages", "pub_year", "genre")


def _validate_title(title: Any) -> None:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title is required", field="title")


class BookRepository:
    """Wraps a sqlite3 connection and provides typed CRUD for the books table.

    Writer names are resolved through the WriterRegistry so that every book
    pointing at "Frank Herbert" as author shares one writers row.
    """

    def __init__(self, conn: sqlite3.Connection, writers: WriterRegistry) -> None:
        self._conn = conn
        self._writers = writers

    def add_book(
        self,
        title: str,
        pages: int | None = None,
        pub_year: int | None = None,
        genre: str | None = None,
    ) -> int:
        """Add a book without any writers.

        Pages and year are stored as given; range checks belong to the caller.

        Returns:
            The row ID of the inserted book.

        Raises:
            ValidationError: If the title is missing or blank.
        """
        book_id = self.insert(title, pages, pub_year, genre)
        with database_errors("books", "add_book"):
            self._conn.commit()
        return book_id

    def insert(
        self,
        title: str,
        pages: int | None = None,
        pub_year: int | None = None,
        genre: str | None = None,
    ) -> int:
        """Insert a books row without committing."""
        _validate_title(title)
        with database_errors("books", "add_book"):
            cursor = self._conn.execute(
                "INSERT INTO books (title, pages, pub_year, genre) VALUES (?, ?, ?, ?)",
                (title, pages, pub_year, genre),
            )
        return cursor.lastrowid  # type: ignore[return-value]

    def create_book(self, new_book: NewBook) -> int:
        """Add a book and link its authors and translators in one transaction."""
        with database_errors("books", "create_book"), self._conn:
            return self.insert_new_book(new_book)

    def insert_new_book(self, new_book: NewBook) -> int:
        """Insert a book with its writer links without committing."""
        book_id = self.insert(new_book.title, new_book.pages, new_book.pub_year, new_book.genre)
        self._link_writers(book_id, WriterType.AUTHOR, new_book.authors)
        self._link_writers(book_id, WriterType.TRANSLATOR, new_book.translators)
        return book_id

    def set_writers(
        self, book_id: int, writer_type: str | WriterType, names: list[str]
    ) -> None:
        """Replace all of a book's writers of one role with the given names.

        Raises:
            RecordNotFoundError: If the book does not exist.
            ValidationError: If a name is blank or the role is unknown.
        """
        role = as_writer_type(writer_type)
        with database_errors("books", "set_writers"), self._conn:
            self._require_book(book_id, "set_writers")
            self._writers.unlink_all(book_id, role)
            self._link_writers(book_id, role, names)

    def _link_writers(self, book_id: int, role: WriterType, names: list[str]) -> None:
        # dict.fromkeys drops repeated names, which would collide on the link key
        for name in dict.fromkeys(names):
            writer_id = self._writers.resolve(name, role)
            self._writers.link(book_id, writer_id, role)

    def _require_book(self, book_id: int, operation: str) -> None:
        with database_errors("books", operation):
            cursor = self._conn.execute("SELECT 1 FROM books WHERE id = ?", (book_id,))
            found = cursor.fetchone() is not None
        if not found:
            raise RecordNotFoundError(
                f"Book with id {book_id} not found", table="books", operation=operation
            )

    def update_book(self, book_id: int, **fields: Any) -> None:
        """Update only the given fields of a book.

        Accepts keyword arguments among title, pages, pub_year and genre.
        Passing None for a field clears it (except title). Calling it with no
        fields does nothing and does not touch the row.

        Raises:
            ValidationError: For unknown fields or a blank title.
            RecordNotFoundError: If the book does not exist.
        """
        if not fields:
            return

        unknown = sorted(set(fields) - set(BOOK_FIELDS))
        if unknown:
            raise ValidationError(f"Unknown book field(s): {', '.join(unknown)}")
        if "title" in fields:
            _validate_title(fields["title"])

        set_clause = ", ".join(f"{k} = ?" for k in fields)
        values = [*fields.values(), book_id]

        with database_errors("books", "update_book"):
            cursor = self._conn.execute(f"UPDATE books SET {set_clause} WHERE id = ?", values)
            self._conn.commit()

        if cursor.rowcount == 0:
            raise RecordNotFoundError(
                f"Book with id {book_id} not found", table="books", operation="update_book"
            )

    def get_books(self, book_id: int | None = None, year: int | None = None) -> list[BookView]:
        """Fetch books with their writers and reviews.

        With book_id, returns that book alone (or nothing). With year, returns
        books published that year ordered by title. Without a filter, returns
        every book ordered by id. When both are given, book_id wins.

        Writers are ordered by role then name; reviews newest first.
        """
        if book_id is not None:
            where, params, order = "WHERE b.id = ?", (book_id,), "b.id"
        elif year is not None:
            where, params, order = "WHERE b.pub_year = ?", (year,), "b.title, b.id"
        else:
            where, params, order = "", (), "b.id"

        with database_errors("books", "get_books"):
            cursor = self._conn.execute(
                f"SELECT b.id, b.title, b.pages, b.pub_year, b.genre FROM books b "
                f"{where} ORDER BY {order}",
                params,
            )
            views = {row["id"]: row_to_book_view(row) for row in cursor.fetchall()}
            if not views:
                return []

            cursor = self._conn.execute(
                f"SELECT bw.book_id, w.id, w.name, bw.type FROM book_writers bw "
                f"JOIN writers w ON w.id = bw.writer_id "
                f"JOIN books b ON b.id = bw.book_id "
                f"{where} ORDER BY bw.book_id, bw.type, w.name",
                params,
            )
            for row in cursor.fetchall():
                view = views[row["book_id"]]
                ref = WriterRef(id=row["id"], name=row["name"])
                if row["type"] == WriterType.AUTHOR.value:
                    view.authors.append(ref)
                else:
                    view.translators.append(ref)

            cursor = self._conn.execute(
                f"SELECT r.book_id, r.review, r.rating, r.date_read FROM reviews r "
                f"JOIN books b ON b.id = r.book_id "
                f"{where} ORDER BY r.book_id, r.date_read DESC, r.id DESC",
                params,
            )
            for row in cursor.fetchall():
                views[row["book_id"]].reviews.append(row_to_review_entry(row))

        return list(views.values())

    def get_book(self, book_id: int) -> BookView | None:
        """Retrieve one book with its writers and reviews."""
        books = self.get_books(book_id=book_id)
        return books[0] if books else None

    def find_books(self, title: str, author: str) -> list[int]:
        """Ids of books with exactly this title and an author with exactly this name."""
        with database_errors("books", "find_books"):
            cursor = self._conn.execute(
                "SELECT DISTINCT b.id FROM books b "
                "JOIN book_writers bw ON b.id = bw.book_id "
                "JOIN writers w ON w.id = bw.writer_id "
                "WHERE b.title = ? AND w.name = ? AND bw.type = 'author' "
                "ORDER BY b.id",
                (title, author),
            )
            return [row[0] for row in cursor.fetchall()]

    def delete_book(self, book_id: int) -> None:
        """Delete a book together with its reviews and writer links.

        Writers themselves are kept even when no book refers to them anymore.

        Raises:
            RecordNotFoundError: If the book does not exist.
        """
        with database_errors("books", "delete_book"), self._conn:
            self._conn.execute("DELETE FROM reviews WHERE book_id = ?", (book_id,))
            self._conn.execute("DELETE FROM book_writers WHERE book_id = ?", (book_id,))
            cursor = self._conn.execute("DELETE FROM books WHERE id = ?", (book_id,))
            if cursor.rowcount == 0:
                raise RecordNotFoundError(
                    f"Book with id {book_id} not found", table="books", operation="delete_book"
                )
