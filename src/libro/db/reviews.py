# ABOUTME: CRUD operations for reading reviews in the libro catalog.
# ABOUTME: Validates ratings and read dates before anything reaches the reviews table.

import sqlite3
from datetime import date, datetime
from typing import Any

from libro.db.errors import RecordNotFoundError, ValidationError, database_errors
from libro.db.mapping import Review, row_to_review

REVIEW_FIELDS = ("book_id", "date_read", "rating", "review")

MIN_RATING = 1
MAX_RATING = 5


def validate_rating(rating: Any) -> int:
    """Return the rating if it is an integer from 1 to 5, else raise ValidationError."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError(f"Rating must be an integer, got {rating!r}", field="rating")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}", field="rating"
        )
    return rating


def normalize_date(value: str | date | None) -> str:
    """Return an ISO YYYY-MM-DD string, defaulting to today when value is None."""
    if value is None:
        return date.today().isoformat()
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except (AttributeError, ValueError) as exc:
        raise ValidationError(
            f"Date read must be YYYY-MM-DD, got {value!r}", field="date_read"
        ) from exc


class ReviewRepository:
    """Typed CRUD for the reviews table. Every review belongs to one book."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def add_review(
        self,
        book_id: int,
        rating: int,
        review: str,
        date_read: str | date | None = None,
    ) -> int:
        """Add a review for a book.

        Args:
            book_id: The reviewed book.
            rating: Integer from 1 to 5.
            review: Free text.
            date_read: ISO date; today when omitted.

        Returns:
            The row ID of the inserted review.

        Raises:
            ValidationError: If the rating or date is malformed.
            RecordNotFoundError: If the book does not exist.
        """
        review_id = self.insert(book_id, rating, review, date_read)
        with database_errors("reviews", "add_review"):
            self._conn.commit()
        return review_id

    def insert(
        self,
        book_id: int,
        rating: int,
        review: str,
        date_read: str | date | None = None,
    ) -> int:
        """Validate and insert a review without committing."""
        validate_rating(rating)
        date_str = normalize_date(date_read)

        with database_errors("reviews", "add_review"):
            cursor = self._conn.execute("SELECT 1 FROM books WHERE id = ?", (book_id,))
            if cursor.fetchone() is None:
                raise RecordNotFoundError(
                    f"Book with id {book_id} not found", table="books", operation="add_review"
                )
            cursor = self._conn.execute(
                "INSERT INTO reviews (book_id, date_read, rating, review) VALUES (?, ?, ?, ?)",
                (book_id, date_str, rating, review),
            )
        return cursor.lastrowid  # type: ignore[return-value]

    def get_review(self, review_id: int) -> Review | None:
        """Retrieve a review by its row ID."""
        with database_errors("reviews", "get_review"):
            cursor = self._conn.execute(
                "SELECT id, book_id, date_read, rating, review FROM reviews WHERE id = ?",
                (review_id,),
            )
            row = cursor.fetchone()
        return row_to_review(row) if row else None

    def get_reviews(self, book_id: int) -> list[Review]:
        """All reviews of a book, oldest reading first."""
        with database_errors("reviews", "get_reviews"):
            cursor = self._conn.execute(
                "SELECT id, book_id, date_read, rating, review FROM reviews "
                "WHERE book_id = ? ORDER BY date_read, id",
                (book_id,),
            )
            return [row_to_review(row) for row in cursor.fetchall()]

    def update_review(self, review_id: int, **fields: Any) -> None:
        """Update only the given fields of a review.

        Accepts keyword arguments among book_id, date_read, rating and
        review. Calling it with no fields does nothing.

        Raises:
            ValidationError: For unknown fields, a bad rating or a bad date.
            RecordNotFoundError: If the review does not exist.
        """
        if not fields:
            return

        unknown = sorted(set(fields) - set(REVIEW_FIELDS))
        if unknown:
            raise ValidationError(f"Unknown review field(s): {', '.join(unknown)}")
        if "rating" in fields:
            validate_rating(fields["rating"])
        if fields.get("date_read") is not None:
            fields["date_read"] = normalize_date(fields["date_read"])

        set_clause = ", ".join(f"{k} = ?" for k in fields)
        values = [*fields.values(), review_id]

        with database_errors("reviews", "update_review"):
            cursor = self._conn.execute(f"UPDATE reviews SET {set_clause} WHERE id = ?", values)
            self._conn.commit()

        if cursor.rowcount == 0:
            raise RecordNotFoundError(
                f"Review with id {review_id} not found", table="reviews", operation="update_review"
            )

    def delete_review(self, review_id: int) -> None:
        """Delete a review.

        Raises:
            RecordNotFoundError: If the review does not exist.
        """
        with database_errors("reviews", "delete_review"):
            cursor = self._conn.execute("DELETE FROM reviews WHERE id = ?", (review_id,))
            self._conn.commit()

        if cursor.rowcount == 0:
            raise RecordNotFoundError(
                f"Review with id {review_id} not found", table="reviews", operation="delete_review"
            )
