# ABOUTME: Integration tests for the catalog across open/close cycles.
# ABOUTME: Validates that books, writers, and reviews persist and stay linked after reopening.

from pathlib import Path

from libro.db.connection import open_library
from libro.db.mapping import NewBook, NewReview


class TestDatabaseLifecycle:
    """Integration tests for full DB lifecycle."""

    def test_create_insert_reopen_query(self, db_path: Path) -> None:
        """Add a book with a review, close, reopen, and read it back aggregated."""
        with open_library(db_path) as library:
            created = library.add_book_with_review(
                NewBook(
                    title="The Name of the Rose",
                    authors=["Umberto Eco"],
                    translators=["William Weaver"],
                    pages=536,
                    pub_year=1980,
                    genre="Mystery",
                ),
                NewReview(rating=5, review="Labyrinthine.", date_read="2021-11-02"),
            )

        with open_library(db_path) as library:
            book = library.books.get_book(created.book_id)

        assert book is not None
        assert book.author == "Umberto Eco"
        assert book.translator == "William Weaver"
        assert [(r.rating, r.date_read) for r in book.reviews] == [(5, "2021-11-02")]

    def test_writers_shared_across_sessions(self, db_path: Path) -> None:
        """A writer added in one session is reused, not duplicated, in the next."""
        with open_library(db_path) as library:
            library.books.create_book(NewBook("Foucault's Pendulum", authors=["Umberto Eco"]))

        with open_library(db_path) as library:
            library.books.create_book(NewBook("Baudolino", authors=["Umberto Eco"]))
            writers = library.writers.list_writers()

        assert [w.name for w in writers] == ["Umberto Eco"]

    def test_rolled_back_work_is_not_persisted(self, db_path: Path) -> None:
        """Uncommitted writes are discarded when the library closes."""
        with open_library(db_path) as library:
            library.books.insert("Draft")

        with open_library(db_path) as library:
            assert library.books.get_books() == []

    def test_delete_persists(self, db_path: Path) -> None:
        with open_library(db_path) as library:
            created = library.add_book_with_review(
                NewBook("Baudolino", authors=["Umberto Eco"]),
                NewReview(rating=3, review="Tall tales."),
            )
            library.books.delete_book(created.book_id)

        with open_library(db_path) as library:
            assert library.books.get_books() == []
            assert library.reviews.get_review(created.review_id) is None  # type: ignore[arg-type]
