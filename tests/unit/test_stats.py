# ABOUTME: Unit tests for reading statistics over BookView records.
# ABOUTME: Builds views by hand so no database is needed.

from libro.core.stats import author_stats, books_read_by_year, books_read_in_year, summarize
from libro.db.mapping import BookView, ReviewEntry, WriterRef

HERBERT = WriterRef(id=1, name="Frank Herbert")
LE_GUIN = WriterRef(id=2, name="Ursula K. Le Guin")


def _books() -> list[BookView]:
    return [
        BookView(
            id=1,
            title="Dune",
            genre="Sci-Fi",
            authors=[HERBERT],
            reviews=[
                ReviewEntry(review="Again.", rating=5, date_read="2023-07-01"),
                ReviewEntry(review="First.", rating=3, date_read="2019-02-11"),
            ],
        ),
        BookView(id=2, title="Dune Messiah", genre="Sci-Fi", authors=[HERBERT]),
        BookView(
            id=3,
            title="The Lathe of Heaven",
            genre="Fantasy",
            authors=[LE_GUIN],
            reviews=[ReviewEntry(review="Dreamy.", rating=4, date_read="2023-01-20")],
        ),
    ]


class TestSummarize:
    """Tests for summarize."""

    def test_headline_numbers(self) -> None:
        summary = summarize(_books())
        assert summary.total_books == 3
        assert summary.reviewed_books == 2
        assert summary.average_rating == 4.0
        assert summary.unique_authors == 2
        assert summary.genres == {"Sci-Fi": 2, "Fantasy": 1}

    def test_empty_library(self) -> None:
        summary = summarize([])
        assert summary.total_books == 0
        assert summary.average_rating is None


class TestReadingYears:
    """Tests for books_read_by_year and books_read_in_year."""

    def test_counts_per_year(self) -> None:
        assert books_read_by_year(_books()) == {"2019": 1, "2023": 2}

    def test_books_in_year(self) -> None:
        titles = [b.title for b in books_read_in_year(_books(), 2023)]
        assert titles == ["Dune", "The Lathe of Heaven"]

    def test_year_without_reading(self) -> None:
        assert books_read_in_year(_books(), 2001) == []


class TestAuthorStats:
    """Tests for author_stats."""

    def test_ranked_by_book_count(self) -> None:
        stats = author_stats(_books())
        assert [(s.name, s.books, s.reviews) for s in stats] == [
            ("Frank Herbert", 2, 2),
            ("Ursula K. Le Guin", 1, 1),
        ]
        assert stats[0].average_rating == 4.0

    def test_limit(self) -> None:
        assert [s.name for s in author_stats(_books(), limit=1)] == ["Frank Herbert"]
