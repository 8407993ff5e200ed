# ABOUTME: Reading statistics computed from aggregated BookView records.
# ABOUTME: Feeds the `libro report` and `libro authors` commands; pure functions, no database access.

from collections import Counter
from dataclasses import dataclass, field

from libro.db.mapping import BookView


@dataclass
class LibrarySummary:
    """Headline numbers for the whole catalog."""

    total_books: int = 0
    reviewed_books: int = 0
    average_rating: float | None = None
    unique_authors: int = 0
    genres: dict[str, int] = field(default_factory=dict)


@dataclass
class AuthorStats:
    """How much of one author's work has been read and how it was rated."""

    name: str
    books: int = 0
    reviews: int = 0
    average_rating: float | None = None


def summarize(books: list[BookView]) -> LibrarySummary:
    """Count books, reviewed books, distinct authors and genres, and average all ratings."""
    ratings = [r.rating for b in books for r in b.reviews if r.rating is not None]
    genres = Counter(b.genre for b in books if b.genre)
    return LibrarySummary(
        total_books=len(books),
        reviewed_books=sum(1 for b in books if b.reviews),
        average_rating=sum(ratings) / len(ratings) if ratings else None,
        unique_authors=len({a.id for b in books for a in b.authors}),
        genres=dict(genres.most_common()),
    )


def books_read_by_year(books: list[BookView]) -> dict[str, int]:
    """Number of readings per calendar year of date_read, oldest year first."""
    counts: Counter[str] = Counter()
    for book in books:
        for review in book.reviews:
            if review.date_read:
                counts[review.date_read[:4]] += 1
    return dict(sorted(counts.items()))


def books_read_in_year(books: list[BookView], year: int) -> list[BookView]:
    """Books with at least one review read during the given year."""
    prefix = f"{year:04d}"
    return [
        b for b in books if any(r.date_read and r.date_read.startswith(prefix) for r in b.reviews)
    ]


def author_stats(books: list[BookView], limit: int | None = None) -> list[AuthorStats]:
    """Per-author book and review counts, most books first, then by name."""
    by_author: dict[int, AuthorStats] = {}
    ratings: dict[int, list[int]] = {}
    for book in books:
        for author in book.authors:
            stats = by_author.setdefault(author.id, AuthorStats(name=author.name))
            stats.books += 1
            stats.reviews += len(book.reviews)
            ratings.setdefault(author.id, []).extend(
                r.rating for r in book.reviews if r.rating is not None
            )

    for author_id, stats in by_author.items():
        values = ratings[author_id]
        stats.average_rating = sum(values) / len(values) if values else None

    ranked = sorted(by_author.values(), key=lambda s: (-s.books, s.name))
    return ranked[:limit] if limit is not None else ranked
