# ABOUTME: Typed records for books, writers, and reviews, and SQLite row conversion.
# ABOUTME: Every query result is turned into one of these dataclasses, never a bare tuple.

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class WriterType(str, Enum):
    """The role a writer plays for a book."""

    AUTHOR = "author"
    TRANSLATOR = "translator"


@dataclass(frozen=True)
class WriterRef:
    """A writer as it appears inside a BookView: id and name only."""

    id: int
    name: str


@dataclass(frozen=True)
class Writer:
    """A row of the writers table."""

    id: int
    name: str
    type: WriterType


@dataclass
class Review:
    """A row of the reviews table."""

    id: int
    book_id: int
    date_read: str | None
    rating: int | None
    review: str | None


@dataclass
class ReviewEntry:
    """A review as it appears inside a BookView."""

    review: str | None
    rating: int | None
    date_read: str | None


@dataclass
class BookView:
    """A book aggregated with its writers and reviews.

    Authors and translators come from book_writers split by role; reviews
    are newest first.
    """

    id: int
    title: str
    pages: int | None = None
    pub_year: int | None = None
    genre: str | None = None
    authors: list[WriterRef] = field(default_factory=list)
    translators: list[WriterRef] = field(default_factory=list)
    reviews: list[ReviewEntry] = field(default_factory=list)

    @property
    def author(self) -> str:
        """Convenience property: joined author names for display."""
        return ", ".join(a.name for a in self.authors)

    @property
    def translator(self) -> str:
        """Convenience property: joined translator names for display."""
        return ", ".join(t.name for t in self.translators)


@dataclass
class NewBook:
    """Input for creating a book together with its writers."""

    title: str
    authors: list[str] = field(default_factory=list)
    translators: list[str] = field(default_factory=list)
    pages: int | None = None
    pub_year: int | None = None
    genre: str | None = None


@dataclass
class NewReview:
    """Input for the first review of a book created with Library.add_book_with_review."""

    rating: int
    review: str
    date_read: str | None = None


@dataclass
class BookCreation:
    """Ids produced by Library.add_book_with_review."""

    book_id: int
    review_id: int | None = None


def row_to_book_view(row: Any) -> BookView:
    """Convert a books row to a BookView with empty writer and review lists."""
    return BookView(
        id=row["id"],
        title=row["title"],
        pages=row["pages"],
        pub_year=row["pub_year"],
        genre=row["genre"],
    )


def row_to_writer(row: Any) -> Writer:
    """Convert a writers row to a Writer."""
    return Writer(id=row["id"], name=row["name"], type=WriterType(row["type"]))


def row_to_review(row: Any) -> Review:
    """Convert a reviews row to a Review."""
    return Review(
        id=row["id"],
        book_id=row["book_id"],
        date_read=row["date_read"],
        rating=row["rating"],
        review=row["review"],
    )


def row_to_review_entry(row: Any) -> ReviewEntry:
    """Convert a reviews row to the shorter ReviewEntry used in BookView."""
    return ReviewEntry(review=row["review"], rating=row["rating"], date_read=row["date_read"])
