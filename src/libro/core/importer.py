# ABOUTME: Record-level import of books and reviews into the libro catalog.
# ABOUTME: Upserts books keyed by title and first author, then adds or updates their review.

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from libro.db.connection import Library
from libro.db.errors import LibroError, ValidationError
from libro.db.mapping import NewBook, WriterType
from libro.db.reviews import normalize_date, validate_rating
from libro.db.writers import as_writer_type

logger = logging.getLogger(__name__)


@dataclass
class ImportRecord:
    """One book with an optional review, as produced by a converter such as a markdown parser."""

    title: str
    writers: list[tuple[str, WriterType | str]] = field(default_factory=list)
    genre: str | None = None
    pub_year: int | None = None
    pages: int | None = None
    date_read: str | None = None
    rating: int | None = None
    review: str | None = None

    def names(self, writer_type: WriterType) -> list[str]:
        """Writer names with the given role, in record order."""
        return [name for name, kind in self.writers if as_writer_type(kind) is writer_type]

    @property
    def first_author(self) -> str | None:
        authors = self.names(WriterType.AUTHOR)
        return authors[0] if authors else None

    @property
    def has_review(self) -> bool:
        return self.rating is not None and self.date_read is not None


@dataclass
class ImportOutcome:
    """What import_record did with one record."""

    book_id: int
    created: bool
    review_id: int | None = None


@dataclass
class ImportResult:
    """Summary of an import batch."""

    added: int = 0
    updated: int = 0
    errors: int = 0
    error_details: list[tuple[str, str]] = field(default_factory=list)


def import_record(library: Library, record: ImportRecord) -> ImportOutcome:
    """Add a book from a record, or update the book it matches.

    A record matches an existing book when the titles are equal and the
    record's first author is one of the book's authors, both compared as
    exact strings. Two different books sharing title and author therefore
    collapse into the first one. Matched books get the record's non-empty
    genre, year and pages, plus links to any writers they lack.

    When the record carries both a rating and a read date, the book's
    earliest review is updated, or a review is added if it has none.

    Raises:
        ValidationError: If title or first author is missing, or the
            review fields are malformed.
        DatabaseError: If the store rejects a write.
    """
    author = record.first_author
    if not record.title or not record.title.strip() or not author:
        raise ValidationError("Import record needs a title and an author")
    if record.has_review:
        validate_rating(record.rating)
        normalize_date(record.date_read)

    matches = library.books.find_books(record.title, author)
    if matches:
        book_id = matches[0]
        created = False
        fields = {
            name: value
            for name, value in (
                ("genre", record.genre),
                ("pub_year", record.pub_year),
                ("pages", record.pages),
            )
            if value is not None
        }
        library.books.update_book(book_id, **fields)
        _link_missing_writers(library, book_id, record)
    else:
        book_id = library.books.create_book(
            NewBook(
                title=record.title,
                authors=record.names(WriterType.AUTHOR),
                translators=record.names(WriterType.TRANSLATOR),
                pages=record.pages,
                pub_year=record.pub_year,
                genre=record.genre,
            )
        )
        created = True

    review_id = None
    if record.has_review:
        review_id = _add_or_update_review(library, book_id, record)

    return ImportOutcome(book_id=book_id, created=created, review_id=review_id)


def _link_missing_writers(library: Library, book_id: int, record: ImportRecord) -> None:
    linked = {(w.name, w.type) for w in library.writers.get_book_writers(book_id)}
    for name, kind in record.writers:
        role = as_writer_type(kind)
        if (name, role) in linked:
            continue
        writer_id = library.writers.get_or_add_writer(name, role)
        library.writers.add_book_writer_link(book_id, writer_id, role)
        linked.add((name, role))


def _add_or_update_review(library: Library, book_id: int, record: ImportRecord) -> int:
    existing = library.reviews.get_reviews(book_id)
    text = record.review or ""
    if existing:
        review_id = existing[0].id
        library.reviews.update_review(
            review_id, rating=record.rating, date_read=record.date_read, review=text
        )
        return review_id
    rating: int = record.rating  # type: ignore[assignment]
    return library.reviews.add_review(book_id, rating, text, record.date_read)


def import_records(library: Library, records: Iterable[ImportRecord]) -> ImportResult:
    """Import many records, counting failures instead of stopping at the first one."""
    result = ImportResult()
    for record in records:
        try:
            outcome = import_record(library, record)
        except LibroError as exc:
            logger.warning("Skipping %r: %s", record.title, exc)
            result.errors += 1
            result.error_details.append((record.title, str(exc)))
            continue
        if outcome.created:
            result.added += 1
        else:
            result.updated += 1
    return result
