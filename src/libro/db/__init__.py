# ABOUTME: Public API for the libro database layer.
# ABOUTME: Exports connection management, repositories, record types, and errors.

from libro.db.books import BookRepository
from libro.db.connection import DEFAULT_DB_PATH, Library, open_library
from libro.db.errors import (
    DatabaseError,
    LibroError,
    MigrationError,
    RecordNotFoundError,
    ValidationError,
)
from libro.db.mapping import (
    BookCreation,
    BookView,
    NewBook,
    NewReview,
    Review,
    ReviewEntry,
    Writer,
    WriterRef,
    WriterType,
)
from libro.db.migrations import RebuildState, SchemaMigrator, TableRebuildError
from libro.db.reviews import ReviewRepository
from libro.db.writers import WriterRegistry

__all__ = [
    "DEFAULT_DB_PATH",
    "BookCreation",
    "BookRepository",
    "BookView",
    "DatabaseError",
    "Library",
    "LibroError",
    "MigrationError",
    "NewBook",
    "NewReview",
    "RebuildState",
    "RecordNotFoundError",
    "Review",
    "ReviewEntry",
    "ReviewRepository",
    "SchemaMigrator",
    "TableRebuildError",
    "ValidationError",
    "Writer",
    "WriterRef",
    "WriterRegistry",
    "WriterType",
    "open_library",
]
