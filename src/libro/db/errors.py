# ABOUTME: Exception hierarchy for the libro data layer.
# ABOUTME: Validation, database, and migration failures, plus driver-error wrapping.

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager


class LibroError(Exception):
    """Base class for every error raised by the libro data layer."""


class ValidationError(LibroError):
    """Raised when input is malformed, e.g. a rating outside 1-5 or a blank title."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class DatabaseError(LibroError):
    """Raised when the store rejects an operation (constraint, I/O, driver error)."""

    def __init__(
        self, message: str, table: str | None = None, operation: str | None = None
    ) -> None:
        super().__init__(message)
        self.table = table
        self.operation = operation


class RecordNotFoundError(DatabaseError):
    """Raised when an operation targets a row id that does not exist."""


class MigrationError(LibroError):
    """Raised when a schema migration step fails and the store cannot be opened."""

    def __init__(self, message: str, version: int | None = None, phase: str | None = None) -> None:
        super().__init__(message)
        self.version = version
        self.phase = phase


@contextmanager
def database_errors(table: str, operation: str) -> Iterator[None]:
    """Re-raise any sqlite3 error inside the block as a DatabaseError.

    The table and operation are attached to the raised error so callers can
    report which statement failed.
    """
    try:
        yield
    except sqlite3.Error as exc:
        raise DatabaseError(
            f"{operation} on {table} failed: {exc}", table=table, operation=operation
        ) from exc
