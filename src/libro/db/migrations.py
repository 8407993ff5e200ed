# ABOUTME: Versioned schema migrations for the libro database.
# ABOUTME: Applies each pending step phase by phase and records the version in PRAGMA user_version.

import logging
import sqlite3
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum

from libro.db.errors import MigrationError
from libro.db.schema import (
    BOOK_WRITERS_V4,
    BOOKS_V1,
    BOOKS_V4,
    BOOKS_V4_COLUMNS,
    REVIEWS_V1,
    TRANSITIONAL_COLUMNS_V3,
    WRITERS_V3,
)

logger = logging.getLogger(__name__)

# SQLite messages for structures that are already in place.
_ALREADY_EXISTS_MESSAGES = ("already exists", "duplicate column name")


class Policy(Enum):
    """How a failing migration phase is handled."""

    FAIL_FAST = "fail_fast"
    BEST_EFFORT = "best_effort"


class RebuildState(Enum):
    """Progress of a shadow-table rebuild as observed in the database."""

    NOT_STARTED = "not_started"
    MIDWAY = "midway"
    COMPLETE = "complete"


class TableRebuildError(MigrationError):
    """Raised when a shadow-table rebuild fails.

    ``state`` is how far the rebuild had progressed when it failed. The
    rebuild runs in one transaction, so the database itself is rolled back
    to what it was before the attempt.
    """

    def __init__(
        self,
        message: str,
        state: RebuildState,
        version: int | None = None,
        phase: str | None = None,
    ) -> None:
        super().__init__(message, version=version, phase=phase)
        self.state = state


@dataclass(frozen=True)
class Phase:
    """One unit of work inside a migration step.

    A phase runs inside its own transaction unless ``own_transaction`` is
    set, in which case ``apply`` is responsible for its transaction.
    """

    name: str
    apply: Callable[[sqlite3.Connection], None]
    own_transaction: bool = False


@dataclass(frozen=True)
class MigrationStep:
    """A numbered schema version and the phases that produce it."""

    version: int
    description: str
    phases: tuple[Phase, ...] = ()


# --- Introspection helpers ---


def table_exists(conn: sqlite3.Connection, name: str) -> bool:
    """Check whether a table with this name exists."""
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name = ?", (name,)
    )
    return cursor.fetchone() is not None


def column_names(conn: sqlite3.Connection, table: str) -> list[str]:
    """Return the column names of a table in declaration order."""
    cursor = conn.execute(f"PRAGMA table_info({table})")
    return [row[1] for row in cursor.fetchall()]


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the schema version stored in the database header."""
    return conn.execute("PRAGMA user_version").fetchone()[0]


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    conn.execute(f"PRAGMA user_version = {int(version)}")


@contextmanager
def _transaction(conn: sqlite3.Connection) -> Iterator[None]:
    """Run the block in an explicit transaction, rolling back on any exception.

    sqlite3 does not open implicit transactions for DDL, so BEGIN is issued
    by hand to keep CREATE/ALTER/DROP statements atomic with the data they move.
    """
    if conn.in_transaction:
        conn.commit()
    conn.execute("BEGIN")
    try:
        yield
    except BaseException:
        conn.rollback()
        raise
    conn.commit()


@contextmanager
def foreign_keys_suspended(conn: sqlite3.Connection) -> Iterator[None]:
    """Turn off foreign key enforcement for the block and restore it afterwards.

    PRAGMA foreign_keys is a no-op inside a transaction, so any open
    transaction is committed first.
    """
    if conn.in_transaction:
        conn.commit()
    enabled = conn.execute("PRAGMA foreign_keys").fetchone()[0]
    conn.execute("PRAGMA foreign_keys=OFF")
    try:
        yield
    finally:
        if conn.in_transaction:
            conn.rollback()
        conn.execute(f"PRAGMA foreign_keys={'ON' if enabled else 'OFF'}")


# --- Shadow-table rebuild ---


def _shadow_name(table: str) -> str:
    return f"{table}_new"


def rebuild_state(
    conn: sqlite3.Connection, table: str, columns: Sequence[str]
) -> RebuildState:
    """Report how far a rebuild of ``table`` to ``columns`` has progressed.

    A leftover shadow table means an earlier rebuild stopped partway.
    """
    if table_exists(conn, _shadow_name(table)):
        return RebuildState.MIDWAY
    if column_names(conn, table) == list(columns):
        return RebuildState.COMPLETE
    return RebuildState.NOT_STARTED


def rebuild_table(
    conn: sqlite3.Connection,
    table: str,
    create_sql: str,
    columns: Sequence[str],
) -> RebuildState:
    """Replace ``table`` with a copy holding only ``columns``.

    Creates a shadow table from ``create_sql`` (a template with a ``{name}``
    placeholder), copies the kept columns, drops the original and renames
    the shadow into place. Foreign key enforcement is suspended for the
    rebuild and ``PRAGMA foreign_key_check`` must come back clean before the
    transaction commits.

    A store left midway by an interrupted run is resumed: a stale shadow next
    to the original is discarded and rebuilt, and a shadow whose original is
    already gone is renamed into place.

    Returns:
        RebuildState.COMPLETE.

    Raises:
        TableRebuildError: If any statement fails or the copy leaves dangling
            foreign keys.
    """
    state = rebuild_state(conn, table, columns)
    if state is RebuildState.COMPLETE:
        return state

    shadow = _shadow_name(table)
    column_list = ", ".join(columns)
    try:
        with foreign_keys_suspended(conn), _transaction(conn):
            if state is RebuildState.MIDWAY:
                if not table_exists(conn, table):
                    logger.info("Completing interrupted rebuild of %s", table)
                    conn.execute(f"ALTER TABLE {shadow} RENAME TO {table}")
                    _check_foreign_keys(conn, table, state)
                    return RebuildState.COMPLETE
                logger.warning("Discarding stale shadow table %s", shadow)
                conn.execute(f"DROP TABLE {shadow}")
                state = RebuildState.NOT_STARTED

            conn.execute(create_sql.format(name=shadow))
            state = RebuildState.MIDWAY
            conn.execute(
                f"INSERT INTO {shadow} ({column_list}) SELECT {column_list} FROM {table}"
            )
            conn.execute(f"DROP TABLE {table}")
            conn.execute(f"ALTER TABLE {shadow} RENAME TO {table}")
            _check_foreign_keys(conn, table, state)
    except sqlite3.Error as exc:
        raise TableRebuildError(f"Rebuild of {table} failed: {exc}", state=state) from exc

    logger.info("Rebuilt table %s with columns %s", table, column_list)
    return RebuildState.COMPLETE


def _check_foreign_keys(conn: sqlite3.Connection, table: str, state: RebuildState) -> None:
    violations = conn.execute("PRAGMA foreign_key_check").fetchall()
    if violations:
        raise TableRebuildError(
            f"Rebuild of {table} left {len(violations)} foreign key violation(s)",
            state=state,
        )


# --- Migration phases ---


def _create_books_v1(conn: sqlite3.Connection) -> None:
    conn.execute(BOOKS_V1)


def _create_reviews_v1(conn: sqlite3.Connection) -> None:
    conn.execute(REVIEWS_V1)


def _create_writers(conn: sqlite3.Connection) -> None:
    conn.execute(WRITERS_V3)


def _add_column_if_missing(conn: sqlite3.Connection, table: str, column: str) -> None:
    if column in column_names(conn, table):
        logger.debug("Column %s.%s already present", table, column)
        return
    # Replaying over a store that already has the final books layout
    if table == "books" and rebuild_state(conn, table, BOOKS_V4_COLUMNS) is RebuildState.COMPLETE:
        logger.debug("Skipping %s.%s: books already rebuilt", table, column)
        return
    conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {TRANSITIONAL_COLUMNS_V3[column]}")


def _add_author_id(conn: sqlite3.Connection) -> None:
    _add_column_if_missing(conn, "books", "author_id")


def _add_translator_id(conn: sqlite3.Connection) -> None:
    _add_column_if_missing(conn, "books", "translator_id")


def _backfill_writers(conn: sqlite3.Connection) -> None:
    """Register free-text author/translator values as writers.

    Only rows whose id column is still NULL are touched, so the phase is a
    no-op once the legacy text has been resolved or the column is gone.
    """
    columns = column_names(conn, "books")
    for legacy, id_column, writer_type in (
        ("author", "author_id", "author"),
        ("translator", "translator_id", "translator"),
    ):
        if legacy not in columns or id_column not in columns:
            continue
        pending = f"{id_column} IS NULL AND {legacy} IS NOT NULL AND {legacy} <> ''"
        conn.execute(
            f"INSERT OR IGNORE INTO writers (name, type) "
            f"SELECT {legacy}, ? FROM books WHERE {pending} "
            f"GROUP BY {legacy} ORDER BY MIN(id)",
            (writer_type,),
        )
        cursor = conn.execute(
            f"UPDATE books SET {id_column} = "
            f"(SELECT w.id FROM writers w WHERE w.name = books.{legacy} AND w.type = ?) "
            f"WHERE {pending}",
            (writer_type,),
        )
        logger.info("Resolved %d legacy %s value(s) to writers", cursor.rowcount, legacy)


def _create_book_writers(conn: sqlite3.Connection) -> None:
    conn.execute(BOOK_WRITERS_V4)


def _backfill_book_writers(conn: sqlite3.Connection) -> None:
    """Copy the transitional author_id/translator_id columns into book_writers."""
    columns = column_names(conn, "books")
    if "author_id" in columns:
        conn.execute(
            "INSERT OR IGNORE INTO book_writers (book_id, writer_id, type) "
            "SELECT id, author_id, 'author' FROM books WHERE author_id IS NOT NULL"
        )
    if "translator_id" in columns:
        conn.execute(
            "INSERT OR IGNORE INTO book_writers (book_id, writer_id, type) "
            "SELECT id, translator_id, 'translator' FROM books "
            "WHERE translator_id IS NOT NULL AND translator_id <> ''"
        )


def _rebuild_books(conn: sqlite3.Connection) -> None:
    rebuild_table(conn, "books", BOOKS_V4, BOOKS_V4_COLUMNS)


MIGRATIONS: tuple[MigrationStep, ...] = (
    MigrationStep(
        1,
        "create books and reviews",
        (
            Phase("create_books", _create_books_v1),
            Phase("create_reviews", _create_reviews_v1),
        ),
    ),
    # Version 2 once added a books.translator column; it was superseded by
    # writers and is not recreated.
    MigrationStep(2, "retired translator column"),
    MigrationStep(
        3,
        "introduce writers",
        (
            Phase("create_writers", _create_writers),
            Phase("add_author_id", _add_author_id),
            Phase("add_translator_id", _add_translator_id),
            Phase("backfill_writers", _backfill_writers),
        ),
    ),
    MigrationStep(
        4,
        "link books to writers and drop legacy columns",
        (
            Phase("create_book_writers", _create_book_writers),
            Phase("backfill_book_writers", _backfill_book_writers),
            Phase("rebuild_books", _rebuild_books, own_transaction=True),
        ),
    ),
)

POLICIES: dict[tuple[int, str], Policy] = {
    (1, "create_books"): Policy.FAIL_FAST,
    (1, "create_reviews"): Policy.FAIL_FAST,
    (3, "create_writers"): Policy.BEST_EFFORT,
    (3, "add_author_id"): Policy.BEST_EFFORT,
    (3, "add_translator_id"): Policy.BEST_EFFORT,
    (3, "backfill_writers"): Policy.FAIL_FAST,
    (4, "create_book_writers"): Policy.FAIL_FAST,
    (4, "backfill_book_writers"): Policy.FAIL_FAST,
    (4, "rebuild_books"): Policy.FAIL_FAST,
}


def _already_exists(exc: sqlite3.Error) -> bool:
    message = str(exc).lower()
    return any(fragment in message for fragment in _ALREADY_EXISTS_MESSAGES)


class SchemaMigrator:
    """Brings a database up to the latest schema version.

    Steps run in increasing version order starting after the stored
    version. The version is written only once every phase of a step has
    succeeded, so an interrupted step is simply run again on the next open.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        steps: Sequence[MigrationStep] = MIGRATIONS,
        policies: dict[tuple[int, str], Policy] | None = None,
    ) -> None:
        versions = [step.version for step in steps]
        if versions != sorted(set(versions)):
            raise ValueError(f"Migration versions must be strictly increasing: {versions}")
        self._conn = conn
        self._steps = tuple(steps)
        self._policies = POLICIES if policies is None else policies

    @property
    def latest_version(self) -> int:
        return self._steps[-1].version if self._steps else 0

    def current_version(self) -> int:
        """The version currently recorded in the database."""
        return get_schema_version(self._conn)

    def pending(self) -> list[MigrationStep]:
        """Steps that have not been applied yet, oldest first."""
        current = self.current_version()
        return [step for step in self._steps if step.version > current]

    def migrate(self) -> int:
        """Apply every pending step.

        Returns:
            The schema version after migrating.

        Raises:
            MigrationError: If a fail-fast phase fails, a best-effort phase
                fails for any reason other than an existing structure, or the
                database is newer than this release.
        """
        current = self.current_version()
        if current > self.latest_version:
            raise MigrationError(
                f"Database schema version {current} is newer than supported "
                f"version {self.latest_version}",
                version=current,
            )

        for step in self.pending():
            logger.info("Applying schema migration v%d: %s", step.version, step.description)
            for phase in step.phases:
                self._run_phase(step, phase)
            try:
                with _transaction(self._conn):
                    _set_schema_version(self._conn, step.version)
            except sqlite3.Error as exc:
                raise MigrationError(
                    f"Could not record schema version {step.version}: {exc}",
                    version=step.version,
                ) from exc

        return self.current_version()

    def _run_phase(self, step: MigrationStep, phase: Phase) -> None:
        policy = self._policies.get((step.version, phase.name), Policy.FAIL_FAST)
        try:
            if phase.own_transaction:
                phase.apply(self._conn)
            else:
                with _transaction(self._conn):
                    phase.apply(self._conn)
        except MigrationError as exc:
            if exc.version is None:
                exc.version, exc.phase = step.version, phase.name
            raise
        except sqlite3.Error as exc:
            if policy is Policy.BEST_EFFORT and _already_exists(exc):
                logger.warning(
                    "Migration v%d phase %s skipped: %s", step.version, phase.name, exc
                )
                return
            raise MigrationError(
                f"Migration to version {step.version} failed in {phase.name}: {exc}",
                version=step.version,
                phase=phase.name,
            ) from exc
