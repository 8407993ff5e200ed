# ABOUTME: SQL DDL statements for every version of the libro database schema.
# ABOUTME: Each migration step in migrations.py executes the statements defined here.

# Version 1: books carry their author as free text.
BOOKS_V1 = """
CREATE TABLE IF NOT EXISTS books (
    id        INTEGER PRIMARY KEY AUTOINCREMENT,
    title     TEXT    NOT NULL,
    author    TEXT    NOT NULL,
    pages     INTEGER,
    pub_year  INTEGER,
    genre     TEXT
)
"""

REVIEWS_V1 = """
CREATE TABLE IF NOT EXISTS reviews (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    book_id    INTEGER NOT NULL,
    date_read  DATE,
    rating     INTEGER,
    review     TEXT,
    FOREIGN KEY(book_id) REFERENCES books(id)
)
"""

# Version 3: writers are deduplicated by (name, type).
WRITERS_V3 = """
CREATE TABLE IF NOT EXISTS writers (
    id    INTEGER PRIMARY KEY AUTOINCREMENT,
    name  TEXT NOT NULL,
    type  TEXT NOT NULL CHECK (type IN ('author', 'translator')),
    UNIQUE (name, type)
)
"""

# Transitional columns, dropped again by the version 4 rebuild.
TRANSITIONAL_COLUMNS_V3 = {
    "author_id": "INTEGER REFERENCES writers(id)",
    "translator_id": "INTEGER REFERENCES writers(id)",
}

# Version 4: many-to-many links replace the per-book writer columns.
BOOK_WRITERS_V4 = """
CREATE TABLE IF NOT EXISTS book_writers (
    book_id    INTEGER NOT NULL,
    writer_id  INTEGER NOT NULL,
    type       TEXT    NOT NULL CHECK (type IN ('author', 'translator')),
    PRIMARY KEY (book_id, writer_id, type),
    FOREIGN KEY(book_id) REFERENCES books(id) ON DELETE CASCADE,
    FOREIGN KEY(writer_id) REFERENCES writers(id) ON DELETE CASCADE
)
"""

# Shadow table for the version 4 books rebuild. {name} is the shadow table name.
BOOKS_V4 = """
CREATE TABLE {name} (
    id        INTEGER PRIMARY KEY AUTOINCREMENT,
    title     TEXT    NOT NULL,
    pages     INTEGER,
    pub_year  INTEGER,
    genre     TEXT
)
"""

BOOKS_V4_COLUMNS = ("id", "title", "pages", "pub_year", "genre")
