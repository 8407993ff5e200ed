# ABOUTME: Shared pytest fixtures for libro tests.
# ABOUTME: Provides temporary database paths, open libraries, and legacy-schema databases.

from collections.abc import Iterator
from pathlib import Path

import pytest

from libro.db.connection import Library, open_library
from tests.fixtures.legacy_schemas import create_v1_database


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path."""
    return tmp_path / "libro.db"


@pytest.fixture()
def library(db_path: Path) -> Iterator[Library]:
    """Provide an open Library on a fresh database, closed after the test."""
    with open_library(db_path) as lib:
        yield lib


@pytest.fixture()
def v1_db(tmp_path: Path) -> Path:
    """A version 1 database holding two books by free-text author and one review.

    Layout:
        books:   1 "The Left Hand of Darkness" by "Ursula K. Le Guin"
                 2 "The Dispossessed" by "Ursula K. Le Guin"
                 3 "Dune" by "Frank Herbert"
        reviews: 1 on book 1, rated 5
    """
    path = tmp_path / "legacy_v1.db"
    create_v1_database(
        path,
        books=[
            (1, "The Left Hand of Darkness", "Ursula K. Le Guin", 304, 1969, "Sci-Fi"),
            (2, "The Dispossessed", "Ursula K. Le Guin", 387, 1974, "Sci-Fi"),
            (3, "Dune", "Frank Herbert", 412, 1965, "Sci-Fi"),
        ],
        reviews=[(1, 1, "2023-04-15", 5, "Winter on Gethen.")],
    )
    return path
