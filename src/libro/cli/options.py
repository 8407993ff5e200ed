# ABOUTME: Shared Click options for libro CLI commands.
# ABOUTME: Provides reusable decorators for common flags like --db.

from pathlib import Path

import click

from libro.db.connection import DEFAULT_DB_PATH

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    envvar="LIBRO_DB",
    help=f"Path to library database (default: {DEFAULT_DB_PATH}, or $LIBRO_DB)",
)
