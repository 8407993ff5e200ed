# ABOUTME: CLI package for libro, built on Click.
# ABOUTME: Defines the root command group and registers subcommands.

import click

from libro.cli.commands import (
    add_cmd,
    authors_cmd,
    edit_review_cmd,
    report_cmd,
    review_cmd,
    rm_cmd,
    show_cmd,
)


@click.group()
@click.version_option(package_name="libro")
def cli() -> None:
    """libro - a personal reading log for books, writers, and reviews."""


cli.add_command(add_cmd.add)
cli.add_command(review_cmd.review)
cli.add_command(edit_review_cmd.edit_review)
cli.add_command(show_cmd.show)
cli.add_command(report_cmd.report)
cli.add_command(authors_cmd.authors)
cli.add_command(rm_cmd.rm)
