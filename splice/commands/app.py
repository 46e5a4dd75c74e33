"""
Defines the main Click command group for splice.

This module provides:
- The root `cli` command group for the application.
- Integration with Rich-enhanced Click classes (`RichGroup`).
- Registration of subcommands from other modules.

Usage:
Import `cli` to initialize and run the command-line interface.
"""

import click
from splice.commands.base import RichGroup
from splice.commands.run import run
from splice.commands.includes import includes


@click.group(
    cls=RichGroup,
    help="""
    splice

    Stream documents, replacing include placeholders with file contents.
    """,
)
def cli() -> None:
    """
    The root Click command group for splice.
    """
    pass


# Explicitly annotate `cli` as `click.Group` for static type checking
cli: click.Group = cli

# Register subcommands
cli.add_command(run)
cli.add_command(includes)
