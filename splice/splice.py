"""
splice Main Module.

This module serves as the main entry point for splice, a streaming include
processor: it copies a document through, replacing placeholders such as

    <!-- include "header.html" -->

with the contents of the named file, without loading the document into
memory.

Usage:
    Run this module as a standalone script or via the `splice` console script.

Examples:
    Splice a file to stdout:
        $ splice run page.html

    Use a pipe and a custom placeholder:
        $ cat main.c | splice run --start '/* include ' --end ' */' > out.c

    List what a document includes:
        $ splice includes page.html
"""

from typing import Final, Optional
import click
from splice.commands.app import cli

__version__: Final[str] = "0.1.0"

cli = click.version_option(__version__, "-V", "--version", prog_name="splice")(cli)


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the splice console script.

    Args:
        argv: Command-line arguments (sys.argv[1:] when None)
    """
    cli.main(args=argv, prog_name="splice")


if __name__ == "__main__":
    main()
