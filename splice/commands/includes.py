"""
Splice Includes Command

Lists the filenames referenced by the placeholders of a document without
reading any of them.

Command:
- splice includes [INPUT]: Print one referenced filename per line.
"""

import sys
from contextlib import aclosing
from typing import BinaryIO, Optional
import click
from splice.commands.base import (
    RichCommand,
    config_build,
    errconsole,
    placeholder_options,
    rich_help,
    stream_run,
)
from splice.lib.engine import SpliceEngine
from splice.lib.errors import SpliceError
from splice.lib.log import LOG
from splice.lib.pipeline import chunks_read
from splice.models.dataModel import IncludeRecord, PlaceholderConfig


async def includes_scan(src: BinaryIO, engine: SpliceEngine) -> list[IncludeRecord]:
    """
    Run src through an engine whose resolver deletes every placeholder, and
    collect what it matched.

    :param src: Binary input.
    :param engine: Fresh engine with the default (empty) resolver.
    :return: Matched placeholders in document order.
    """
    async with aclosing(engine.stream(chunks_read(src, engine.config.chunk_size))) as out:
        async for _ in out:
            pass
    return engine.includes


@click.command(
    cls=RichCommand,
    short_help="List the files a document includes",
    help=rich_help(
        command="includes",
        description="List filenames referenced by placeholders",
        usage="splice includes [INPUT] [--offsets] [--unique]",
        args={"INPUT": "file to read, '-' for stdin (default)"},
    ),
)
@click.argument(
    "input_path", metavar="INPUT", type=click.Path(dir_okay=False, allow_dash=True), default="-"
)
@placeholder_options
@click.option("--offsets", is_flag=True, help="Also print byte offset and length.")
@click.option("--unique", is_flag=True, help="Print each filename once.")
def includes(
    input_path: str,
    placeholder_start: Optional[str],
    placeholder_end: Optional[str],
    max_filename_length: Optional[int],
    encoding: Optional[str],
    offsets: bool,
    unique: bool,
) -> None:
    """
    Print the filename of every placeholder in INPUT.
    """
    config: PlaceholderConfig = config_build(
        placeholder_start, placeholder_end, max_filename_length, encoding
    )
    engine: SpliceEngine = SpliceEngine(None, config)

    try:
        with click.open_file(input_path, "rb") as src:
            records: list[IncludeRecord] = stream_run(includes_scan(src, engine))
    except (SpliceError, OSError) as e:
        LOG(f"splice includes failed: {e}")
        errconsole.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)

    seen: set[str] = set()
    for record in records:
        if unique:
            if record.filename in seen:
                continue
            seen.add(record.filename)
        if offsets:
            click.echo(f"{record.offset}\t{record.length}\t{record.filename}")
        else:
            click.echo(record.filename)
