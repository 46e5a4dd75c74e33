"""
Splice Run Command

Streams an input file (or stdin) to an output file (or stdout), replacing
every placeholder with the contents of the file it names.

Command:
- splice run [INPUT] [-o OUTPUT]: Splice INPUT into OUTPUT.
"""

import sys
from pathlib import Path
from typing import Optional
import click
from rich.table import Table
from splice.commands.base import (
    RichCommand,
    config_build,
    errconsole,
    placeholder_options,
    rich_help,
    stream_run,
)
from splice.config.settings import appsettings
from splice.lib.engine import SpliceEngine
from splice.lib.errors import SpliceError
from splice.lib.log import LOG
from splice.lib.pipeline import file_splice
from splice.lib.resolve import FileResolver
from splice.models.dataModel import EngineStats, PlaceholderConfig


def baseDir_resolve(input_path: str, base_dir: Optional[Path]) -> Path:
    """
    Decide which directory included files are resolved against.

    :param input_path: The INPUT argument ("-" for stdin).
    :param base_dir: The --base-dir option, if given.
    :return: --base-dir, else the configured baseDir, else INPUT's
             directory, else the current directory.
    """
    if base_dir:
        return base_dir
    if appsettings.baseDir:
        return appsettings.baseDir
    if input_path != "-":
        return Path(input_path).resolve().parent
    return Path.cwd()


def stats_show(stats: EngineStats) -> None:
    """
    Print stream statistics as a table on stderr.
    """
    table: Table = Table(title="splice", show_header=False)
    for name, value in stats.model_dump().items():
        table.add_row(name.replace("_", " "), str(value))
    errconsole.print(table)


@click.command(
    cls=RichCommand,
    short_help="Splice included files into a stream",
    help=rich_help(
        command="run",
        description="Replace each placeholder with the file it names",
        usage="splice run [INPUT] [-o OUTPUT]",
        args={
            "INPUT": "file to read, '-' for stdin (default)",
            "OUTPUT": "file to write, '-' for stdout (default)",
        },
    ),
)
@click.argument(
    "input_path", metavar="INPUT", type=click.Path(dir_okay=False, allow_dash=True), default="-"
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, writable=True, allow_dash=True),
    default="-",
    help="Output file, '-' for stdout.",
)
@placeholder_options
@click.option(
    "--base-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory included files are resolved against.",
)
@click.option(
    "--missing-ok", is_flag=True, default=False, help="Replace missing files with nothing."
)
@click.option(
    "--chunk-size", type=click.IntRange(min=1), default=None, help="Read size in bytes."
)
@click.option("--stats", "show_stats", is_flag=True, help="Print statistics to stderr.")
def run(
    input_path: str,
    output: str,
    placeholder_start: Optional[str],
    placeholder_end: Optional[str],
    max_filename_length: Optional[int],
    encoding: Optional[str],
    base_dir: Optional[Path],
    missing_ok: bool,
    chunk_size: Optional[int],
    show_stats: bool,
) -> None:
    """
    Splice INPUT into OUTPUT, resolving placeholders as files.
    """
    config: PlaceholderConfig = config_build(
        placeholder_start, placeholder_end, max_filename_length, encoding, chunk_size
    )
    resolver: FileResolver = FileResolver(
        baseDir_resolve(input_path, base_dir),
        missing_ok=missing_ok or appsettings.missingOk,
        block_size=config.chunk_size,
    )
    engine: SpliceEngine = SpliceEngine(resolver, config)

    try:
        with click.open_file(input_path, "rb") as src, click.open_file(output, "wb") as dst:
            stats: EngineStats = stream_run(file_splice(src, dst, engine))
    except (SpliceError, OSError) as e:
        LOG(f"splice run failed: {e}")
        errconsole.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)

    if show_stats:
        stats_show(stats)
