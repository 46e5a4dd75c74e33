"""
Base classes and shared options for Rich-enhanced Click commands.

This module defines:
- `RichGroup`: A custom Click group with Rich-enhanced help rendering.
- `RichCommand`: A custom Click command with Rich-enhanced help rendering.
- `placeholder_options`: the placeholder shape options shared by commands.
- `config_build`: merge command-line options over application settings.
- `stream_run`: run a command's coroutine, exiting 130 on interrupt.

Help is rendered to stdout; errors and statistics go to stderr so they never
mix with spliced output.
"""

import asyncio
import sys
from typing import Any, Callable, Coroutine, Optional
from rich.console import Console
from rich.panel import Panel
import click
from splice.config.settings import appsettings
from splice.lib.log import LOG
from splice.models.dataModel import PlaceholderConfig

console: Console = Console()
errconsole: Console = Console(stderr=True)


def rich_help(command: str, description: str, usage: str, args: dict) -> str:
    """
    Generate Rich-enhanced help text for commands.

    :param command: The command name.
    :param description: Description of the command.
    :param usage: Usage syntax for the command.
    :param args: Dictionary of arguments and their descriptions.
    :return: Formatted Rich help string.
    """
    help_text = f"[bold cyan]{description}[/bold cyan]\n\n"
    help_text += f"[bold yellow]Usage:[/bold yellow]\n    [green]{usage}[/green]\n\n"
    help_text += "[bold yellow]Arguments:[/bold yellow]\n"
    for arg, desc in args.items():
        help_text += f"    [green]{arg}[/green]: {desc}\n"
    return help_text


class RichGroup(click.Group):
    """
    A Click Group that uses Rich for rendering help messages.
    """

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """
        Render the help message for the group using Rich.

        :param ctx: The Click context for the command group.
        :param formatter: The Click help formatter.
        """
        try:
            info_name: str = ctx.info_name or ""
            console.print(
                f"[bold yellow]Usage:[/bold yellow] [cyan]{info_name}[/cyan] "
                f"[magenta][OPTIONS] COMMAND [ARGS]...[/magenta]\n"
            )

            if self.help:
                console.print(f"[bold cyan]{self.help.strip()}[/bold cyan]\n")

            if self.commands:
                console.print("[bold green]Available Commands:[/bold green]")
                for name, command in self.commands.items():
                    console.print(
                        f"- [cyan]{name}[/cyan]: [white]{command.short_help or 'No description available.'}[/white]"
                    )
                console.print()

            params = self.get_params(ctx)
            if params:
                console.print("[bold yellow]Options:[/bold yellow]")
                for param in params:
                    console.print(
                        f"- [cyan]{param.opts[0]}[/cyan]: {getattr(param, 'help', None) or 'No description'}"
                    )
        except Exception as e:
            LOG(f"Help rendering error: {e}")
            errconsole.print(f"[bold red]Help rendering error:[/bold red] {e}")


class RichCommand(click.Command):
    """
    A Click Command that uses Rich for rendering help messages.
    """

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """
        Render the help message for the command using Rich, followed by its
        options.

        :param ctx: The Click context for the command.
        :param formatter: The Click help formatter.
        """
        try:
            help_text = self.help or "No help text available."
            panel_width = max(len(line) for line in help_text.splitlines()) + 10
            panel_width = min(panel_width, 80)  # Cap the width to avoid excessive size
            panel = Panel(
                help_text, expand=False, width=panel_width, border_style="cyan"
            )
            console.print(panel)

            options = [p for p in self.get_params(ctx) if isinstance(p, click.Option)]
            if options:
                console.print("[bold yellow]Options:[/bold yellow]")
                for option in options:
                    console.print(
                        f"- [cyan]{', '.join(option.opts)}[/cyan]: {option.help or 'No description'}"
                    )
        except Exception as e:
            LOG(f"Help rendering error: {e}")
            errconsole.print(f"[bold red]Help rendering error:[/bold red] {e}")


def placeholder_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the placeholder shape options to a command."""
    fn = click.option(
        "--encoding", type=str, default=None, help="Codec for text, delimiters and filenames."
    )(fn)
    fn = click.option(
        "--max-filename-length",
        type=click.IntRange(min=1),
        default=None,
        help="Longest filename accepted inside a placeholder.",
    )(fn)
    fn = click.option(
        "--end", "placeholder_end", type=str, default=None, help="Placeholder closing text."
    )(fn)
    fn = click.option(
        "--start", "placeholder_start", type=str, default=None, help="Placeholder opening text."
    )(fn)
    return fn


def config_build(
    placeholder_start: Optional[str] = None,
    placeholder_end: Optional[str] = None,
    max_filename_length: Optional[int] = None,
    encoding: Optional[str] = None,
    chunk_size: Optional[int] = None,
) -> PlaceholderConfig:
    """
    Merge command-line values over application settings.

    Options left unset fall back to `appsettings`.

    :return: Validated PlaceholderConfig.
    :raises click.BadParameter: If the merged configuration is invalid.
    """
    overrides: dict[str, Any] = {
        "placeholder_start": placeholder_start,
        "placeholder_end": placeholder_end,
        "max_filename_length": max_filename_length,
        "encoding": encoding,
        "chunk_size": chunk_size,
    }
    merged: dict[str, Any] = appsettings.placeholder_config().model_dump()
    merged.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return PlaceholderConfig(**merged)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def stream_run(main: Coroutine[Any, Any, Any]) -> Any:
    """
    Run a command's coroutine to completion.

    Ctrl-C cancels the running stream through asyncio, which closes any open
    replacement, then exits with status 130.

    :param main: Coroutine doing the command's streaming work.
    :return: Whatever the coroutine returns.
    """
    try:
        return asyncio.run(main)
    except KeyboardInterrupt:
        LOG("Interrupted by user")
        errconsole.print("\n[bold cyan]Interrupted. Output may be incomplete.[/bold cyan]")
        sys.exit(130)
