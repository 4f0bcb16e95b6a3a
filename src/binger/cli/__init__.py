"""Command-line interface for Binger.

This package provides the Typer app and global options for all CLI commands.

- app: The Typer application object, used by all CLI entrypoints and subcommands.
- Commands are registered in :mod:`binger.cli.commands` and print through
  :class:`~binger.cli.console.ConsoleManager` so that ``--no-rich`` applies
  uniformly.
"""

import os

import typer
from rich.traceback import install

from binger.utils.debug import DEBUG_ON, setup_logger

# Install rich traceback handler for all CLI commands
install(show_locals=False)

app = typer.Typer(
    name="binger",
    help="Track the movies and TV shows you have watched, are watching, or want to watch.",
    add_completion=True,
    no_args_is_help=True,
)


@app.callback()
def callback(
    ctx: typer.Context,  # noqa: D401 – Typer requires ctx param first
    no_rich: bool = typer.Option(
        False,
        "--no-rich",
        help=(
            "Disable Rich coloured output and tables styling. "
            "Can also be set with the BINGER_NO_RICH environment variable."
        ),
    ),
) -> None:
    """Top-level CLI callback adding global options.

    The *--no-rich* flag sets the ``BINGER_NO_RICH`` environment variable so
    that :class:`~binger.cli.console.ConsoleManager` responds the same way
    whether the flag is passed or the variable is set externally.
    """
    if no_rich:
        os.environ["BINGER_NO_RICH"] = "1"
    if DEBUG_ON:
        setup_logger(debug_on=True)
