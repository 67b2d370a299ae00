"""
main:
    Main CLI entry point for ideport
"""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from ideport import __version__
from ideport.cli import cleanup_cmd, detect_cmd, install_cmd, profiles

console = Console()


def ver():
    """Show version."""
    console.print(f"ideport {__version__}")


def setup_logging(verbose: bool) -> None:
    """Route library logging through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group(invoke_without_command=True, no_args_is_help=True)
@click.option("-v", "--version", is_flag=True, help="Show version")
@click.option("--debug", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx, version, debug):
    """
    ideport - agileflow installer for AI coding IDEs

    Installs canonical agileflow commands and agents into Claude Code,
    Cursor, Windsurf and Codex, adapting each to what the IDE supports.

    \b
    Quick start:
        ideport install ./agileflow              Install into every IDE
        ideport install ./agileflow -t cursor    Install into one IDE
        ideport detect                           Show configured IDEs
        ideport profiles ls                      List capability profiles

    \b
    For more help on any command:
        ideport [command] --help
    """
    ctx.ensure_object(dict)
    setup_logging(debug)
    if version:
        ver()


# Register command groups
main.add_command(profiles)

# Register top-level commands
main.add_command(install_cmd)
main.add_command(cleanup_cmd)
main.add_command(detect_cmd)


if __name__ == "__main__":
    main()
