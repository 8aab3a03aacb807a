"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from privado.cli_commands.config import config
    from privado.cli_commands.scan import scan
    from privado.cli_commands.update import update
    from privado.cli_commands.upload import upload
    from privado.cli_commands.validate import validate
    from privado.cli_commands.version import version

    cli.add_command(scan)
    cli.add_command(upload)
    cli.add_command(validate)
    cli.add_command(update)
    cli.add_command(version)
    cli.add_command(config)
