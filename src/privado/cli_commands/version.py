"""``privado version`` — print the CLI version and check for a newer release."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from privado.cli_commands._common import (
    debug_option,
    fetch_update_message,
    pause,
    platform_label,
    start_command,
)
from privado.cli_commands._output import console, print_update_notice

if TYPE_CHECKING:
    from privado.context import RunContext


def print_version(ctx: RunContext) -> None:
    label = "Nightly" if ctx.is_dev_build else ctx.version
    console.print(f"Privado CLI: Version {label} ({platform_label()})", markup=False)


@click.command()
@debug_option
@click.pass_obj
def version(ctx: RunContext, debug: bool) -> None:
    """Print the current version of Privado CLI."""
    start_command(ctx, debug, include_ci=False)
    print_version(ctx)

    message = fetch_update_message(ctx)
    if message:
        console.print()
        print_update_notice(message)
        pause(ctx)

    console.print(f"For more information, visit {ctx.app.repository_url}", markup=False)
