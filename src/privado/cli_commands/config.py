"""``privado config`` — manage CLI preferences."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from privado.cli_commands._common import debug_option, start_command
from privado.cli_commands._output import exit_with
from privado.config.user import save_user_configuration
from privado.runtime.errors import ConfigurationError

if TYPE_CHECKING:
    from privado.context import RunContext


@click.group()
def config() -> None:
    """Set config for Privado CLI."""


def _state(enabled: bool) -> str:
    return "ENABLED" if enabled else "DISABLED"


@config.command("metrics")
@click.option("--enable", is_flag=True, help="Enable telemetry events and performance metrics.")
@click.option("--disable", is_flag=True, help="Disable telemetry events and performance metrics.")
@debug_option
@click.pass_obj
def metrics(ctx: RunContext, enable: bool, disable: bool, debug: bool) -> None:
    """Show, enable, or disable telemetry for Privado CLI."""
    start_command(ctx, debug, include_ci=False)
    settings = ctx.user.config_file

    if enable and disable:
        exit_with(ctx, "Options --enable and --disable cannot be used together.", error=True)

    if not enable and not disable:
        exit_with(
            ctx,
            f"Telemetry for Privado CLI: {_state(settings.metrics_enabled)}\n"
            "You can use `--enable` or `--disable` flag to update telemetry preferences",
            error=False,
        )

    settings.metrics_enabled = enable
    try:
        save_user_configuration(ctx.app.user_configuration_file, settings)
    except ConfigurationError as exc:
        exit_with(ctx, str(exc), error=True)

    exit_with(ctx, f"Telemetry for Privado CLI: {_state(settings.metrics_enabled)}", error=False)
