"""``privado validate`` — validate the structure of custom rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from privado.cli_commands._common import (
    abs_path,
    debug_option,
    docker_client_or_exit,
    engine_environment,
    finish,
    load_docker_access,
    notify_update,
    pause,
    run_engine,
    start_command,
)
from privado.cli_commands._output import console, exit_with
from privado.runtime.container import options as opt

if TYPE_CHECKING:
    from privado.context import RunContext


@click.command()
@click.argument("rules_directory", type=click.Path())
@debug_option
@click.pass_obj
def validate(ctx: RunContext, rules_directory: str, debug: bool) -> None:
    """Validate rule structure for the custom rules in RULES_DIRECTORY."""
    start_command(ctx, debug)
    notify_update(ctx)

    rules_dir = abs_path(rules_directory)
    console.print(f"> Validating rules for the directory: {rules_dir}", markup=False)
    pause(ctx)

    if not rules_dir.exists():
        exit_with(
            ctx,
            "Cannot find the directory mentioned on disk\n"
            "Use correct path for running Privado rule validation\n"
            "Run 'privado scan <dir>' for scanning without custom rules\n\n",
            error=True,
        )

    client = docker_client_or_exit(ctx)
    load_docker_access(ctx, client)

    paths = ctx.app.container
    run_engine(
        ctx,
        client,
        opt.with_latest_image(False),
        opt.with_entrypoint([paths.core_binary, "validate"]),
        opt.with_args([paths.source_code]),
        opt.with_attached_output(),
        opt.with_source_volume(str(rules_dir)),
        opt.with_user_config_volume(str(ctx.app.user_configuration_file)),
        opt.with_user_key_volume(str(ctx.app.user_key_path)),
        opt.with_debug(debug),
        # an empty set still routes output through the processor
        opt.with_auto_spawn_browser_on_url_messages([]),
        opt.with_environment_variables(engine_environment(ctx)),
        opt.with_interrupt(),
    )
    pause(ctx)
    finish(ctx)
