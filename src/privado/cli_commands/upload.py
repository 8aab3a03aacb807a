"""``privado upload`` — sync existing scan results with the Privado Cloud Dashboard."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from privado.cli_commands._common import (
    RESULTS_LINK_MESSAGE,
    abs_path,
    debug_option,
    docker_client_or_exit,
    engine_environment,
    finish,
    load_docker_access,
    notify_update,
    run_engine,
    start_command,
)
from privado.cli_commands._output import console, exit_with
from privado.runtime.container import options as opt

if TYPE_CHECKING:
    from privado.context import RunContext


@click.command()
@click.argument("repository", type=click.Path())
@debug_option
@click.pass_obj
def upload(ctx: RunContext, repository: str, debug: bool) -> None:
    """Sync the results for REPOSITORY with the privado.ai Cloud Dashboard."""
    start_command(ctx, debug, include_ci=False)
    notify_update(ctx)

    repo = abs_path(repository)
    if not (repo / ctx.app.privacy_results_path_suffix).exists():
        console.print(
            "> Cannot find scan results in the specified directory "
            f"({ctx.app.privacy_results_path_suffix})"
        )
        exit_with(
            ctx,
            "\n> Run 'privado scan <dir>' instead. Run 'privado --help' for more information.",
            error=True,
        )

    client = docker_client_or_exit(ctx)
    load_docker_access(ctx, client)

    paths = ctx.app.container
    run_engine(
        ctx,
        client,
        opt.with_latest_image(False),
        opt.with_entrypoint([paths.core_binary, "upload"]),
        opt.with_args([paths.source_code]),
        opt.with_attached_output(),
        opt.with_source_volume(str(repo)),
        opt.with_user_key_volume(str(ctx.app.user_key_path)),
        opt.with_debug(debug),
        opt.with_environment_variables(
            engine_environment(ctx, host_scan_dir=repo, include_ci=False)
        ),
        opt.with_auto_spawn_browser_on_url_messages([RESULTS_LINK_MESSAGE]),
        opt.with_interrupt(),
    )
    finish(ctx)
