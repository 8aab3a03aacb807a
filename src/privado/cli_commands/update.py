"""``privado update`` — replace this executable with the latest release."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import click
import httpx

from privado.cli_commands._common import debug_option, pause, start_command
from privado.cli_commands._output import console, exit_with
from privado.cli_commands.version import print_version
from privado.runtime.errors import UpdateError
from privado.update.installer import (
    EXECUTABLE_NAME,
    current_executable,
    download_to_file,
    extract_tar_gz,
    has_write_permission,
    is_frozen_build,
    safe_move_file,
)
from privado.update.releases import check_for_update, release_download_url

if TYPE_CHECKING:
    from privado.context import RunContext


def _exit_update(ctx: RunContext, message: str) -> NoReturn:
    console.print(message, markup=False)
    console.print()
    exit_with(
        ctx,
        "> Auto-update failed. Kindly try again or reinstall to update: "
        f"{ctx.app.repository_url}",
        error=True,
    )


@click.command()
@debug_option
@click.pass_obj
def update(ctx: RunContext, debug: bool) -> None:
    """Check for the latest release and update Privado CLI to it."""
    start_command(ctx, debug, include_ci=False)
    print_version(ctx)
    console.print()
    pause(ctx)

    if ctx.is_dev_build:
        exit_with(
            ctx,
            "Cannot perform an update on the dev build. Kindly use a release build or "
            f"update manually\nFor more information, visit {ctx.app.repository_url}",
            error=False,
        )
    if not is_frozen_build():
        exit_with(
            ctx,
            "This installation is managed by pip. Kindly update it with: "
            "pip install --upgrade privado",
            error=False,
        )

    try:
        executable = current_executable()
    except UpdateError as exc:
        _exit_update(ctx, str(exc))
    if not has_write_permission(executable):
        console.print("> Error: Permission denied")
        console.print(
            f"> The identified installation ({executable}) requires privileged permissions\n",
            markup=False,
        )
        exit_with(ctx, "Try again with a privileged user (sudo)?", error=True)

    console.print("Fetching latest release..")
    try:
        has_update, message, release = check_for_update(
            ctx.version, ctx.app.repository_name, is_dev_build=False
        )
    except httpx.HTTPError:
        _exit_update(ctx, "Could not fetch latest release. Some error occurred")
    if not has_update or release is None:
        exit_with(
            ctx,
            f"You are already using the latest version of Privado CLI: {ctx.version}",
            error=False,
        )
    console.print(message, markup=False)
    pause(ctx)

    url = release_download_url(
        ctx.app.repository_name, release.tag_name, ctx.app.release_filename
    )
    with tempfile.TemporaryDirectory(prefix="privado-update-") as tmp:
        workdir = Path(tmp)
        archive = workdir / ctx.app.release_filename
        try:
            download_to_file(url, archive)
            console.print(f"\nDownloaded release asset: {url}", markup=False)
            pause(ctx)

            console.print("\nExtracting release asset..")
            extract_tar_gz(archive, workdir)
            console.print(f"Extracted release asset: {workdir}\n", markup=False)
            pause(ctx)

            console.print("Installing latest release..")
            safe_move_file(workdir / EXECUTABLE_NAME, executable)
        except UpdateError as exc:
            _exit_update(ctx, str(exc))

    pause(ctx)
    console.print("\nInstalled latest release!")
    console.print("To validate installation, run `privado version`")
    ctx.post_telemetry()
