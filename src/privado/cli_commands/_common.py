"""Helpers shared by the commands that run the engine image."""

from __future__ import annotations

import asyncio
import logging
import platform
import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

import click
import httpx

from privado.cli_commands._output import console, exit_with, print_update_notice
from privado.runtime.container.docker_client import DockerClient
from privado.runtime.container.models import EnvVar, RunResult
from privado.runtime.container.runner import ContainerRunner, get_docker_access_key
from privado.runtime.errors import DockerRuntimeError, PrivadoError
from privado.update.releases import check_for_update
from privado.utils.log import configure_logging

if TYPE_CHECKING:
    from privado.context import RunContext
    from privado.runtime.container.options import RunImageOption

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., object])

RESULTS_LINK_MESSAGE = "> Continue to view results on:"


def debug_option(func: F) -> F:
    """``--debug`` flag: verbose logging plus engine output in debug mode."""
    return click.option(  # type: ignore[return-value]
        "--debug",
        is_flag=True,
        help="Enables debug logging and privado-core image output in debug mode.",
    )(func)


def start_command(ctx: RunContext, debug: bool, *, include_ci: bool = True) -> None:
    """Configure logging and record the invocation metrics."""
    configure_logging(debug)
    ctx.telemetry.record_atomic_metric("version", ctx.version)
    ctx.telemetry.record_atomic_metric("cmd", " ".join(sys.argv))
    if include_ci:
        ctx.telemetry.record_atomic_metric("ci", ctx.ci.is_ci)
        if ctx.ci.is_ci and ctx.ci.provider is not None:
            ctx.telemetry.record_atomic_metric("ciProvider", ctx.ci.provider.name)


def pause(ctx: RunContext) -> None:
    time.sleep(ctx.app.slowdown_time)


def platform_label() -> str:
    return f"{platform.system().lower()}-{platform.machine().lower()}"


def fetch_update_message(ctx: RunContext) -> str | None:
    """Return the new-release message, or ``None`` when up to date or unreachable."""
    try:
        has_update, message, _ = check_for_update(
            ctx.version, ctx.app.repository_name, is_dev_build=ctx.is_dev_build
        )
    except httpx.HTTPError as exc:
        logger.debug("Update check failed: %s", exc)
        return None
    return message if has_update else None


def notify_update(ctx: RunContext) -> None:
    message = fetch_update_message(ctx)
    if message:
        print_update_notice(message)
        pause(ctx)


def load_docker_access(ctx: RunContext, client: DockerClient) -> None:
    """Pull the engine image and load the docker access hash, or exit."""
    try:
        key = asyncio.run(get_docker_access_key(ctx, client, pull=True))
    except DockerRuntimeError as exc:
        key, error = "", str(exc)
    else:
        error = "access key not found in image"
    if not key:
        exit_with(
            ctx,
            f"Cannot fetch docker access key: {error} \n"
            f"Please try again or raise an issue at {ctx.app.repository_url}",
            error=True,
        )
    ctx.load_docker_access_hash(key)


def docker_client_or_exit(ctx: RunContext) -> DockerClient:
    try:
        return DockerClient.from_environment()
    except DockerRuntimeError as exc:
        exit_with(ctx, f"Received error: {exc}", error=True)


def engine_environment(
    ctx: RunContext,
    *,
    host_scan_dir: Path | None = None,
    include_ci: bool = True,
    jvm_args: str | None = None,
) -> list[EnvVar]:
    """Environment every engine run receives; booleans are upper-cased."""
    env: list[EnvVar] = []
    if include_ci:
        env.append(EnvVar(key="CI", value=_upper_bool(ctx.ci.is_ci)))
    env.append(EnvVar(key="PRIVADO_VERSION_CLI", value=ctx.version))
    if host_scan_dir is not None:
        env.append(EnvVar(key="PRIVADO_HOST_SCAN_DIR", value=str(host_scan_dir)))
    env.extend([
        EnvVar(key="PRIVADO_USER_HASH", value=ctx.user.user_hash),
        EnvVar(key="PRIVADO_SESSION_ID", value=ctx.user.session_id),
        EnvVar(
            key="PRIVADO_SYNC_TO_CLOUD",
            value=_upper_bool(ctx.user.config_file.sync_to_privado_cloud),
        ),
        EnvVar(
            key="PRIVADO_METRICS_ENABLED",
            value=_upper_bool(ctx.user.config_file.metrics_enabled),
        ),
    ])
    if jvm_args is not None:
        env.append(EnvVar(key="JAVA_TOOL_OPTIONS", value=jvm_args))
    return env


def run_engine(
    ctx: RunContext, client: DockerClient, *options: RunImageOption
) -> RunResult:
    """Run the engine image; any runtime failure exits with status 1."""
    runner = ContainerRunner(ctx, client=client)
    try:
        result = asyncio.run(runner.run_image(*options))
    except PrivadoError as exc:
        exit_with(ctx, f"Received error: {exc}", error=True)
    if result.exit_code:
        logger.debug("Engine container exited with status %s", result.exit_code)
    return result


def finish(ctx: RunContext) -> None:
    ctx.post_telemetry()


def abs_path(path: str) -> Path:
    return Path(path).expanduser().resolve()


def _upper_bool(value: bool) -> str:
    return str(value).upper()
