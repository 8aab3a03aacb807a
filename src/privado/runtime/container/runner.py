"""ContainerRunner — runs the engine image to completion.

Lifecycle of :meth:`ContainerRunner.run_image`::

    options → RunConfiguration
      → pull (optional; failure aborts before create)
      → create (warnings are printed and recorded, never fatal)
      → install interrupt handler (optional)
      → start → follow output (when active) → forward stdin
      → wait until the container stops
      → drain output reactions
      → uninstall handler, stop helper processes, remove container

Removal is guaranteed on every path after a successful create and is
issued at most once, whichever of the normal path, the exit-on-error
reaction or the interrupt handler gets there first.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import sys
from collections.abc import Callable
from typing import TYPE_CHECKING

from privado.config.package_cache import get_package_cache_directory
from privado.runtime.container.docker_client import DockerClient
from privado.runtime.container.interrupt import InterruptCoordinator
from privado.runtime.container.models import OutputTrigger, RunConfiguration, RunResult
from privado.runtime.container.mounts import resolve_mounts
from privado.runtime.container.options import (
    PackageCacheResolver,
    RunImageOption,
    build_run_configuration,
)
from privado.runtime.container.output import OutputStreamProcessor
from privado.runtime.errors import DockerRuntimeError, EngineError
from privado.utils.browser import extract_url, open_url_in_browser
from privado.utils.console import console as default_console
from privado.utils.console import write_raw
from privado.utils.tracing import (
    ATTR_ATTACH_OUTPUT,
    ATTR_CONTAINER_ID,
    ATTR_EXIT_CODE,
    ATTR_IMAGE,
    ATTR_INTERRUPTED,
    ATTR_MOUNT_COUNT,
    ATTR_PULL,
    ATTR_TRIGGER_COUNT,
    get_tracer,
)

if TYPE_CHECKING:
    from rich.console import Console

    from privado.context import RunContext

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

# Upper bound for draining output after the container has stopped.
OUTPUT_DRAIN_TIMEOUT = 10.0


class _ContainerHandle:
    """Removes one container at most once, however many paths ask for it."""

    def __init__(self, client: DockerClient, container_id: str) -> None:
        self._client = client
        self.container_id = container_id
        self._lock = asyncio.Lock()
        self.removed = False

    async def remove(self) -> None:
        async with self._lock:
            if self.removed:
                return
            self.removed = True
            logger.debug("Removing container %s", self.container_id)
            await self._client.remove(self.container_id)


class _RunState:
    __slots__ = ("engine_error", "interrupted")

    def __init__(self) -> None:
        self.engine_error: str | None = None
        self.interrupted = False


class ContainerRunner:
    """Creates, runs and removes one engine container per :meth:`run_image` call."""

    def __init__(
        self,
        context: RunContext,
        *,
        client: DockerClient | None = None,
        interrupt: InterruptCoordinator | None = None,
        writer: Callable[[str], None] = write_raw,
        console: Console = default_console,
        tty: bool | None = None,
        forward_stdin: bool | None = None,
        package_cache_resolver: PackageCacheResolver = get_package_cache_directory,
    ) -> None:
        self._context = context
        self._client = client
        self._interrupt = interrupt
        self._writer = writer
        self._console = console
        stdin_is_tty = _stdin_is_tty()
        self._tty = stdin_is_tty if tty is None else tty
        self._forward_stdin = stdin_is_tty if forward_stdin is None else forward_stdin
        self._package_cache_resolver = package_cache_resolver

    @property
    def client(self) -> DockerClient:
        if self._client is None:
            self._client = DockerClient.from_environment()
        return self._client

    async def run_image(self, *options: RunImageOption) -> RunResult:
        """Run the engine image with *options* applied in order.

        Raises
        ------
        DockerRuntimeError
            If the docker runtime fails to pull, create, attach, start or wait.
        EngineError
            If an exit-on-error pattern appeared on the output stream.
        """
        telemetry = self._context.telemetry
        config = build_run_configuration(
            options,
            self._context.app,
            telemetry=telemetry,
            package_cache_resolver=self._package_cache_resolver,
        )
        client = self.client

        with _tracer.start_as_current_span("privado.run_image") as span:
            span.set_attribute(ATTR_IMAGE, config.image)
            span.set_attribute(ATTR_PULL, config.pull_latest_image)
            span.set_attribute(ATTR_ATTACH_OUTPUT, config.attach_output)
            span.set_attribute(ATTR_MOUNT_COUNT, len(resolve_mounts(config.volumes)))

            if config.pull_latest_image:
                await pull_latest_image(client, config.image, console=self._console)

            telemetry.record_atomic_metric(
                "dockerCmd", " ".join([*(config.entrypoint or []), *config.args])
            )

            created = await client.create(config, tty=self._tty)
            for warning in created.warnings:
                self._console.print(f"> Warning: {warning}", markup=False)
                telemetry.record_array_metric("warning", warning)

            handle = _ContainerHandle(client, created.container_id)
            span.set_attribute(ATTR_CONTAINER_ID, created.container_id)
            state = _RunState()

            interrupt: InterruptCoordinator | None = None
            processor: OutputStreamProcessor | None = None
            output_proc: asyncio.subprocess.Process | None = None
            stdin_proc: asyncio.subprocess.Process | None = None
            try:
                triggers = self._build_triggers(config, handle, state)
                span.set_attribute(ATTR_TRIGGER_COUNT, len(triggers))
                processor = OutputStreamProcessor(
                    triggers, attach_output=config.attach_output, writer=self._writer
                )

                if config.setup_interrupt:
                    interrupt = self._interrupt or InterruptCoordinator(console=self._console)

                    async def _on_interrupt() -> None:
                        state.interrupted = True
                        await handle.remove()

                    interrupt.install(_on_interrupt)

                self._console.print("\n> Starting container with the latest image")
                self._console.print(f"> Container ID: {created.container_id}", markup=False)
                await client.start(created.container_id)

                if processor.active:
                    output_proc = await client.follow_output(created.container_id)
                    processor.start(output_proc.stdout)  # type: ignore[arg-type]
                if self._forward_stdin:
                    stdin_proc = await client.forward_stdin(created.container_id)

                self._console.print("\n> Waiting for process to complete:")
                exit_code = await client.wait(created.container_id)

                if processor.active:
                    try:
                        await asyncio.wait_for(processor.join(), timeout=OUTPUT_DRAIN_TIMEOUT)
                    except asyncio.TimeoutError:
                        logger.debug("Output stream did not close after the container stopped")

                span.set_attribute(ATTR_INTERRUPTED, state.interrupted)
                if exit_code is not None:
                    span.set_attribute(ATTR_EXIT_CODE, exit_code)

                if state.engine_error is not None:
                    raise EngineError(state.engine_error)

                return RunResult(
                    container_id=created.container_id,
                    exit_code=exit_code,
                    interrupted=state.interrupted,
                )
            finally:
                if interrupt is not None:
                    interrupt.uninstall()
                await _stop_process(stdin_proc)
                if processor is not None:
                    await processor.cancel()
                await _stop_process(output_proc)
                try:
                    await handle.remove()
                except DockerRuntimeError as exc:
                    logger.warning("Could not remove container %s: %s", handle.container_id, exc)

    def _build_triggers(
        self,
        config: RunConfiguration,
        handle: _ContainerHandle,
        state: _RunState,
    ) -> list[OutputTrigger]:
        triggers: list[OutputTrigger] = []
        if config.browser_trigger_messages is not None:
            triggers.append(
                OutputTrigger(
                    patterns=tuple(config.browser_trigger_messages),
                    on_match=self._spawn_browser,
                    name="browser",
                )
            )
        if config.error_trigger_messages is not None:

            async def _exit_on_error(line: str) -> None:
                await self._abort_on_error(line, handle, state)

            triggers.append(
                OutputTrigger(
                    patterns=tuple(config.error_trigger_messages),
                    on_match=_exit_on_error,
                    name="exit-on-error",
                )
            )
        triggers.extend(config.output_triggers)
        return triggers

    async def _spawn_browser(self, line: str) -> None:
        telemetry = self._context.telemetry
        telemetry.record_atomic_metric("didReceiveCloudLinkMessage", True)

        url = extract_url(line)
        if not url:
            logger.debug("No URL found in %r", line)
            return
        telemetry.record_atomic_metric("didParseCloudLink", True)

        opened = await asyncio.to_thread(open_url_in_browser, url)
        if not opened:
            telemetry.record_array_metric("error", f"could not open browser for {url}")
        telemetry.record_atomic_metric("didAutoSpawnBrowser", opened)

    async def _abort_on_error(
        self, line: str, handle: _ContainerHandle, state: _RunState
    ) -> None:
        self._console.print("\n> Some error occurred")
        if line:
            self._console.print("> Find more details below:\n", markup=False)
            self._console.print(line, markup=False)
            self._context.telemetry.record_array_metric("error", line)
        self._console.print(
            "\n> If this is an unexpected output, please try again or open an issue here: "
            f"{self._context.app.repository_url}/issues",
            markup=False,
        )
        self._console.print("> Terminating..")

        if state.engine_error is None:
            state.engine_error = line
        await handle.remove()


async def pull_latest_image(
    client: DockerClient, image: str, *, console: Console = default_console
) -> None:
    """Pull *image*, printing a progress header first."""
    with _tracer.start_as_current_span("privado.pull_image") as span:
        span.set_attribute(ATTR_IMAGE, image)
        console.print(f"> Pulling the latest image: {image}\n", markup=False)
        await client.pull(image)


async def get_docker_access_key(
    context: RunContext,
    client: DockerClient,
    *,
    pull: bool = True,
) -> str:
    """Read the docker access key baked into the engine image; ``""`` when absent."""
    image = context.app.container.image_url
    if pull:
        await pull_latest_image(client, image)
    env = await client.image_env(image)
    return env.get(context.app.container.docker_access_key_env, "")


async def _stop_process(proc: asyncio.subprocess.Process | None) -> None:
    if proc is None or proc.returncode is not None:
        return
    with contextlib.suppress(ProcessLookupError):
        proc.terminate()
    try:
        await asyncio.wait_for(proc.wait(), timeout=5)
    except asyncio.TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()


def _stdin_is_tty() -> bool:
    try:
        return sys.stdin is not None and sys.stdin.isatty()
    except (OSError, ValueError):
        return False
