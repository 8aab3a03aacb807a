"""DockerClient — async wrapper around the ``docker`` CLI.

Uses the ``docker`` CLI via subprocess (no docker-py dependency). Every
call maps to one CLI invocation:

1. ``docker pull`` streams layer progress straight to the terminal.
2. ``docker create`` returns the container id; ``WARNING:`` lines on
   stderr are surfaced as creation warnings.
3. ``docker start`` / ``docker wait``.
4. ``docker logs --follow`` yields the combined output stream from the
   container's first line.
5. ``docker attach`` forwards the host's stdin with ``NORAW`` set, so the
   host terminal keeps its line discipline and Ctrl-C still raises SIGINT.
6. ``docker rm --force --volumes``; a missing container counts as removed.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import shutil

from privado.runtime.container.models import CreatedContainer, RunConfiguration
from privado.runtime.container.mounts import mount_args, resolve_mounts
from privado.runtime.errors import (
    ContainerAttachError,
    ContainerCreateError,
    ContainerStartError,
    ContainerWaitError,
    DockerRuntimeError,
    DockerUnavailableError,
    ImageInspectError,
    ImagePullError,
)

logger = logging.getLogger(__name__)

_NOT_FOUND_MARKERS = ("No such container", "no such container")
# Longest output line read from the container stream.
OUTPUT_LINE_LIMIT = 1024 * 1024


class DockerClient:
    """Thin async facade over the docker CLI."""

    def __init__(self, executable: str = "docker") -> None:
        self._executable = executable

    @classmethod
    def from_environment(cls) -> DockerClient:
        """Locate the docker CLI on ``PATH``."""
        path = shutil.which("docker")
        if path is None:
            msg = "docker executable not found on PATH. Is Docker installed?"
            raise DockerUnavailableError(msg)
        return cls(path)

    async def pull(self, image: str) -> None:
        """Pull *image*, letting docker render layer progress on the terminal."""
        try:
            proc = await asyncio.create_subprocess_exec(self._executable, "pull", image)
            returncode = await proc.wait()
        except OSError as exc:
            raise ImagePullError(image, str(exc)) from exc
        if returncode != 0:
            raise ImagePullError(image, f"docker pull exited with {returncode}")

    async def image_env(self, image: str) -> dict[str, str]:
        """Return the environment baked into *image*."""
        try:
            out = await self._run("image", "inspect", "--format", "{{json .Config.Env}}", image)
        except DockerRuntimeError as exc:
            raise ImageInspectError(exc.detail) from exc

        try:
            entries = json.loads(out.stdout or "null") or []
        except json.JSONDecodeError as exc:
            raise ImageInspectError(f"unreadable image config: {exc}") from exc

        env: dict[str, str] = {}
        for entry in entries:
            key, _, value = str(entry).partition("=")
            env[key] = value
        return env

    async def create(self, config: RunConfiguration, *, tty: bool) -> CreatedContainer:
        try:
            out = await self._run(*self.build_create_args(config, tty=tty))
        except DockerRuntimeError as exc:
            raise ContainerCreateError(exc.detail) from exc

        container_id = out.stdout.strip().splitlines()[-1] if out.stdout.strip() else ""
        if not container_id:
            raise ContainerCreateError("docker create returned no container id")

        warnings = [
            line.split(":", 1)[1].strip()
            for line in out.stderr.splitlines()
            if line.upper().startswith("WARNING:")
        ]
        return CreatedContainer(container_id=container_id, warnings=warnings)

    async def start(self, container_id: str) -> None:
        try:
            await self._run("start", container_id)
        except DockerRuntimeError as exc:
            raise ContainerStartError(exc.detail) from exc

    async def follow_output(self, container_id: str) -> asyncio.subprocess.Process:
        """Spawn ``docker logs --follow``; stdout carries stdout and stderr combined."""
        try:
            return await asyncio.create_subprocess_exec(
                self._executable, "logs", "--follow", container_id,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                limit=OUTPUT_LINE_LIMIT,
            )
        except OSError as exc:
            raise ContainerAttachError(str(exc)) from exc

    async def forward_stdin(self, container_id: str) -> asyncio.subprocess.Process:
        """Spawn ``docker attach`` connected to this process's stdin only."""
        try:
            return await asyncio.create_subprocess_exec(
                self._executable, "attach", "--sig-proxy=false", container_id,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
                env={**os.environ, "NORAW": "1"},
            )
        except OSError as exc:
            raise ContainerAttachError(str(exc)) from exc

    async def wait(self, container_id: str) -> int | None:
        """Block until the container stops; ``None`` if it was removed meanwhile."""
        out = await self._run("wait", container_id, check=False)
        if out.returncode != 0:
            if _is_not_found(out.stderr):
                return None
            raise ContainerWaitError(out.stderr or f"docker wait exited with {out.returncode}")
        try:
            return int(out.stdout.strip().splitlines()[-1])
        except (IndexError, ValueError):
            return None

    async def remove(self, container_id: str) -> None:
        """Force-remove the container and its anonymous volumes."""
        out = await self._run("rm", "--force", "--volumes", container_id, check=False)
        if out.returncode != 0 and not _is_not_found(out.stderr):
            raise DockerRuntimeError(f"could not remove container {container_id}: {out.stderr}")

    def build_create_args(self, config: RunConfiguration, *, tty: bool) -> list[str]:
        """Build the ``docker create`` argument list (without the executable)."""
        args: list[str] = ["create", "--interactive"]
        if tty:
            args.append("--tty")

        command = list(config.args)
        if config.entrypoint:
            args.extend(["--entrypoint", config.entrypoint[0]])
            command = [*config.entrypoint[1:], *command]

        for env in config.env_strings:
            args.extend(["--env", env])

        args.extend(mount_args(resolve_mounts(config.volumes)))

        args.append(config.image)
        args.extend(command)
        return args

    async def _run(self, *args: str, check: bool = True) -> _DockerOutput:
        """Run a docker CLI command and capture its output."""
        try:
            proc = await asyncio.create_subprocess_exec(
                self._executable,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout_bytes, stderr_bytes = await proc.communicate()
        except OSError as exc:
            raise DockerUnavailableError(f"Failed to run docker: {exc}") from exc

        out = _DockerOutput(
            stdout=stdout_bytes.decode(errors="replace") if stdout_bytes else "",
            stderr=stderr_bytes.decode(errors="replace").strip() if stderr_bytes else "",
            returncode=proc.returncode or 0,
        )
        logger.debug("docker %s -> rc=%s", args[0], out.returncode)

        if check and out.returncode != 0:
            raise DockerRuntimeError(
                f"docker {args[0]} failed (rc={out.returncode}): {out.stderr or out.stdout.strip()}"
            )
        return out


class _DockerOutput:
    """Simple container for docker CLI output."""

    __slots__ = ("returncode", "stderr", "stdout")

    def __init__(self, stdout: str = "", stderr: str = "", returncode: int = 0) -> None:
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode


def _is_not_found(stderr: str) -> bool:
    return any(marker in stderr for marker in _NOT_FOUND_MARKERS)
