"""In-memory stand-ins for the docker CLI used by the container runtime tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence

import pytest

from privado.runtime.container.models import CreatedContainer, RunConfiguration


class FakeProcess:
    """Mimics the parts of ``asyncio.subprocess.Process`` the runner touches."""

    def __init__(self, stdout: asyncio.StreamReader | None = None) -> None:
        self.stdout = stdout
        self.returncode: int | None = None

    def terminate(self) -> None:
        self.returncode = -15

    def kill(self) -> None:
        self.returncode = -9

    async def wait(self) -> int | None:
        return self.returncode


class FakeDockerClient:
    """Records every call; ``wait`` either returns immediately or blocks until removal."""

    def __init__(
        self,
        lines: Sequence[str] = (),
        *,
        exit_code: int | None = 0,
        warnings: Sequence[str] = (),
        block_until_removed: bool = False,
        fail_on: str | None = None,
        image_env: dict[str, str] | None = None,
    ) -> None:
        self.lines = list(lines)
        self.exit_code = exit_code
        self.warnings = list(warnings)
        self.block_until_removed = block_until_removed
        self.fail_on = fail_on
        self.env = image_env or {}
        self.calls: list[str] = []
        self.removed: list[str] = []
        self.config: RunConfiguration | None = None
        self.wait_hook: Callable[[], None] | None = None
        self._removed = asyncio.Event()

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_on == name:
            from privado.runtime.errors import DockerRuntimeError

            raise DockerRuntimeError(f"{name} failed")

    async def pull(self, image: str) -> None:
        self._record("pull")

    async def image_env(self, image: str) -> dict[str, str]:
        self._record("image_env")
        return dict(self.env)

    async def create(self, config: RunConfiguration, *, tty: bool) -> CreatedContainer:
        self._record("create")
        self.config = config
        return CreatedContainer(container_id="abc123", warnings=self.warnings)

    async def start(self, container_id: str) -> None:
        self._record("start")

    async def follow_output(self, container_id: str) -> FakeProcess:
        self._record("follow_output")
        reader = asyncio.StreamReader()
        for line in self.lines:
            reader.feed_data(line.encode())
        if not self.block_until_removed:
            reader.feed_eof()
        else:
            asyncio.get_running_loop().create_task(self._eof_on_removal(reader))
        return FakeProcess(reader)

    async def forward_stdin(self, container_id: str) -> FakeProcess:
        self._record("forward_stdin")
        return FakeProcess()

    async def wait(self, container_id: str) -> int | None:
        self._record("wait")
        if self.wait_hook is not None:
            self.wait_hook()
        if self.block_until_removed:
            await self._removed.wait()
            return None
        return self.exit_code

    async def remove(self, container_id: str) -> None:
        self._record("remove")
        self.removed.append(container_id)
        self._removed.set()

    async def _eof_on_removal(self, reader: asyncio.StreamReader) -> None:
        await self._removed.wait()
        reader.feed_eof()


@pytest.fixture
def make_client() -> type[FakeDockerClient]:
    return FakeDockerClient


@pytest.fixture
def make_process() -> type[FakeProcess]:
    return FakeProcess
