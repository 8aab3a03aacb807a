"""Fixtures for CLI command tests: docker, engine runs and release checks are faked."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from privado.runtime.container.docker_client import DockerClient
from privado.runtime.container.models import RunConfiguration, RunResult
from privado.runtime.container.options import build_run_configuration
from privado.runtime.container.runner import ContainerRunner

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from privado.context import RunContext


@dataclass
class FakeEngine:
    client: MagicMock
    run_image: AsyncMock
    from_environment: MagicMock

    def configuration(self, run_context: RunContext, tmp_path: Path) -> RunConfiguration:
        """Rebuild the configuration from the options the command passed."""
        options = self.run_image.call_args.args
        return build_run_configuration(
            options,
            run_context.app,
            package_cache_resolver=lambda app, pkg: tmp_path / f"cache-{pkg}",
        )


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def engine(run_context: RunContext) -> Iterator[FakeEngine]:
    run_context.user.config_file.metrics_enabled = False
    client = MagicMock(spec=DockerClient)
    client.image_env = AsyncMock(return_value={"PRIVADO_DOCKER_ACCESS_KEY": "access-key"})
    client.pull = AsyncMock()
    run_image = AsyncMock(return_value=RunResult(container_id="abc123", exit_code=0))

    with (
        patch.object(DockerClient, "from_environment", return_value=client) as from_env,
        patch.object(ContainerRunner, "run_image", new=run_image),
        patch(
            "privado.cli_commands._common.check_for_update",
            return_value=(False, "", None),
        ),
    ):
        yield FakeEngine(client=client, run_image=run_image, from_environment=from_env)
