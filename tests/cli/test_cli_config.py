"""Tests for ``privado config metrics``."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from privado.cli import main
from privado.config.user import load_user_configuration

if TYPE_CHECKING:
    from pathlib import Path

    from click.testing import CliRunner

    from privado.context import RunContext


@pytest.fixture
def config_file(run_context: RunContext) -> Path:
    path = run_context.app.user_configuration_file
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


class TestMetricsCommand:
    def test_shows_current_state(
        self, cli_runner: CliRunner, run_context: RunContext, config_file: Path
    ) -> None:
        result = cli_runner.invoke(main, ["config", "metrics"], obj=run_context)

        assert result.exit_code == 0
        assert "Telemetry for Privado CLI: ENABLED" in result.output
        assert not config_file.exists()

    def test_disable_persists(
        self, cli_runner: CliRunner, run_context: RunContext, config_file: Path
    ) -> None:
        result = cli_runner.invoke(main, ["config", "metrics", "--disable"], obj=run_context)

        assert result.exit_code == 0
        assert "Telemetry for Privado CLI: DISABLED" in result.output
        assert load_user_configuration(config_file).metrics_enabled is False

    def test_enable_persists(
        self, cli_runner: CliRunner, run_context: RunContext, config_file: Path
    ) -> None:
        run_context.user.config_file.metrics_enabled = False

        result = cli_runner.invoke(main, ["config", "metrics", "--enable"], obj=run_context)

        assert result.exit_code == 0
        assert load_user_configuration(config_file).metrics_enabled is True

    def test_conflicting_flags(
        self, cli_runner: CliRunner, run_context: RunContext, config_file: Path
    ) -> None:
        result = cli_runner.invoke(
            main, ["config", "metrics", "--enable", "--disable"], obj=run_context
        )

        assert result.exit_code == 1
        assert "cannot be used together" in result.output
        assert not config_file.exists()
