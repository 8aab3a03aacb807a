"""Tests for ``privado update``."""

from __future__ import annotations

import io
import tarfile
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest

from privado.cli import main
from privado.update.releases import ReleaseInfo

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from click.testing import CliRunner

    from privado.context import RunContext

RELEASE = ReleaseInfo(tag_name="v9.0.0", published_at="2024-01-01T00:00:00Z")


def _write_release_archive(url: str, destination: Path, **_: object) -> None:
    with tarfile.open(destination, "w:gz") as tar:
        info = tarfile.TarInfo("privado")
        info.size = 3
        tar.addfile(info, io.BytesIO(b"new"))


@pytest.fixture
def executable(tmp_path: Path) -> Iterator[Path]:
    path = tmp_path / "bin" / "privado"
    path.parent.mkdir()
    path.write_bytes(b"old")
    with (
        patch("privado.cli_commands.update.is_frozen_build", return_value=True),
        patch("privado.cli_commands.update.current_executable", return_value=path),
    ):
        yield path


class TestUpdateCommand:
    def test_dev_build(self, cli_runner: CliRunner, run_context: RunContext) -> None:
        run_context.version = "dev"

        result = cli_runner.invoke(main, ["update"], obj=run_context)

        assert result.exit_code == 0
        assert "Cannot perform an update on the dev build" in result.output

    def test_pip_install(self, cli_runner: CliRunner, run_context: RunContext) -> None:
        result = cli_runner.invoke(main, ["update"], obj=run_context)

        assert result.exit_code == 0
        assert "managed by pip" in result.output

    def test_already_latest(
        self, cli_runner: CliRunner, run_context: RunContext, executable: Path
    ) -> None:
        with patch(
            "privado.cli_commands.update.check_for_update", return_value=(False, "", RELEASE)
        ):
            result = cli_runner.invoke(main, ["update"], obj=run_context)

        assert result.exit_code == 0
        assert "already using the latest version" in result.output
        assert executable.read_bytes() == b"old"

    def test_installs_release(
        self, cli_runner: CliRunner, run_context: RunContext, executable: Path
    ) -> None:
        with (
            patch(
                "privado.cli_commands.update.check_for_update",
                return_value=(True, "New release found: v9.0.0", RELEASE),
            ),
            patch(
                "privado.cli_commands.update.download_to_file",
                side_effect=_write_release_archive,
            ) as download,
        ):
            result = cli_runner.invoke(main, ["update"], obj=run_context)

        assert result.exit_code == 0, result.output
        assert "Installed latest release!" in result.output
        assert executable.read_bytes() == b"new"
        url = download.call_args.args[0]
        assert "/releases/download/v9.0.0/" in url

    def test_download_failure(
        self, cli_runner: CliRunner, run_context: RunContext, executable: Path
    ) -> None:
        from privado.runtime.errors import UpdateError

        with (
            patch(
                "privado.cli_commands.update.check_for_update",
                return_value=(True, "New release found: v9.0.0", RELEASE),
            ),
            patch(
                "privado.cli_commands.update.download_to_file",
                side_effect=UpdateError("Could not download release asset"),
            ),
        ):
            result = cli_runner.invoke(main, ["update"], obj=run_context)

        assert result.exit_code == 1
        assert "Auto-update failed" in result.output
        assert executable.read_bytes() == b"old"
