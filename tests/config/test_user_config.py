"""Tests for the user configuration file."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from privado.config.user import (
    UserConfig,
    UserConfigFile,
    bootstrap_user_configuration,
    load_user_configuration,
    save_user_configuration,
)
from privado.runtime.errors import ConfigurationError

if TYPE_CHECKING:
    from pathlib import Path


class TestUserConfigFile:
    def test_defaults(self) -> None:
        config = UserConfigFile()
        assert config.metrics_enabled is True
        assert config.sync_to_privado_cloud is False

    def test_reads_file_keys(self) -> None:
        config = UserConfigFile.model_validate({"metrics": False, "syncToPrivadoCloud": True})
        assert config.metrics_enabled is False
        assert config.sync_to_privado_cloud is True


class TestBootstrap:
    def test_creates_missing_file(self, tmp_path: Path) -> None:
        path = tmp_path / ".privado" / "config.json"

        assert bootstrap_user_configuration(path) is True
        assert json.loads(path.read_text()) == {"metrics": True, "syncToPrivadoCloud": False}

    def test_keeps_existing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text('{"metrics": false}')

        assert bootstrap_user_configuration(path) is False
        assert load_user_configuration(path).metrics_enabled is False

    def test_reset(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text('{"metrics": false}')

        assert bootstrap_user_configuration(path, reset=True) is True
        assert load_user_configuration(path).metrics_enabled is True


class TestLoadSave:
    def test_round_trip_uses_file_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        save_user_configuration(path, UserConfigFile(metrics_enabled=False))

        assert '"metrics": false' in path.read_text()
        assert load_user_configuration(path).metrics_enabled is False

    def test_corrupt_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError, match="delete the file"):
            load_user_configuration(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            load_user_configuration(tmp_path / "absent.json")

    def test_save_failure(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            save_user_configuration(tmp_path / "missing" / "config.json", UserConfigFile())


class TestUserConfig:
    def test_session_ids_are_unique(self) -> None:
        assert UserConfig().session_id != UserConfig().session_id
