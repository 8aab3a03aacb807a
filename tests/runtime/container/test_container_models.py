"""Tests for container run models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from privado.runtime.container.models import (
    MountSlot,
    OutputTrigger,
    RunConfiguration,
    RunResult,
    VolumeMount,
)


async def _noop(line: str) -> None:
    return None


class TestVolumeMount:
    def test_defaults_disabled(self) -> None:
        mount = VolumeMount()
        assert mount.enabled is False
        assert mount.read_only is False

    def test_enabled_requires_host_path(self) -> None:
        with pytest.raises(ValidationError, match="without a host path"):
            VolumeMount(enabled=True, host_path="", container_path="/app/code")

    def test_frozen(self) -> None:
        mount = VolumeMount(enabled=True, host_path="/src", container_path="/app/code")
        with pytest.raises(ValidationError):
            mount.host_path = "/other"  # type: ignore[misc]


class TestOutputTrigger:
    def test_first_match_returns_first_contained_pattern(self) -> None:
        trigger = OutputTrigger(patterns=("beta", "alpha"), on_match=_noop)
        assert trigger.first_match("alpha and beta") == "beta"

    def test_no_match(self) -> None:
        trigger = OutputTrigger(patterns=("error",), on_match=_noop)
        assert trigger.first_match("all good") is None

    def test_empty_patterns_never_match(self) -> None:
        trigger = OutputTrigger(patterns=(), on_match=_noop)
        assert trigger.first_match("anything") is None


class TestRunConfiguration:
    def test_empty_configuration(self) -> None:
        config = RunConfiguration()
        assert config.entrypoint is None
        assert config.args == []
        assert config.environment == {}
        assert config.volumes == {}
        assert not config.pull_latest_image
        assert not config.attach_output
        assert not config.setup_interrupt

    def test_env_strings(self) -> None:
        config = RunConfiguration(environment={"CI": "TRUE", "JAVA_TOOL_OPTIONS": ""})
        assert config.env_strings == ["CI=TRUE", "JAVA_TOOL_OPTIONS="]

    def test_volumes_keyed_by_slot(self) -> None:
        mount = VolumeMount(enabled=True, host_path="/src", container_path="/app/code")
        config = RunConfiguration(volumes={MountSlot.SOURCE_CODE: mount})
        assert config.volumes[MountSlot.SOURCE_CODE].host_path == "/src"


class TestRunResult:
    def test_defaults(self) -> None:
        result = RunResult(container_id="abc")
        assert result.exit_code is None
        assert result.interrupted is False
