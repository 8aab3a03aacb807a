"""Tests for RunContext bootstrap and telemetry posting."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import patch

import httpx

from privado.auth import calculate_sha256_hash
from privado.context import RunContext
from privado.telemetry import Telemetry

if TYPE_CHECKING:
    import pytest

    from privado.config.app import AppConfig


class TestBootstrap:
    def test_creates_key_and_config(
        self, app_config: AppConfig, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("CI", raising=False)
        ctx = RunContext.bootstrap(app_config)

        assert app_config.user_key_path.exists()
        assert app_config.user_configuration_file.exists()
        assert len(ctx.user.user_hash) == 64
        assert ctx.user.config_file.metrics_enabled is True

    def test_load_docker_access_hash(self, run_context: RunContext) -> None:
        run_context.load_docker_access_hash("key")
        assert run_context.user.docker_access_hash == calculate_sha256_hash("key")


class TestPostTelemetry:
    def test_skipped_without_docker_hash(self, run_context: RunContext) -> None:
        with patch.object(Telemetry, "post_recorded") as mock_post:
            run_context.post_telemetry()
        mock_post.assert_not_called()

    def test_skipped_when_metrics_disabled(self, run_context: RunContext) -> None:
        run_context.load_docker_access_hash("key")
        run_context.user.config_file.metrics_enabled = False
        with patch.object(Telemetry, "post_recorded") as mock_post:
            run_context.post_telemetry()
        mock_post.assert_not_called()

    def test_posts_once_enabled(self, run_context: RunContext) -> None:
        run_context.load_docker_access_hash("key")
        with patch.object(Telemetry, "post_recorded") as mock_post:
            run_context.post_telemetry()

        request = mock_post.call_args.args[0]
        assert request.url == run_context.app.telemetry_endpoint
        assert request.authentication_key_hash == calculate_sha256_hash("key")

    def test_failures_are_swallowed(self, run_context: RunContext) -> None:
        run_context.load_docker_access_hash("key")
        with patch.object(
            Telemetry, "post_recorded", side_effect=httpx.ConnectError("offline")
        ):
            run_context.post_telemetry()
