"""Shared fixtures: isolated home directory, application config and run context."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import pytest

from privado.ci import CISession
from privado.config.app import AppConfig
from privado.config.user import UserConfig
from privado.context import RunContext

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _reset_privado_logger() -> Iterator[None]:
    """configure_logging() detaches the privado logger; undo that between tests."""
    yield
    logger = logging.getLogger("privado")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def app_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AppConfig:
    monkeypatch.delenv("PRIVADO_DEV", raising=False)
    monkeypatch.delenv("PRIVADO_TAG", raising=False)
    monkeypatch.setattr(sys, "argv", ["privado"])
    home = tmp_path / "home"
    home.mkdir()
    config = AppConfig.from_environment(home=home)
    config.slowdown_time = 0
    config.cache_directory = tmp_path / "cache"
    return config


@pytest.fixture
def run_context(app_config: AppConfig) -> RunContext:
    return RunContext(
        app=app_config,
        user=UserConfig(user_hash="user-hash", session_id="session-1"),
        ci=CISession(),
        version="1.2.0",
    )
