"""Tests for CLI logging setup."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from privado.utils.log import configure_logging


class TestConfigureLogging:
    def test_debug_level(self) -> None:
        configure_logging(debug=True)
        assert logging.getLogger("privado").level == logging.DEBUG

    def test_default_level(self) -> None:
        configure_logging()
        assert logging.getLogger("privado").level == logging.WARNING

    def test_idempotent(self) -> None:
        configure_logging()
        configure_logging(debug=True)
        handlers = [
            h for h in logging.getLogger("privado").handlers if isinstance(h, RichHandler)
        ]
        assert len(handlers) == 1
