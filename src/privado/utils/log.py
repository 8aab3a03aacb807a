"""Logging setup for the CLI process."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from privado.utils.console import err_console

_LOGGER_NAME = "privado"


def configure_logging(debug: bool = False) -> None:
    """Route ``privado.*`` loggers to stderr through rich; idempotent."""
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(
            RichHandler(console=err_console, show_path=debug, rich_tracebacks=debug)
        )
    logger.propagate = False
