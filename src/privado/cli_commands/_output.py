"""Shared CLI output helpers."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, NoReturn

from privado.utils.console import console, err_console

if TYPE_CHECKING:
    from privado.context import RunContext

__all__ = ["console", "err_console", "exit_with", "print_update_notice"]


def print_update_notice(message: str) -> None:
    console.print(message)
    console.print("To use the latest version of Privado CLI, run `privado update`")
    console.print()


def exit_with(ctx: RunContext, msg: str, *, error: bool) -> NoReturn:
    """Print *msg*, post telemetry and exit with status 1 (error) or 0."""
    console.print(msg, markup=False)
    if error:
        ctx.telemetry.record_array_metric("error", msg)
    ctx.post_telemetry()
    sys.exit(1 if error else 0)
