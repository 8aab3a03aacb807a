"""Terminal output shared by the runtime and the CLI."""

from __future__ import annotations

import sys

from rich.console import Console

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def write_raw(text: str) -> None:
    """Write container output verbatim, bypassing rich rendering."""
    sys.stdout.write(text)
    sys.stdout.flush()
