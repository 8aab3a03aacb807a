"""Privado CLI — scan repositories for privacy data flows with the Privado engine image."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from privado.context import RunContext as RunContext
    from privado.runtime.container.runner import ContainerRunner as ContainerRunner

_LAZY_EXPORTS = {
    "ContainerRunner": "privado.runtime.container.runner",
    "RunContext": "privado.context",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'privado' has no attribute {name!r}")
