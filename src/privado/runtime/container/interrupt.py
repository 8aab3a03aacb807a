"""InterruptCoordinator — Ctrl-C/SIGTERM handling for a container run.

States: ``uninstalled → installed → fired | uninstalled``. When fired, the
registered callback (forceful container removal) runs and the process
terminates immediately; no further cleanup happens after that point.
At most one coordinator is installed per process, and a run that installs
one must uninstall it on every exit path.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from privado.utils.console import console as default_console

if TYPE_CHECKING:
    from rich.console import Console

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


class InterruptState(str, Enum):
    UNINSTALLED = "uninstalled"
    INSTALLED = "installed"
    FIRED = "fired"


def terminate_process(code: int) -> None:
    """Flush standard streams and exit without unwinding."""
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (OSError, ValueError):
            pass
    os._exit(code)


class InterruptCoordinator:
    """Installs a process-wide signal handler for the duration of one run."""

    _active: ClassVar[InterruptCoordinator | None] = None

    def __init__(
        self,
        *,
        signals: tuple[signal.Signals, ...] = DEFAULT_SIGNALS,
        exit_fn: Callable[[int], None] = terminate_process,
        exit_code: int = 0,
        console: Console = default_console,
    ) -> None:
        self._signals = signals
        self._console = console
        self._exit_fn = exit_fn
        self._exit_code = exit_code
        self._state = InterruptState.UNINSTALLED
        self._on_interrupt: Callable[[], Awaitable[None]] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._loop_handled: list[signal.Signals] = []
        self._previous_handlers: dict[signal.Signals, Any] = {}
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> InterruptState:
        return self._state

    @property
    def fired(self) -> bool:
        return self._state is InterruptState.FIRED

    @classmethod
    def active(cls) -> InterruptCoordinator | None:
        return cls._active

    def install(self, on_interrupt: Callable[[], Awaitable[None]]) -> None:
        """Start listening for interrupts; *on_interrupt* runs before the process exits."""
        if InterruptCoordinator._active is not None:
            msg = "an interrupt handler is already installed"
            raise RuntimeError(msg)

        self._loop = asyncio.get_running_loop()
        self._on_interrupt = on_interrupt
        for sig in self._signals:
            try:
                self._loop.add_signal_handler(sig, self._fire, sig)
                self._loop_handled.append(sig)
            except (NotImplementedError, RuntimeError):
                # No loop signal support (e.g. Windows): fall back to signal.signal
                self._previous_handlers[sig] = signal.signal(sig, self._threadsafe_fire)

        self._state = InterruptState.INSTALLED
        InterruptCoordinator._active = self
        logger.debug("Interrupt handler installed for %s", [s.name for s in self._signals])

    def uninstall(self) -> None:
        """Remove the handler so it cannot fire for unrelated signals; idempotent."""
        if self._loop is not None:
            for sig in self._loop_handled:
                self._loop.remove_signal_handler(sig)
        for sig, previous in self._previous_handlers.items():
            signal.signal(sig, previous)
        self._loop_handled.clear()
        self._previous_handlers.clear()

        if self._state is InterruptState.INSTALLED:
            self._state = InterruptState.UNINSTALLED
        if InterruptCoordinator._active is self:
            InterruptCoordinator._active = None

    async def wait_fired(self) -> None:
        """Wait for the interrupt callback to complete (after the signal fired)."""
        if self._task is not None:
            await self._task

    def _threadsafe_fire(self, signum: int, _frame: object) -> None:
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self._fire, signal.Signals(signum))

    def _fire(self, sig: signal.Signals) -> None:
        if self._state is not InterruptState.INSTALLED or self._loop is None:
            return
        self._state = InterruptState.FIRED
        logger.debug("Received %s", sig.name)
        self._task = self._loop.create_task(self._handle())

    async def _handle(self) -> None:
        self._console.print("\n> Received interrupt signal")
        self._console.print("> Terminating..")
        try:
            if self._on_interrupt is not None:
                await self._on_interrupt()
        except Exception:
            logger.exception("Cleanup after interrupt failed")
        finally:
            self._exit_fn(self._exit_code)
