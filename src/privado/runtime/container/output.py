"""OutputStreamProcessor — turns a container's output stream into lines and reacts to them.

The processor is *inactive* when no trigger sets are registered and output
is not attached; in that case the stream is never read. Otherwise it reads
one line at a time until end of stream, echoes the line when output is
attached, and tests it against every trigger set. Within a set only the
first matching pattern fires; several sets may fire for the same line.

Reactions run as separate tasks so a slow reaction never delays the next
read. Lines are consumed in order; reactions of different lines have no
ordering guarantee.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

from privado.utils.console import write_raw
from privado.runtime.container.models import OutputTrigger

logger = logging.getLogger(__name__)


class OutputStreamProcessor:
    """Reads a line-oriented stream and dispatches trigger reactions."""

    def __init__(
        self,
        triggers: Sequence[OutputTrigger] = (),
        *,
        attach_output: bool = False,
        writer: Callable[[str], None] = write_raw,
    ) -> None:
        self._triggers = tuple(triggers)
        self._attach_output = attach_output
        self._writer = writer
        self._reader_task: asyncio.Task[None] | None = None
        self._reactions: set[asyncio.Task[None]] = set()
        self.lines_read = 0

    @property
    def active(self) -> bool:
        return bool(self._triggers) or self._attach_output

    def start(self, stream: asyncio.StreamReader) -> bool:
        """Begin consuming *stream* in the background; returns ``False`` when inactive."""
        if not self.active:
            return False
        if self._reader_task is not None:
            msg = "OutputStreamProcessor already started"
            raise RuntimeError(msg)
        self._reader_task = asyncio.create_task(self._read_loop(stream))
        return True

    async def join(self) -> None:
        """Wait for end of stream and for every dispatched reaction to finish."""
        if self._reader_task is not None and not self._reader_task.cancelled():
            await self._reader_task
        while self._reactions:
            await asyncio.gather(*list(self._reactions), return_exceptions=True)

    async def cancel(self) -> None:
        """Stop reading; reactions already dispatched are left to finish."""
        if self._reader_task is not None and not self._reader_task.done():
            self._reader_task.cancel()
            try:
                await self._reader_task
            except asyncio.CancelledError:
                pass

    def process_line(self, line: str) -> None:
        """Echo *line* (if attached) and dispatch the reactions it triggers."""
        self.lines_read += 1
        if self._attach_output:
            self._writer(line)

        processed: str | None = None
        for trigger in self._triggers:
            if trigger.first_match(line) is None:
                continue
            if processed is None:
                processed = line.rstrip("\r\n").strip()
            task = asyncio.create_task(self._react(trigger, processed))
            self._reactions.add(task)
            task.add_done_callback(self._reactions.discard)

    async def _read_loop(self, stream: asyncio.StreamReader) -> None:
        while True:
            try:
                raw = await stream.readline()
            except ValueError:
                # line longer than the stream limit; the oversized chunk is dropped
                logger.debug("Skipped an oversized output line")
                continue
            if not raw:
                break
            self.process_line(raw.decode(errors="replace"))

    @staticmethod
    async def _react(trigger: OutputTrigger, line: str) -> None:
        try:
            await trigger.on_match(line)
        except Exception:
            logger.exception("Output reaction %r failed", trigger.name)
