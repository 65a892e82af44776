"""
Input producer — collects one logical line per iteration and hands it to the
response consumer.

On a terminal each iteration is one line-editor read with an empty prompt;
the visible "Prompt:" header is drawn separately around each response, since
the editor may redraw its own prompt line while a response is still printing.
On a pipe the whole input is read once as a single submission and the next
iteration reports end of input.
"""

from __future__ import annotations

import sys
from typing import IO, Optional, Protocol

import structlog

from ata import terminal
from ata._utils import race_abort, run_blocking_call
from ata.line_editor import LineEof, LineInterrupted
from ata.state import ControlState

logger = structlog.get_logger(__name__)

INTERRUPT_HINT = "\nPress Ctrl-C again to exit."


class LineSink(Protocol):
    async def send(self, message: Optional[str]) -> None: ...


class LineSource(Protocol):
    async def readline(self, prompt: str = "") -> str: ...

    async def add_history_entry(self, line: str) -> None: ...


class InputProducer:
    """Reads lines and sends them, implementing the Ctrl-C protocol.

    ``interactive`` selects terminal reads through *editor*; otherwise *stdin*
    is read to the end once.
    """

    def __init__(
        self,
        state: ControlState,
        channel: LineSink,
        editor: Optional[LineSource] = None,
        *,
        double_ctrlc: bool = True,
        interactive: bool = True,
        stdin: Optional[IO[str]] = None,
    ):
        if interactive and editor is None:
            raise ValueError("Interactive input needs a line editor")
        self._state = state
        self._channel = channel
        self._editor = editor
        self._double_ctrlc = double_ctrlc
        self._interactive = interactive
        self._stdin = stdin
        self._already_read = False

    async def _read(self) -> str:
        if self._interactive:
            return await self._editor.readline("")
        if self._already_read:
            raise LineEof()
        stream = self._stdin or sys.stdin
        text = await run_blocking_call(stream.read, name="ata-stdin")
        self._already_read = True
        return text

    def handle_interrupt(self) -> bool:
        """Apply one Ctrl-C. Returns True when the session should end.

        With double confirmation the first press only arms ``pending_interrupt``
        and shows a hint; a second press before any submitted line ends it.
        """
        if self._double_ctrlc and not self._state.pending_interrupt:
            self._state.pending_interrupt = True
            terminal.eprint_and_flush(INTERRUPT_HINT)
            terminal.print_prompt()
            logger.debug("producer.interrupt_armed")
            return False
        logger.debug("producer.interrupt_confirmed")
        return True

    async def _close(self) -> None:
        await self._channel.send(None)

    async def run(self) -> None:
        """Loop until end of input, a confirmed interrupt, or abort."""
        terminal.print_prompt()
        while not self._state.abort:
            try:
                finished, line = await race_abort(self._read(), self._state.wait_for_abort())
            except LineInterrupted:
                if not self.handle_interrupt():
                    continue
                await self._close()
                self._state.request_abort()
                break
            except LineEof:
                self._state.pending_interrupt = False
                await self._close()
                break
            except (OSError, UnicodeDecodeError) as e:
                logger.error("producer.read_error", error=str(e))
                terminal.report_error(f"Input error: {e}")
                await self._close()
                break

            if not finished:
                # Abort was raised elsewhere while the read was pending.
                break
            if not line:
                continue

            if self._interactive:
                await self._editor.add_history_entry(line)
            await self._channel.send(line)
            self._state.pending_interrupt = False

        logger.debug("producer.closed", aborted=self._state.abort)
