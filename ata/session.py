"""
Session loop — wires the input producer and the response consumer together.

The two run as tasks on one event loop and talk through a ``LineChannel``
of capacity one, so at most one response is in flight and the producer
waits on send while a submitted line is still queued. The session ends
once the consumer has seen the end-of-input sentinel (or abort) and
everything queued before it has been answered.
"""

from __future__ import annotations

import asyncio
import signal
import sys
from pathlib import Path
from typing import IO, Any, Optional

import structlog

from ata.api.completions import CompletionClient
from ata.config import AtaConfig
from ata.consumer import ResponseConsumer
from ata.conversation import Conversation
from ata.line_editor import LineEditor
from ata.producer import InputProducer
from ata.state import ControlState
from ata.types import Fragment, LineMessage

try:  # pragma: no cover - platform-dependent optional module
    import termios as _termios
except ImportError:  # pragma: no cover
    _termios = None

logger = structlog.get_logger(__name__)


class ChannelClosedError(RuntimeError):
    """Raised when a line is sent after the receiving side has gone away."""


class LineChannel:
    """Bounded, ordered, single-producer single-consumer line queue."""

    def __init__(self, capacity: int = 1):
        self._queue: asyncio.Queue[LineMessage] = asyncio.Queue(maxsize=capacity)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, message: LineMessage) -> None:
        if self._closed:
            raise ChannelClosedError("Line channel is closed")
        await self._queue.put(message)

    async def recv(self) -> LineMessage:
        return await self._queue.get()

    def close(self) -> None:
        self._closed = True


class AtaSession:
    """One interactive (or piped) run of ata2 against a validated config."""

    def __init__(
        self,
        config: AtaConfig,
        client: Optional[Any] = None,
        editor: Optional[LineEditor] = None,
        *,
        interactive: Optional[bool] = None,
        stdin: Optional[IO[str]] = None,
        conversation: Optional[Conversation] = None,
        save_dir: Optional[Path] = None,
    ):
        self._config = config
        self._client = client
        self._editor = editor
        self._stdin = stdin
        self._interactive = (
            interactive if interactive is not None else (stdin or sys.stdin).isatty()
        )
        self.conversation = conversation if conversation is not None else Conversation()
        self._save_dir = save_dir
        self.state = ControlState()
        self.channel = LineChannel()
        self._producer: Optional[InputProducer] = None
        self._stdin_term_attrs: Any = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def run(self) -> list[Fragment]:
        """Run until end of input or a confirmed interrupt; return all fragments."""
        ui = self._config.ui
        client = self._client or CompletionClient(self._config)
        editor = self._editor
        if self._interactive and editor is None:
            editor = LineEditor()

        self._capture_terminal_state()
        try:
            if self._interactive and editor is not None:
                await self._prepare_editor(editor)

            self._producer = InputProducer(
                self.state,
                self.channel,
                editor,
                double_ctrlc=ui.double_ctrlc,
                interactive=self._interactive,
                stdin=self._stdin,
            )
            consumer = ResponseConsumer(self.state, self.channel, client, self.conversation)

            self._install_signal_handlers()
            producer_task = asyncio.create_task(self._producer.run(), name="ata-producer")
            producer_task.add_done_callback(self._on_producer_done)
            consumer_task = asyncio.create_task(consumer.run(), name="ata-consumer")
            try:
                fragments = await consumer_task
            finally:
                self._remove_signal_handlers()
                await self._settle_producer(producer_task)

            if self._interactive and editor is not None and ui.save_history:
                await editor.save_history(ui.history_file)
                logger.debug("session.history_saved", path=str(ui.history_file))
        finally:
            self._restore_terminal_state()

        logger.info("session.finished", fragments=len(fragments), aborted=self.state.abort)
        return fragments

    def _on_producer_done(self, task: asyncio.Task) -> None:
        if not task.cancelled() and task.exception() is not None:
            # The consumer would otherwise wait forever for the next line.
            self.state.request_abort()

    async def _settle_producer(self, task: asyncio.Task) -> None:
        """Surface a producer failure, or stop a producer still waiting on input."""
        if task.done():
            # Raises ChannelClosedError or a read failure, if there was one.
            task.result()
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _prepare_editor(self, editor: LineEditor) -> None:
        ui = self._config.ui
        if ui.multiline_insertions:
            await editor.enable_multiline()
        await editor.enable_request_save(self._save_conversation)
        if ui.save_history and ui.history_file.exists():
            await editor.load_history(ui.history_file)

    def _save_conversation(self) -> Optional[Path]:
        try:
            return self.conversation.save(self._save_dir)
        except OSError as e:
            logger.error("session.conversation_save_failed", error=str(e))
            return None

    # ------------------------------------------------------------------
    # Signal handling
    # ------------------------------------------------------------------

    def _handle_sigint(self) -> None:
        """Ctrl-C outside a line read follows the same two-press protocol."""
        if self.state.abort or self._producer is None:
            return
        if self._producer.handle_interrupt():
            self.state.request_abort()

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, self._handle_sigint)
        except (NotImplementedError, RuntimeError):
            logger.debug("session.signal_handlers_unavailable")

    def _remove_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            logger.debug("session.signal_handlers_unavailable")

    # ------------------------------------------------------------------
    # Terminal state
    # ------------------------------------------------------------------

    def _capture_terminal_state(self) -> None:
        """Capture the current terminal mode so it can be restored on exit."""
        if _termios is None or not self._interactive or not sys.stdin.isatty():
            return
        try:
            self._stdin_term_attrs = _termios.tcgetattr(sys.stdin.fileno())
        except _termios.error:
            self._stdin_term_attrs = None

    def _restore_terminal_state(self) -> None:
        if _termios is None or self._stdin_term_attrs is None:
            return
        try:
            _termios.tcsetattr(sys.stdin.fileno(), _termios.TCSADRAIN, self._stdin_term_attrs)
        except _termios.error as e:
            logger.debug("session.tty_restore_failed", error=str(e))
