"""
Line editor — prompt_toolkit wrapper shared by the input producer and the
key-triggered conversation save.

Every editor operation (read, history append, key binding, history save and
load) takes ``self.lock`` for exactly that one operation and releases it
right after, so no caller ever holds it across a network wait. The
prompt_toolkit session itself is built lazily on the first read: building
it needs a real terminal, while history operations do not.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Optional

import structlog
from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings

from ata._utils import run_blocking_call

logger = structlog.get_logger(__name__)


class ReadlineError(Exception):
    """Base class for the outcomes of a line read other than a line."""


class LineInterrupted(ReadlineError):
    """The user pressed Ctrl-C while editing."""


class LineEof(ReadlineError):
    """The input stream ended (Ctrl-D on an empty line, closed terminal)."""


class LineEditor:
    """Async-safe facade over a prompt_toolkit ``PromptSession``."""

    def __init__(self, session_factory: Optional[Callable[..., Any]] = None):
        self.lock = asyncio.Lock()
        self._history = InMemoryHistory()
        self._bindings = KeyBindings()
        self._multiline = False
        self._session: Optional[Any] = None
        self._session_factory = session_factory or PromptSession

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _ensure_session(self) -> Any:
        if self._session is None:
            self._session = self._session_factory(
                history=self._history,
                key_bindings=self._bindings,
                multiline=self._multiline,
            )
        return self._session

    def _read_line_blocking(self, prompt: str) -> str:
        session = self._ensure_session()
        try:
            # Signals belong to the main thread; Ctrl-C arrives as a key here.
            return session.prompt(prompt, handle_sigint=False, set_exception_handler=False)
        except KeyboardInterrupt as e:
            raise LineInterrupted() from e
        except EOFError as e:
            raise LineEof() from e

    async def readline(self, prompt: str = "") -> str:
        """Read one line; raises ``LineInterrupted`` or ``LineEof`` instead."""
        async with self.lock:
            return await run_blocking_call(
                lambda: self._read_line_blocking(prompt),
                name="ata-readline",
            )

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def add_history_entry(self, line: str) -> None:
        async with self.lock:
            self._history.append_string(line)

    async def load_history(self, path: Path) -> None:
        """Append the entries stored at *path* (oldest first) to the history."""
        async with self.lock:
            # load_history_strings yields newest first.
            entries = list(FileHistory(str(path)).load_history_strings())
            for entry in reversed(entries):
                self._history.append_string(entry)
            logger.debug("line_editor.history_loaded", path=str(path), entries=len(entries))

    async def save_history(self, path: Path) -> None:
        """Replace the file at *path* with the current history."""
        async with self.lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("", encoding="utf-8")
            target = FileHistory(str(path))
            entries = self._history.get_strings()
            for entry in entries:
                target.store_string(entry)
            logger.debug("line_editor.history_saved", path=str(path), entries=len(entries))

    # ------------------------------------------------------------------
    # Key bindings (applied once at startup, before the first read)
    # ------------------------------------------------------------------

    async def enable_multiline(self) -> None:
        """Enter inserts a newline; Ctrl-D submits the whole buffer."""
        async with self.lock:
            self._multiline = True

            @self._bindings.add("c-d")
            def _accept(event: Any) -> None:
                event.current_buffer.validate_and_handle()

    async def enable_request_save(self, on_save: Callable[[], Any]) -> None:
        """Bind F2 to *on_save*; its result, if any, is echoed above the prompt."""
        async with self.lock:

            @self._bindings.add("f2")
            def _save(event: Any) -> None:
                from prompt_toolkit.application import run_in_terminal

                result = on_save()
                if result is not None:
                    run_in_terminal(lambda: print(f"Saved conversation to {result}"))
