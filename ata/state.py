"""
Control state shared by the input producer and the response consumer.

Three independent flags, each backed by its own ``asyncio.Event`` so every
read and write is a single atomic operation on the event loop. No ordering
between flags is assumed: a task that reads ``abort`` and then
``responding`` may observe them from different moments.
"""

from __future__ import annotations

import asyncio


class ControlState:
    """Process-wide session intent: abort, responding, pending interrupt.

    Carries no payload. Created once per session and handed to both tasks.
    """

    def __init__(self) -> None:
        self._abort = asyncio.Event()
        self._responding = asyncio.Event()
        self._pending_interrupt = asyncio.Event()

    # -- abort ---------------------------------------------------------------

    @property
    def abort(self) -> bool:
        """True once the user has ended the session."""
        return self._abort.is_set()

    def request_abort(self) -> None:
        self._abort.set()

    async def wait_for_abort(self) -> None:
        """Suspend until abort is requested. Used to race blocking waits."""
        await self._abort.wait()

    # -- responding ----------------------------------------------------------

    @property
    def responding(self) -> bool:
        return self._responding.is_set()

    @responding.setter
    def responding(self, value: bool) -> None:
        if value:
            self._responding.set()
        else:
            self._responding.clear()

    # -- pending interrupt ---------------------------------------------------

    @property
    def pending_interrupt(self) -> bool:
        return self._pending_interrupt.is_set()

    @pending_interrupt.setter
    def pending_interrupt(self, value: bool) -> None:
        if value:
            self._pending_interrupt.set()
        else:
            self._pending_interrupt.clear()

    def __repr__(self) -> str:
        return (
            f"ControlState(abort={self.abort}, responding={self.responding}, "
            f"pending_interrupt={self.pending_interrupt})"
        )
