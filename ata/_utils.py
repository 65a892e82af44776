"""Small async helpers shared by the session tasks."""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")


async def run_blocking_call(fn: Callable[[], T], *, name: Optional[str] = None) -> T:
    """
    Run a blocking callable in a dedicated daemon thread.

    Terminal reads cannot be interrupted from another thread, so a read that
    is abandoned keeps its thread, which never holds up exit.
    """
    loop = asyncio.get_running_loop()
    done = asyncio.Event()
    box: dict[str, Any] = {}

    def _invoke() -> None:
        try:
            box["result"] = fn()
        except BaseException as exc:
            box["error"] = exc
        finally:
            try:
                loop.call_soon_threadsafe(done.set)
            except RuntimeError:
                pass

    thread = threading.Thread(target=_invoke, name=name, daemon=True)
    thread.start()
    await done.wait()

    if "error" in box:
        raise box["error"]
    return box.get("result")


async def race_abort(awaitable: Awaitable[T], abort_wait: Awaitable[None]) -> tuple[bool, Optional[T]]:
    """Await *awaitable* unless *abort_wait* finishes first.

    Returns ``(True, result)`` when the awaitable won and ``(False, None)``
    when abort came first; the loser is cancelled either way.
    """
    work = asyncio.ensure_future(awaitable)
    stop = asyncio.ensure_future(abort_wait)
    try:
        done, _ = await asyncio.wait({work, stop}, return_when=asyncio.FIRST_COMPLETED)
        if work in done:
            return True, work.result()
        return False, None
    finally:
        for task in (work, stop):
            if not task.done():
                task.cancel()
        await asyncio.gather(work, stop, return_exceptions=True)
