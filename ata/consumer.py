"""
Response consumer — turns each submitted line into one streamed completion
and prints it as it arrives.

Only candidate 0 is shown. Every fragment of every candidate is kept and
returned when the session ends, in arrival order.
"""

from __future__ import annotations

from contextlib import aclosing
from typing import Optional, Protocol

import openai
import structlog

from ata import terminal
from ata._utils import race_abort
from ata.conversation import Conversation
from ata.normalizer import TextNormalizer
from ata.state import ControlState
from ata.types import Fragment, LineMessage

logger = structlog.get_logger(__name__)

EMPTY_PROMPT_NOTICE = "Empty prompt, aborting."


def api_error_message(detail: object) -> str:
    return f"OpenAI API error: {detail}"


class LineReceiver(Protocol):
    async def recv(self) -> LineMessage: ...

    def close(self) -> None: ...


class ResponseConsumer:
    def __init__(
        self,
        state: ControlState,
        channel: LineReceiver,
        client,
        conversation: Optional[Conversation] = None,
    ):
        self._state = state
        self._channel = channel
        self._client = client
        self._conversation = conversation
        self.fragments: list[Fragment] = []

    async def _receive(self) -> tuple[bool, LineMessage]:
        return await race_abort(self._channel.recv(), self._state.wait_for_abort())

    async def run(self) -> list[Fragment]:
        """Process lines until the end-of-input sentinel or abort."""
        try:
            while not self._state.abort:
                received, line = await self._receive()
                if not received or line is None:
                    break
                await self.respond(line)
        finally:
            self._channel.close()
        logger.debug("consumer.finished", fragments=len(self.fragments))
        return self.fragments

    async def respond(self, line: str) -> None:
        """Run one response cycle for *line*."""
        if not line.strip():
            terminal.print_error(self._state, EMPTY_PROMPT_NOTICE)
            return

        normalizer = TextNormalizer()
        printed: list[str] = []
        success = False

        def emit(text: str) -> None:
            if text:
                printed.append(text)
                terminal.print_and_flush(text)

        self._state.responding = True
        try:
            async with aclosing(self._client.stream(line)) as stream:
                async for fragment in stream:
                    if self._state.abort:
                        break
                    self.fragments.append(fragment)
                    if not fragment.is_primary:
                        continue
                    if fragment.is_stop:
                        success = True
                        break
                    if fragment.is_error:
                        terminal.report_error(api_error_message(fragment.finish_reason))
                        logger.warning("consumer.finish_reason", reason=fragment.finish_reason)
                        break
                    if fragment.text is not None:
                        if not success:
                            terminal.print_response_prompt()
                        success = True
                        emit(normalizer.process(fragment.text))
        except openai.APIError as e:
            logger.warning("consumer.stream_error", error=str(e))
            terminal.report_error(api_error_message(e))

        emit(normalizer.flush())
        if not success:
            terminal.print_error(self._state, EMPTY_PROMPT_NOTICE)
        else:
            terminal.print_and_flush("\n")
            terminal.finish_prompt(self._state)

        if printed and self._conversation is not None:
            self._conversation.add_user(line)
            self._conversation.add_assistant("".join(printed))
