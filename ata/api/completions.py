"""
Chat completion client — the remote end of every response cycle.

Wraps the OpenAI SDK's async client and turns one prompt into a stream of
``Fragment`` objects. The client keeps no conversation state: each request
carries exactly one user message. Errors from the transport surface as
``openai.APIError`` subclasses and are handled by the response consumer.
"""

from __future__ import annotations

import inspect
import time
from typing import Any, AsyncIterator, Optional

import openai
import structlog

from ata.config import AtaConfig
from ata.types import Fragment

logger = structlog.get_logger(__name__)


class CompletionClientInitError(RuntimeError):
    """Raised when the completion client cannot be initialized safely."""


class CompletionClient:
    """
    Streams chat completions for single prompts.

    Request parameters (model, sampling, penalties, stop phrases, logit bias,
    number of candidates) are fixed from the configuration at construction.
    """

    def __init__(self, config: AtaConfig, client: Optional[Any] = None):
        try:
            self._client = client or openai.AsyncOpenAI(api_key=config.api_key)
            self._config = config

            # Telemetry
            self._total_requests = 0
            self._total_fragments = 0
            self._last_request_seconds: Optional[float] = None

            logger.debug(
                "completion_client.initialized",
                model=config.model,
                base_url=str(getattr(self._client, "base_url", "")),
                n=config.n,
            )
        except Exception as exc:
            raise CompletionClientInitError(
                f"Failed to initialize completion client: {exc}"
            ) from exc

    def build_request(self, prompt: str) -> dict[str, Any]:
        """Return the keyword arguments for ``chat.completions.create``."""
        cfg = self._config
        kwargs: dict[str, Any] = {
            "model": cfg.model,
            "messages": [{"role": "user", "content": prompt}],
            "n": cfg.n,
            "max_tokens": cfg.max_tokens,
            "temperature": cfg.temperature,
            "top_p": cfg.top_p,
            "presence_penalty": cfg.presence_penalty,
            "frequency_penalty": cfg.frequency_penalty,
            "stream": True,
        }
        if cfg.stop:
            kwargs["stop"] = list(cfg.stop)
        if cfg.logit_bias:
            kwargs["logit_bias"] = dict(cfg.logit_bias)
        if cfg.user_id:
            kwargs["user"] = cfg.user_id
        return kwargs

    async def stream(self, prompt: str) -> AsyncIterator[Fragment]:
        """Issue one streaming request and yield its fragments in arrival order.

        Every choice of every chunk becomes one fragment, so with ``n > 1`` the
        candidates arrive interleaved and are told apart by ``index``.
        """
        start_time = time.monotonic()
        self._total_requests += 1
        logger.debug("completion_client.request", prompt=prompt, model=self._config.model)

        response = await self._client.chat.completions.create(**self.build_request(prompt))
        try:
            async for chunk in response:
                for choice in chunk.choices:
                    self._total_fragments += 1
                    yield Fragment.from_choice(choice)
        finally:
            close = getattr(response, "close", None)
            if close is not None:
                maybe_awaitable = close()
                if inspect.isawaitable(maybe_awaitable):
                    await maybe_awaitable
            self._last_request_seconds = time.monotonic() - start_time
            logger.debug("completion_client.stream_closed", **self.telemetry)

    @property
    def telemetry(self) -> dict[str, Any]:
        """Return current telemetry snapshot."""
        return {
            "total_requests": self._total_requests,
            "total_fragments": self._total_fragments,
            "last_request_seconds": round(self._last_request_seconds or 0.0, 2),
        }
