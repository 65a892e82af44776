"""
Shared fixtures for the ata2 test suite.

Provides an isolated config directory, a validated default config, and
scripted stand-ins for the completion service and the line editor so
individual test modules can focus on behavior rather than setup.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Union

import pytest

from ata.config import AtaConfig, UiConfig
from ata.line_editor import LineEof
from ata.types import Fragment


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True, scope="session")
def _route_logs_through_stdlib():
    """Keep structlog output off stdout, where response text is asserted."""
    import structlog

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch):
    """Point the config directory at tmp_path and clear ATA2_* overrides."""
    import os

    for key in list(os.environ):
        if key.startswith("ATA2_"):
            monkeypatch.delenv(key, raising=False)
    config_home = tmp_path / "config"
    (config_home / "ata2").mkdir(parents=True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-0123456789abcdef")
    return config_home / "ata2"


@pytest.fixture()
def config_dir(_isolated_env) -> Path:
    return _isolated_env


@pytest.fixture()
def config(tmp_path) -> AtaConfig:
    return AtaConfig(
        api_key="sk-test-0123456789abcdef",
        ui=UiConfig(history_file=tmp_path / "history"),
    )


# ---------------------------------------------------------------------------
# Completion service stand-in
# ---------------------------------------------------------------------------

def text_fragments(*texts: str, stop: bool = True) -> list[Fragment]:
    """Candidate-0 fragments for *texts*, optionally closed by a stop."""
    fragments = [Fragment(text=t) for t in texts]
    if stop:
        fragments.append(Fragment(finish_reason="stop"))
    return fragments


ScriptedResponse = Union[Iterable[Fragment], Exception, Callable[[str], Iterable[Fragment]]]


class FakeCompletionClient:
    """Replays one scripted response per request and records the prompts.

    A response may be a list of fragments, an exception raised when the
    stream is created, or a callable taking the prompt.
    """

    def __init__(self, responses: Optional[list[ScriptedResponse]] = None, on_fragment=None):
        self.responses = list(responses or [])
        self.prompts: list[str] = []
        self.on_fragment = on_fragment

    async def stream(self, prompt: str):
        self.prompts.append(prompt)
        response = self.responses.pop(0) if self.responses else text_fragments()
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(prompt)
        for position, fragment in enumerate(response):
            await asyncio.sleep(0)
            yield fragment
            if self.on_fragment is not None:
                self.on_fragment(position)


@pytest.fixture()
def make_client():
    return FakeCompletionClient


@pytest.fixture()
def frags():
    return text_fragments


# ---------------------------------------------------------------------------
# Line editor stand-in
# ---------------------------------------------------------------------------

class FakeLineEditor:
    """Scripted line editor: each read returns the next string or raises the
    next exception. When the script runs out it reports end of input, or
    blocks forever with ``block_when_done``.
    """

    def __init__(self, script: Optional[list[Any]] = None, *, block_when_done: bool = False):
        self.script = list(script or [])
        self.block_when_done = block_when_done
        self.history: list[str] = []
        self.prompts: list[str] = []
        self.multiline = False
        self.on_save: Optional[Callable[[], Any]] = None
        self.loaded_from: Optional[Path] = None
        self.saved_to: Optional[Path] = None

    async def readline(self, prompt: str = "") -> str:
        self.prompts.append(prompt)
        await asyncio.sleep(0)
        if not self.script:
            if self.block_when_done:
                await asyncio.Event().wait()
            raise LineEof()
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def add_history_entry(self, line: str) -> None:
        self.history.append(line)

    async def enable_multiline(self) -> None:
        self.multiline = True

    async def enable_request_save(self, on_save: Callable[[], Any]) -> None:
        self.on_save = on_save

    async def load_history(self, path: Path) -> None:
        self.loaded_from = path

    async def save_history(self, path: Path) -> None:
        self.saved_to = path


@pytest.fixture()
def make_editor():
    return FakeLineEditor


# ---------------------------------------------------------------------------
# Channel stand-in
# ---------------------------------------------------------------------------

class RecordingSink:
    """Collects everything the producer sends."""

    def __init__(self) -> None:
        self.sent: list[Optional[str]] = []

    async def send(self, message: Optional[str]) -> None:
        self.sent.append(message)


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()
