"""Conversation record for export and replay.

Holds the user/assistant exchange of a session as OpenAI-style message
dicts. The F2 key handler runs on the line editor's thread while the
response consumer appends from the event loop, so access goes through a
plain ``threading.Lock`` held only for the copy or append.
"""

from __future__ import annotations

import json
import threading
import time
from pathlib import Path
from typing import Any, Iterable, Optional

import structlog

logger = structlog.get_logger(__name__)

_VALID_ROLES = ("user", "assistant", "system")


class Conversation:
    def __init__(self, messages: Optional[Iterable[dict[str, Any]]] = None):
        self._lock = threading.Lock()
        self._messages: list[dict[str, str]] = []
        for message in messages or []:
            self._append(message.get("role", ""), message.get("content", ""))

    def _append(self, role: str, content: Any) -> None:
        if role not in _VALID_ROLES:
            raise ValueError(f"Unknown message role: {role!r}")
        with self._lock:
            self._messages.append({"role": role, "content": str(content or "")})

    def add_user(self, content: str) -> None:
        self._append("user", content)

    def add_assistant(self, content: str) -> None:
        self._append("assistant", content)

    def snapshot(self) -> list[dict[str, str]]:
        with self._lock:
            return [dict(m) for m in self._messages]

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def to_json(self) -> str:
        return json.dumps(self.snapshot(), ensure_ascii=False)

    def save(self, directory: Optional[Path] = None, now: Optional[float] = None) -> Path:
        """Write the conversation to ``conversation-<unix seconds>.json``.

        An existing file with the same name is replaced.
        """
        stamp = int(now if now is not None else time.time())
        path = (directory or Path.cwd()) / f"conversation-{stamp}.json"
        path.write_text(self.to_json(), encoding="utf-8")
        logger.info("conversation.saved", path=str(path), messages=len(self))
        return path

    @classmethod
    def load(cls, path: Path) -> "Conversation":
        """Read a file written by ``save``. Raises ValueError on bad content."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"{path} is not a conversation file: {e}") from e
        if not isinstance(data, list) or not all(isinstance(m, dict) for m in data):
            raise ValueError(f"{path} is not a conversation file: expected a list of messages")
        return cls(data)
