"""
Core data types shared across ata subsystems.

These containers cross the boundary between the completion client, the
response consumer and the conversation record. They live here rather than
in a specific module to avoid circular imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

# A submitted line, or None as the end-of-input sentinel.
LineMessage = Optional[str]

FINISH_STOP = "stop"


@dataclass(frozen=True)
class Fragment:
    """One incremental piece of a streamed completion.

    ``index`` identifies the candidate completion the piece belongs to (only
    candidate 0 is printed). ``finish_reason`` is None while the candidate is
    still streaming, ``"stop"`` when it ended normally, and any other value
    (``"length"``, ``"content_filter"``, ...) when it ended abnormally.
    """

    index: int = 0
    text: Optional[str] = None
    finish_reason: Optional[str] = None

    @property
    def is_primary(self) -> bool:
        return self.index == 0

    @property
    def is_stop(self) -> bool:
        return self.finish_reason == FINISH_STOP

    @property
    def is_error(self) -> bool:
        return self.finish_reason is not None and self.finish_reason != FINISH_STOP

    @classmethod
    def from_choice(cls, choice: Any) -> "Fragment":
        """Build a fragment from an OpenAI ``ChatCompletionChunk`` choice."""
        delta = getattr(choice, "delta", None)
        text = getattr(delta, "content", None) if delta is not None else None
        finish_reason: Union[str, None, Any] = getattr(choice, "finish_reason", None)
        if finish_reason is not None and not isinstance(finish_reason, str):
            finish_reason = str(getattr(finish_reason, "value", finish_reason))
        return cls(
            index=int(getattr(choice, "index", 0) or 0),
            text=text,
            finish_reason=finish_reason,
        )
