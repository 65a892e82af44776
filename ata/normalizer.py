"""Newline repair for streamed completion text.

Some models emit the two characters ``\\`` and ``n`` where a line break was
meant, and the service may split that pair across two fragments
(``["Hello\\", "n", "World"]``). Printing fragments verbatim would leave a
literal backslash-n on screen; this module holds back a fragment that ends
in a backslash until the next one shows whether it completes the pair.
"""

from __future__ import annotations

ESCAPED_NEWLINE = "\\n"
BACKSLASH = "\\"


def fix_newlines(text: str) -> str:
    """Replace every literal backslash-n pair with a real newline."""
    return text.replace(ESCAPED_NEWLINE, "\n")


class TextNormalizer:
    """Stateful per-response normalizer. Use one instance per response cycle."""

    def __init__(self) -> None:
        self._buffer: list[str] = []

    def process(self, fragment: str) -> str:
        """Return the text to print for *fragment* (possibly empty)."""
        # Any trailing backslash is held: an even run may still pair its last
        # backslash with an "n" at the start of the next fragment.
        if fragment.endswith(BACKSLASH):
            self._buffer.append(fragment)
            return ""
        if self._buffer:
            fragment = "".join(self._buffer) + fragment
            self._buffer.clear()
        return fix_newlines(fragment)

    def flush(self) -> str:
        """Release whatever is still held once the stream has ended.

        The final backslash has no completing character, so it is printed as
        is; only pairs fully inside the held text are converted.
        """
        if not self._buffer:
            return ""
        held = "".join(self._buffer)
        self._buffer.clear()
        return fix_newlines(held)
