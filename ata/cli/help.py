"""Help text for the line editor shortcuts and for first-time setup."""

from __future__ import annotations

from pathlib import Path

import click

from ata.cli.formatters import get_console
from ata.config_file import generate_template, write_example

_SHORTCUTS = (
    ("Ctrl-A, Home", "Move cursor to the beginning of line"),
    ("Ctrl-B, Left", "Move cursor one character left"),
    ("Ctrl-E, End", "Move cursor to end of line"),
    ("Ctrl-F, Right", "Move cursor one character right"),
    ("Ctrl-H, Backspace", "Delete character before cursor"),
    ("Ctrl-K", "Delete from cursor to end of line"),
    ("Ctrl-U", "Delete from cursor to beginning of line"),
    ("Ctrl-W", "Delete the word before the cursor"),
    ("Ctrl-L", "Clear screen"),
    ("Ctrl-N, Down", "Next entry from history"),
    ("Ctrl-P, Up", "Previous entry from history"),
    ("Ctrl-R", "Reverse search in history"),
    ("Ctrl-_", "Undo"),
    ("Ctrl-Y", "Paste from the kill ring"),
    ("Meta-<", "Move to first entry in history"),
    ("Meta->", "Move to last entry in history"),
    ("Meta-B", "Move cursor to previous word"),
    ("Meta-F", "Move cursor to next word"),
    ("Meta-C", "Capitalize the current word"),
    ("Meta-D", "Delete forwards one word"),
    ("Meta-L", "Lower-case the next word"),
    ("Meta-U", "Upper-case the next word"),
    ("Meta-Backspace", "Delete backwards one word"),
    ("Enter", "Submit the prompt (inserts a newline with multiline_insertions)"),
    ("Ctrl-D", "Submit the prompt with multiline_insertions; exit on an empty line otherwise"),
    ("F2", "Save the conversation to conversation-<timestamp>.json"),
    ("Ctrl-C", "Exit (press twice with double_ctrlc)"),
)


def shortcuts_text() -> str:
    width = max(len(keys) for keys, _ in _SHORTCUTS) + 4
    lines = [f"{keys.ljust(width)}{action}" for keys, action in _SHORTCUTS]
    lines.append("")
    lines.append("Emacs editing mode; see the prompt_toolkit key binding reference for more.")
    return "\n".join(lines)


def missing_config(path: Path) -> bool:
    """Explain how to create the config at *path* and offer to write it.

    Returns True when the example file was written.
    """
    console = get_console()
    console.print(
        f"\nCould not find the file `{path.name}`. To fix this, create {path}.\n\n"
        "For example, use the following content:\n",
        markup=False,
    )
    console.print(generate_template(), markup=False)
    console.print(
        "Here, replace `<YOUR SECRET API KEY>` with your API key.\n\n"
        "The `max_tokens` sets the maximum amount of tokens that the server can answer with. "
        "Longer answers will be truncated.\n\n"
        "The `temperature` sets the sampling temperature. Higher values make the model take "
        "more risks; 0 picks the most likely token every time.\n",
        markup=False,
    )
    if not click.confirm(
        f"Do you want me to write this example file to {path} for you to edit?",
        default=False,
        err=True,
    ):
        return False
    write_example(path)
    console.print(f"Wrote {path}", markup=False)
    return True
