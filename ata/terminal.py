"""Terminal output helpers.

Response text goes to stdout untouched so it can be piped; everything else
(prompt headers, separators, error lines) goes to stderr and is only styled
when stderr is a terminal.
"""

from __future__ import annotations

import structlog
from rich.console import Console

from ata.state import ControlState

logger = structlog.get_logger(__name__)

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)


def print_and_flush(text: str) -> None:
    """Write response text to stdout unchanged, tabs and carriage returns included."""
    console.file.write(text)
    console.file.flush()


def eprint_and_flush(text: str) -> None:
    err_console.out(text, end="", highlight=False)
    err_console.file.flush()


def eprint_bold(msg: str) -> None:
    if err_console.is_terminal:
        err_console.out(msg, end="", style="bold", highlight=False)
        err_console.file.flush()
    else:
        eprint_and_flush(msg)


def print_prompt() -> None:
    if err_console.is_terminal:
        eprint_bold("Prompt:\n")


def print_response_prompt() -> None:
    if err_console.is_terminal:
        eprint_bold("Response:\n")


def finish_prompt(state: ControlState) -> None:
    """Close a response cycle and draw the next prompt header."""
    state.responding = False
    eprint_and_flush("\n\n")
    if not state.abort:
        print_prompt()


def report_error(msg: str) -> None:
    """Show a recoverable error line without ending the cycle bookkeeping."""
    logger.debug("terminal.error", message=msg)
    if err_console.is_terminal:
        err_console.out(msg, style="bold red", highlight=False)
    else:
        err_console.out(msg, highlight=False)
    err_console.file.flush()


def print_error(state: ControlState, msg: str) -> None:
    report_error(msg)
    finish_prompt(state)
