"""
Main — process setup for ata2.

Configures structlog over the standard-library logging module and hands
control to the click command. Logs go to stderr so that response text on
stdout stays clean when piped.
"""

from __future__ import annotations

import logging
import re

import structlog

_API_KEY_RE = re.compile(r"sk-[A-Za-z0-9_-]{8,}")
_SECRET_KEYS = {"api_key", "authorization"}
_TRUNCATED_KEYS = {"prompt", "content", "text"}
_MAX_DISPLAY_LEN = 80


def _redact_sensitive_fields(logger, method_name, event_dict):
    """
    Structlog processor that keeps secrets and long user text out of logs.

    Secret fields are replaced outright; any API-key-shaped token inside other
    string fields is masked; prompt and response text is truncated.
    """
    for key in _SECRET_KEYS:
        if event_dict.get(key):
            event_dict[key] = "[redacted]"

    for key, val in list(event_dict.items()):
        if isinstance(val, str):
            val = _API_KEY_RE.sub("[redacted]", val)
            if key in _TRUNCATED_KEYS and len(val) > _MAX_DISPLAY_LEN:
                val = val[:_MAX_DISPLAY_LEN] + "... [truncated]"
            event_dict[key] = val

    return event_dict


_logging_configured = False


def configure_logging(verbose: bool = False) -> None:
    """Configure structlog and standard-library logging.

    Safe to call more than once; a later call only raises the level to DEBUG
    when *verbose* is set.
    """
    global _logging_configured  # noqa: PLW0603
    level = logging.DEBUG if verbose else logging.WARNING
    if _logging_configured:
        if verbose:
            logging.getLogger().setLevel(level)
        return
    _logging_configured = True

    logging.basicConfig(format="%(message)s", level=level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            _redact_sensitive_fields,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def main() -> None:
    """Console entry point."""
    from ata.cli.app import cli

    cli(prog_name="ata2")


if __name__ == "__main__":
    main()
