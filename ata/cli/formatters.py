"""CLI formatters — configuration display."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ata.config import AtaConfig

REDACTED = "[redacted]"


def get_console(no_color: bool = False) -> Console:
    """Get a Rich Console on stderr, optionally with color disabled."""
    return Console(stderr=True, no_color=no_color, highlight=False)


def _display_value(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value) or "-"
    if isinstance(value, dict):
        return ", ".join(f"{k}={v}" for k, v in value.items()) or "-"
    return str(value)


def config_rows(config: AtaConfig) -> list[tuple[str, str]]:
    """Return ``(key, shown value)`` pairs for every config field, UI last."""
    rows: list[tuple[str, str]] = []
    for name in AtaConfig.model_fields:
        if name == "ui":
            continue
        value = getattr(config, name)
        if name == "api_key" and config.ui.redact_api_key:
            shown = REDACTED
        elif name == "model":
            shown = str(value).upper()
        else:
            shown = _display_value(value)
        rows.append((name, shown))
    for name in type(config.ui).model_fields:
        rows.append((f"ui.{name}", _display_value(getattr(config.ui, name))))
    return rows


def render_config(config: AtaConfig) -> Table:
    """Build the "Configuration:" table shown before a session starts."""
    table = Table(title="Configuration:", title_justify="left", show_header=False, box=None)
    table.add_column("key", style="bold")
    table.add_column("value")
    for key, shown in config_rows(config):
        value = Text(shown, style="red") if shown == REDACTED and key == "api_key" else Text(shown)
        table.add_row(key, value)
    return table
