"""CLI application — the ``ata2`` command.

Resolves and validates the configuration, shows it, optionally replays a
saved conversation, and then runs the interactive session.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import click
import structlog
from pydantic import ValidationError

from ata import __version__, terminal
from ata.cli.formatters import get_console, render_config
from ata.cli.help import missing_config, shortcuts_text
from ata.config import AtaConfig, ConfigError, ConfigLocation, load_settings
from ata.conversation import Conversation
from ata.main import configure_logging
from ata.session import AtaSession

logger = structlog.get_logger(__name__)


def _load_config(config_arg: str) -> AtaConfig:
    path = ConfigLocation.parse(config_arg).location()
    if not path.exists():
        missing_config(path)
        raise click.exceptions.Exit(1)
    try:
        return load_settings(path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    except ValidationError as e:
        messages = "; ".join(err["msg"].removeprefix("Value error, ") for err in e.errors())
        raise click.ClickException(f"Invalid configuration in {path}: {messages}") from e


def _load_conversation(path: Path) -> Conversation:
    try:
        conversation = Conversation.load(path)
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Could not load conversation: {e}") from e
    logger.debug("cli.conversation_loaded", path=str(path), messages=len(conversation))
    return conversation


def replay_conversation(conversation: Conversation) -> None:
    """Print a loaded conversation the way it looked when it was recorded."""
    for message in conversation.snapshot():
        if message["role"] == "user":
            terminal.eprint_bold("Prompt:\n")
            terminal.eprint_and_flush(message["content"] + "\n\n")
        else:
            terminal.eprint_bold("Response:\n")
            terminal.print_and_flush(message["content"] + "\n\n\n")


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    "config_arg",
    default="",
    show_default=False,
    help="Path to the configuration TOML file, or the name of a file in the config directory.",
)
@click.option("--hide-config", is_flag=True, help="Do not print the configuration before starting.")
@click.option("--print-shortcuts", is_flag=True, help="Print the keyboard shortcuts and exit.")
@click.option(
    "--load",
    "-l",
    "load_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Replay a saved conversation file and continue recording into it.",
)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging on stderr.")
@click.version_option(__version__, prog_name="ata2")
def cli(
    config_arg: str,
    hide_config: bool,
    print_shortcuts: bool,
    load_path: Optional[Path],
    verbose: bool,
) -> None:
    """Ask the Terminal Anything: stream chat completions in your terminal."""
    configure_logging(verbose)

    if print_shortcuts:
        click.echo(shortcuts_text())
        return

    config = _load_config(config_arg)

    if not (hide_config or config.ui.hide_config):
        get_console().print(render_config(config))
        click.echo("", err=True)

    conversation = Conversation()
    if load_path is not None:
        conversation = _load_conversation(load_path)
        replay_conversation(conversation)

    session = AtaSession(config, conversation=conversation)
    asyncio.run(session.run())
