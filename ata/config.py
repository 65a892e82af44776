# ata/config.py
"""
Configuration for ata2.

Values come from a TOML file (see ``ata.config_file``) and fall back to
``ATA2_*`` environment variables, then to built-in defaults. Everything is
validated with Pydantic before a session starts; the session trusts what it
receives. The API key is read from ``OPENAI_API_KEY``.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import structlog
from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG_FILENAME = Path("ata2.toml")
APP_NAME = "ata2"


class ConfigError(RuntimeError):
    """Raised when the configuration file is missing or cannot be parsed."""


def get_config_dir() -> Path:
    """Return the per-user configuration directory (``~/.config/ata2``)."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / APP_NAME


def default_path(name: Optional[Path | str] = None) -> Path:
    """Return the config file path inside the config directory.

    With *name*, the file is ``<name>.toml``; otherwise ``ata2.toml``.
    """
    if name is None:
        return get_config_dir() / DEFAULT_CONFIG_FILENAME
    return get_config_dir() / Path(name).with_suffix(".toml")


def _default_history_file() -> Path:
    return get_config_dir() / "history"


class UiConfig(BaseSettings):
    """Terminal behaviour switches."""

    # Require Ctrl-C twice before exiting.
    double_ctrlc: bool = True
    hide_config: bool = False
    redact_api_key: bool = True
    # Enter inserts a newline; Ctrl-D submits.
    multiline_insertions: bool = True
    save_history: bool = True
    history_file: Path = Field(default_factory=_default_history_file)

    model_config = {"env_prefix": "ATA2_", "extra": "ignore"}

    @model_validator(mode="after")
    def validate_history_dir(self) -> "UiConfig":
        history_dir = self.history_file.expanduser().parent
        if not str(history_dir):
            raise ValueError("History file has no parent")
        if not history_dir.exists():
            raise ValueError(f"History file directory does not exist: {history_dir}")
        if not os.access(history_dir, os.W_OK):
            raise ValueError("History file dir is read-only")
        self.history_file = self.history_file.expanduser()
        return self


class AtaConfig(BaseSettings):
    """Completion parameters plus the UI section.

    For definitions see the OpenAI chat-completions API reference.
    """

    api_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("api_key", "OPENAI_API_KEY"),
    )
    model: str = "gpt-3.5-turbo"
    max_tokens: int = 2048
    temperature: float = 0.8
    suffix: Optional[str] = None
    top_p: float = 1.0
    n: int = 1
    stream: bool = True
    stop: list[str] = Field(default_factory=list)
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0
    logit_bias: dict[str, float] = Field(default_factory=dict)
    user_id: Optional[str] = None
    ui: UiConfig = Field(default_factory=UiConfig)

    model_config = {"env_prefix": "ATA2_", "extra": "ignore"}

    @model_validator(mode="after")
    def validate_ranges(self) -> "AtaConfig":
        if not self.api_key:
            raise ValueError("API key is missing")
        if not self.model:
            raise ValueError("Model ID is missing")
        if not 1 <= self.max_tokens <= 2048:
            raise ValueError("Max tokens must be between 1 and 2048")
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError("Temperature must be between 0.0 and 1.0")
        if self.suffix is not None and not self.suffix:
            raise ValueError("Suffix cannot be an empty string")
        if not 0.0 <= self.top_p <= 1.0:
            raise ValueError("Top-p must be between 0.0 and 1.0")
        if not 1 <= self.n <= 10:
            raise ValueError("n must be between 1 and 10")
        if any(not phrase for phrase in self.stop) or len(self.stop) > 4:
            raise ValueError("Stop phrases cannot contain empties")
        if not 0.0 <= self.presence_penalty <= 1.0:
            raise ValueError("Presence penalty must be between 0.0 and 1.0")
        if not 0.0 <= self.frequency_penalty <= 1.0:
            raise ValueError("Frequency penalty must be between 0.0 and 1.0")
        if self.user_id is not None and not self.user_id:
            raise ValueError("User ID cannot be an empty string")
        for key, value in self.logit_bias.items():
            if not -2.0 <= value <= 2.0:
                raise ValueError(f"logit_bias for {key} must be between -2.0 and 2.0")
        if not self.stream:
            logger.warning(
                "config.stream_disabled",
                hint="Stream is disabled. This is not supported anymore and will be ignored.",
            )
        return self

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "AtaConfig":
        """Build a config from parsed TOML; keys present in *data* beat env vars.

        The ``[ui]`` table is built separately so its missing keys still fall
        back to the environment.
        """
        data = dict(data)
        ui_data = data.pop("ui", None) or {}
        return cls(ui=UiConfig(**ui_data), **data)

    def __repr__(self) -> str:
        return (
            f"AtaConfig(model={self.model}, max_tokens={self.max_tokens}, "
            f"temperature={self.temperature}, n={self.n})"
        )


class LocationKind(str, Enum):
    AUTO = "auto"
    PATH = "path"
    NAMED = "named"


class ConfigLocation:
    """Where to find the config file, as given on the command line.

    ``""`` means automatic lookup, a bare name without a dot (``work``) means
    ``~/.config/ata2/work.toml``, anything else is a literal path.
    """

    def __init__(self, kind: LocationKind, value: Optional[Path] = None):
        if kind is not LocationKind.AUTO and value is None:
            raise ValueError(f"{kind.name.lower()} config location needs a value")
        self.kind = kind
        self.value = value

    @classmethod
    def parse(cls, text: str) -> "ConfigLocation":
        text = text or ""
        if text and "." not in text:
            return cls(LocationKind.NAMED, Path(text))
        if text.strip():
            return cls(LocationKind.PATH, Path(text))
        return cls(LocationKind.AUTO)

    def location(self) -> Path:
        if self.kind is LocationKind.PATH:
            return self.value.expanduser()
        if self.kind is LocationKind.NAMED:
            return default_path(self.value)
        if DEFAULT_CONFIG_FILENAME.exists():
            logger.warning(
                "config.deprecated_location",
                path=str(DEFAULT_CONFIG_FILENAME),
                hint=f"Found in working directory but unspecified. Move it to {get_config_dir()}.",
            )
            return DEFAULT_CONFIG_FILENAME
        return default_path()

    def __repr__(self) -> str:
        return f"ConfigLocation({self.kind.value}, {self.value})"


def load_settings(path: Path) -> AtaConfig:
    """Read *path* and return a validated configuration.

    Raises ``ConfigError`` when the file is missing or is not valid TOML, and
    ``pydantic.ValidationError`` when a value is out of range.
    """
    import tomllib

    from ata.config_file import load_config

    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")
    try:
        data = load_config(path)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Config parsing failure in {path}: {e}") from e
    config = AtaConfig.from_mapping(data)
    logger.debug("config.loaded", path=str(path), model=config.model)
    return config
