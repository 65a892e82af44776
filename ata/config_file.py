"""TOML configuration file utilities.

Reading: uses tomllib (stdlib, Python >=3.11)
Writing: uses tomli-w (only write dependency needed)
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

EXAMPLE_CONFIG: dict[str, Any] = {
    "api_key": "<YOUR SECRET API KEY>",
    "model": "gpt-3.5-turbo",
    "max_tokens": 2048,
    "temperature": 0.8,
}


def load_config(path: Path) -> dict:
    """Load and parse an ata2.toml file."""
    import tomllib

    with open(path, "rb") as f:
        return tomllib.load(f)


def write_config(path: Path, data: dict) -> None:
    """Atomic write with tempfile + rename.

    Creates parent directories if needed.
    Uses tempfile in same directory for atomic rename.
    """
    import tomli_w

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(
        dir=path.parent, suffix=".tmp", prefix=".ata2_config_"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            tomli_w.dump(data, f)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def generate_template() -> str:
    """Return the example ata2.toml shown to first-time users."""
    import tomli_w

    return tomli_w.dumps(EXAMPLE_CONFIG)


def write_example(path: Path) -> None:
    """Write the example configuration to *path*."""
    write_config(path, dict(EXAMPLE_CONFIG))
