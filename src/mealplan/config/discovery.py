"""Config file discovery.

Resolution order for ``mealplan.toml``:

1. the ``--config`` flag
2. the ``MEALPLAN_CONFIG`` env var
3. walking up from the working directory, the way git finds ``.git/``

An explicitly named file that does not exist is a configuration error;
a walk-up that finds nothing just means "use the defaults".
"""

from __future__ import annotations

import os
from pathlib import Path

from mealplan.domain.errors import ConfigError

CONFIG_FILENAME = "mealplan.toml"
CONFIG_ENV_VAR = "MEALPLAN_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for mealplan.toml."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def locate_config(explicit: str | None = None, start: Path | None = None) -> Path | None:
    """Resolve the config file for this process.

    Raises:
        ConfigError: *explicit* or ``MEALPLAN_CONFIG`` names a missing file.
    """
    named = explicit or os.environ.get(CONFIG_ENV_VAR)
    if not named:
        return find_config(start)
    path = Path(named)
    if not path.is_file():
        source = "--config" if explicit else CONFIG_ENV_VAR
        msg = f"Config file from {source} not found: {path}"
        raise ConfigError(msg, path=str(path))
    return path
