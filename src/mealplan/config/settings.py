"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``MEALPLAN_*`` prefix
  3. TOML file    — ``mealplan.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

Constructed once at startup and passed to the store, coordinator,
directory client, and services.  Nothing reads configuration from
module globals.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from mealplan.config.discovery import locate_config
from mealplan.config.models import (
    AuthConfig,
    BoardConfig,
    DirectoryConfig,
    IdentityConfig,
    MailConfig,
    ReminderGroupConfig,
    ServerConfig,
    StorageConfig,
    default_reminders,
)
from mealplan.domain.errors import ConfigError


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``mealplan.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise ConfigError(msg, path=str(toml_path)) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class MealplanSettings(BaseSettings):
    """Unified settings for the whole application.

    Attributes:
        root: Base directory for relative paths (parent of
            ``mealplan.toml``, or CWD if no config found).
        config_path: The TOML file the settings were read from, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "MEALPLAN_",
        "env_nested_delimiter": "__",
    }

    # --- Resolved paths (derived from the config file location) ---
    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    board: BoardConfig = Field(default_factory=BoardConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    identity: IdentityConfig = Field(default_factory=IdentityConfig)
    directory: DirectoryConfig = Field(default_factory=DirectoryConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    mail: MailConfig = Field(default_factory=MailConfig)
    reminders: dict[str, ReminderGroupConfig] = Field(default_factory=default_reminders)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @property
    def data_path(self) -> Path:
        """Absolute location of the board snapshot."""
        path = Path(self.storage.data_file)
        return path if path.is_absolute() else self.root / path

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **overrides: Any,
    ) -> MealplanSettings:
        """Construct settings from a CLI (or server) invocation.

        Locates ``mealplan.toml`` (explicit *config_path*, ``MEALPLAN_CONFIG``,
        or walk-up), resolves *root* from the config file's parent directory,
        and merges *overrides* as highest-priority values.

        Raises:
            ConfigError: a named config file is missing, the TOML is
                malformed, or a section fails validation (for example a duty
                name containing ``/``).
        """
        toml_path = locate_config(config_path, root)

        resolved_root = root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(
                root=resolved_root,
                config_path=toml_path,
                **overrides,
            )
        except ValidationError as exc:
            msg = f"Invalid configuration: {exc}"
            raise ConfigError(msg, path=str(toml_path) if toml_path else None) from exc
        finally:
            _tls.toml_path = None
