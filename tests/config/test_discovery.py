"""Tests for mealplan.toml discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from mealplan.config.discovery import (
    CONFIG_ENV_VAR,
    CONFIG_FILENAME,
    find_config,
    locate_config,
)
from mealplan.domain.errors import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestFindConfig:
    def test_finds_in_start_dir(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        assert find_config(tmp_path) == tmp_path / CONFIG_FILENAME

    def test_walks_up(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        nested = tmp_path / "x" / "y"
        nested.mkdir(parents=True)
        assert find_config(nested) == tmp_path / CONFIG_FILENAME

    def test_nearest_wins(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        nested = tmp_path / "kitchen"
        nested.mkdir()
        (nested / CONFIG_FILENAME).write_text("")
        assert find_config(nested) == nested / CONFIG_FILENAME


class TestLocateConfig:
    def test_falls_back_to_walk_up(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        assert locate_config(None, tmp_path) == tmp_path / CONFIG_FILENAME

    def test_env_var_beats_walk_up(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        other = tmp_path / "other.toml"
        other.write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(other))
        assert locate_config(None, tmp_path) == other

    def test_flag_beats_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        flagged = tmp_path / "flag.toml"
        flagged.write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.toml"))
        assert locate_config(str(flagged), tmp_path) == flagged

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "nope.toml"))
        with pytest.raises(ConfigError, match=CONFIG_ENV_VAR):
            locate_config(None, tmp_path)

    def test_flag_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="--config"):
            locate_config(str(tmp_path / "nope.toml"))
