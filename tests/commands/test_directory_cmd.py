"""Tests for the members and authorize commands."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from mealplan.cli import cli


@pytest.mark.usefixtures("board_root")
class TestMembersCommand:
    def test_members(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "members", "pika-food"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["members"] == ["alice", "bob", "carol", "dave@example.org"]

    def test_members_quiet(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "members", "yfnkm"])
        assert result.stdout.splitlines() == ["admin", "alice"]

    def test_bad_group_name(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["members", "Pika Food"])
        assert result.exit_code == 1
        assert "Invalid group name" in result.stderr


@pytest.mark.usefixtures("board_root")
class TestAuthorizeCommand:
    def test_default_member_group(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "authorize", "carol@mit.edu"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"] == {
            "identity": "carol",
            "groups": ["pika-food"],
        }

    def test_any_of_groups(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli,
            ["--json", "authorize", "admin", "--group", "pika-food", "--group", "yfnkm"],
        )
        assert result.exit_code == 0

    def test_not_authorized(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["authorize", "bob", "--group", "yfnkm"])
        assert result.exit_code == 1
        assert "not on any of yfnkm" in result.stderr
