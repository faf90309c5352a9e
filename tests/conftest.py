"""Shared pytest fixtures and test helpers for mealplan tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import date
from email.message import EmailMessage
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

from mealplan.config.models import BoardConfig, DirectoryConfig, MailConfig
from mealplan.config.settings import MealplanSettings
from mealplan.domain.errors import DirectoryError
from mealplan.domain.identity import IdentityNormalizer
from mealplan.infrastructure.coordinator import TransactionCoordinator
from mealplan.infrastructure.kitchen import Kitchen
from mealplan.infrastructure.mail import Mailer
from mealplan.infrastructure.store import DocumentStore
from mealplan.services.auth import AuthorizationGateway

DUTIES = ("Big cook", "Little cook", "Cleaner 1")
START = date(2019, 1, 7)
END = date(2019, 1, 20)

BOARD_TOML = """\
[board]
duties = ["Big cook", "Little cook", "Cleaner 1"]
start = 2019-01-07
end = 2019-01-20

[auth]
member_group = "pika-food"
admin_groups = ["yfnkm"]

[reminders.cook]
duties = ["Big cook", "Little cook"]
important_duties = ["Big cook"]
today_text = "today"
"""


def user_dn(name: str) -> str:
    return f"uid={name},OU=users,OU=moira,dc=MIT,dc=EDU"


def string_dn(address: str) -> str:
    return f"cn={address},OU=strings,OU=moira,dc=MIT,dc=EDU"


class FakeDirectory:
    """In-memory stand-in for DirectoryClient.

    ``groups`` maps a group name to its list of records (normally exactly
    one), each a list of member DNs.
    """

    def __init__(self, groups: dict[str, list[list[str]]] | None = None) -> None:
        self.config = DirectoryConfig()
        self.groups = groups if groups is not None else default_groups()
        self.queries: list[str] = []
        self.fail = False

    def search_groups(self, group: str) -> list[list[str]]:
        self.queries.append(group)
        if self.fail:
            raise DirectoryError("directory unavailable", group=group)
        return self.groups.get(group, [])


def default_groups() -> dict[str, list[list[str]]]:
    return {
        "pika-food": [
            [
                user_dn("alice"),
                user_dn("bob"),
                user_dn("carol"),
                string_dn("Dave@Example.org"),
                "cn=nested-list,OU=lists,OU=moira,dc=MIT,dc=EDU",
            ]
        ],
        "yfnkm": [[user_dn("admin"), user_dn("alice")]],
    }


class RecordingMailer(Mailer):
    """Mailer that records messages instead of talking to a relay."""

    def __init__(self, config: MailConfig | None = None) -> None:
        super().__init__(config or MailConfig(enabled=True))
        self.sent: list[tuple[EmailMessage, bool]] = []

    def send(self, message: EmailMessage, *, bcc_sender: bool = True) -> None:
        self.sent.append((message, bcc_sender))


@pytest.fixture(autouse=True)
def _drop_cli_log_handlers() -> Iterator[None]:
    """Remove handlers a CLI invocation bound to CliRunner's (now closed) stderr."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def board_config() -> BoardConfig:
    return BoardConfig(duties=DUTIES, start=START, end=END)


@pytest.fixture
def settings(
    tmp_path: Path,
    board_config: BoardConfig,
    monkeypatch: pytest.MonkeyPatch,
) -> MealplanSettings:
    """Settings rooted at a temp directory with a two-week, three-duty board."""
    monkeypatch.delenv("MEALPLAN_CONFIG", raising=False)
    return MealplanSettings.from_cli(root=tmp_path, board=board_config)


@pytest.fixture
def store(settings: MealplanSettings) -> DocumentStore:
    return DocumentStore(settings.data_path, settings.board.duties, settings.board.days)


@pytest.fixture
def coordinator(store: DocumentStore) -> TransactionCoordinator:
    return TransactionCoordinator(store)


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture
def gateway(directory: FakeDirectory) -> AuthorizationGateway:
    return AuthorizationGateway(directory, IdentityNormalizer())  # type: ignore[arg-type]


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def kitchen(
    settings: MealplanSettings,
    directory: FakeDirectory,
    mailer: RecordingMailer,
) -> Kitchen:
    return Kitchen(settings, directory=directory, mailer=mailer)  # type: ignore[arg-type]


@pytest.fixture
def board_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """CWD with a mealplan.toml, a fake directory, and no real mail.

    Use via ``@pytest.mark.usefixtures("board_root")`` on command test
    classes.
    """
    (tmp_path / "mealplan.toml").write_text(BOARD_TOML, encoding="utf-8")
    monkeypatch.delenv("MEALPLAN_CONFIG", raising=False)
    monkeypatch.delenv("MEALPLAN_AS", raising=False)
    monkeypatch.chdir(tmp_path)
    fake = FakeDirectory()
    monkeypatch.setattr("mealplan.infrastructure.kitchen.DirectoryClient", lambda config: fake)
    yield tmp_path
