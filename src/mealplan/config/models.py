"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, mealplan.toml only contains
overrides.  A fresh deployment usually needs only ``[board]`` dates and
``[auth] member_group``.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, field_validator, model_validator

from mealplan.domain.actions import SEPARATOR
from mealplan.domain.days import DEFAULT_LABEL_FORMAT, day_range
from mealplan.domain.identity import DEFAULT_DOMAIN

DEFAULT_DUTIES = (
    "Big cook",
    "Little cook",
    "Tiny cook",
    "Cleaner 1",
    "Cleaner 2",
    "Cleaner 3",
    "Fridge ninja",
)

# --- mealplan.toml sections ---


class BoardConfig(BaseModel):
    """[board] section."""

    model_config = {"frozen": True}

    duties: tuple[str, ...] = DEFAULT_DUTIES
    start: date = date(2019, 1, 7)
    end: date = date(2019, 2, 3)
    label_format: str = DEFAULT_LABEL_FORMAT
    timezone: str = "America/New_York"
    stats_since: date | None = None

    @field_validator("duties")
    @classmethod
    def _check_duties(cls, duties: tuple[str, ...]) -> tuple[str, ...]:
        if not duties:
            msg = "at least one duty must be configured"
            raise ValueError(msg)
        for duty in duties:
            if not duty.strip():
                msg = "duty names must not be blank"
                raise ValueError(msg)
            if SEPARATOR in duty:
                msg = f"duty name {duty!r} must not contain {SEPARATOR!r}"
                raise ValueError(msg)
        if len(set(duties)) != len(duties):
            msg = "duty names must be unique"
            raise ValueError(msg)
        return duties

    @model_validator(mode="after")
    def _check_range(self) -> BoardConfig:
        if self.end < self.start:
            msg = f"board end {self.end} is before start {self.start}"
            raise ValueError(msg)
        return self

    @property
    def days(self) -> tuple[date, ...]:
        return day_range(self.start, self.end)


class StorageConfig(BaseModel):
    """[storage] section."""

    model_config = {"frozen": True}

    data_file: str = "signups.json"


class IdentityConfig(BaseModel):
    """[identity] section."""

    model_config = {"frozen": True}

    domain: str = DEFAULT_DOMAIN


class DirectoryConfig(BaseModel):
    """[directory] section — the LDAP server holding group records."""

    model_config = {"frozen": True}

    host: str = "ldap.mit.edu"
    port: int = 636
    search_base: str = "ou=lists,ou=moira,dc=mit,dc=edu"
    timeout: float = 10.0
    member_attribute: str = "member"
    user_prefix: str = "uid="
    user_suffix: str = ",OU=users,OU=moira,dc=MIT,dc=EDU"
    string_prefix: str = "cn="
    string_suffix: str = ",OU=strings,OU=moira,dc=MIT,dc=EDU"
    ca_certs_file: str | None = None

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            msg = "directory timeout must be positive"
            raise ValueError(msg)
        return value


class AuthConfig(BaseModel):
    """[auth] section."""

    model_config = {"frozen": True}

    member_group: str = "pika-food"
    admin_groups: tuple[str, ...] = ("yfnkm", "yfncc")
    identity_header: str = "X-Authenticated-Email"


class MailConfig(BaseModel):
    """[mail] section."""

    model_config = {"frozen": True}

    enabled: bool = False
    server: str = "outgoing.mit.edu"
    port: int = 25
    sender: str = "yfnkm@mit.edu"
    site_url: str = "http://mealplan.pikans.org/"
    notify_on_abandon: bool = True
    timeout: float = 10.0


class ReminderGroupConfig(BaseModel):
    """One ``[reminders.<name>]`` table."""

    model_config = {"frozen": True}

    duties: tuple[str, ...]
    important_duties: tuple[str, ...] = ()
    today_text: str = "today"


def default_reminders() -> dict[str, ReminderGroupConfig]:
    return {
        "cook": ReminderGroupConfig(
            duties=("Big cook", "Little cook", "Tiny cook"),
            important_duties=("Big cook", "Little cook"),
            today_text="today",
        ),
        "clean": ReminderGroupConfig(
            duties=("Cleaner 1", "Cleaner 2", "Cleaner 3"),
            important_duties=("Cleaner 1", "Cleaner 2"),
            today_text="tonight",
        ),
    }


class ServerConfig(BaseModel):
    """[server] section."""

    model_config = {"frozen": True}

    host: str = "127.0.0.1"
    port: int = 8000

