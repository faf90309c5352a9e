"""Typed payload contracts for service and adapter boundaries.

These models validate operation payload shapes before they leave the
service layer so key regressions (for example ``assignments`` vs
``slots``) fail fast in tests and during development.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T", bound=BaseModel)


def dump_validated(model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


class BoardDay(BaseModel):
    """One column of the board."""

    index: int
    key: str
    label: str
    attending: int


class BoardResultData(BaseModel):
    """Payload contract for ``SignupService.board``."""

    version: str
    identity: str | None = None
    duties: list[str]
    days: list[BoardDay]
    weeks: list[list[int]]
    assignments: dict[str, dict[str, str]]
    my_attendance: dict[str, bool] = Field(default_factory=dict)
    authorized: bool = False


class SlotResultData(BaseModel):
    """Payload contract for ``claim`` and ``abandon``."""

    identity: str
    action: str
    duty: str
    day: str
    label: str


class AttendanceResultData(BaseModel):
    """Payload contract for ``SignupService.set_attendance``."""

    identity: str
    day: str
    attending: bool


class ExportResultData(BaseModel):
    """Payload contract for ``AdminService.export``."""

    version: str
    duties: list[str]
    days: list[str]
    assignments: dict[str, dict[str, str]]
    attendance: dict[str, dict[str, bool]]


class BulkSaveResultData(BaseModel):
    """Payload contract for ``AdminService.bulk_save``."""

    previous_version: str
    version: str


class StatsRow(BaseModel):
    """One person's signups in the stats table."""

    model_config = ConfigDict(extra="allow")

    identity: str
    count: int
    signups: list[str]


class StatsResultData(BaseModel):
    """Payload contract for ``AdminService.stats``."""

    group: str
    since: str | None = None
    count: int
    items: list[StatsRow]


class ClearResultData(BaseModel):
    """Payload contract for ``AdminService.clear_identity``."""

    identity: str
    count: int
    cleared: list[str]


class ReminderResultData(BaseModel):
    """Payload contract for ``ReminderService.plan`` and ``send``."""

    group: str
    day: str
    recipients: list[str]
    subject: str
    body: str
    might_be_canceled: bool
    sent: bool = False


class BulkSaveRequest(BaseModel):
    """Input contract for a whole-board overwrite (admin editor or ``admin save``).

    Accepts the ``export`` payload as-is; ``duties`` and ``days`` are
    informational and ignored on save.
    """

    model_config = ConfigDict(extra="ignore")

    version: str
    assignments: dict[str, dict[str, str]]
    attendance: dict[str, dict[str, bool]]
