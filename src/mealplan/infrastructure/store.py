"""DocumentStore — the whole board as one JSON snapshot on disk.

The application never updates the file incrementally: every transaction
reads the full snapshot and writes the full snapshot back.  Writes go to a
temporary file in the same directory which is fsynced and then renamed
over the data file, so a failed write leaves the last committed snapshot
untouched.

Snapshot schema history:

- v1: legacy index-keyed layout (``Days``, ``Assignments`` as lists,
  ``PlannedAttendance``, ``VersionID``).
- v2: date-keyed ``assignments``/``attendance`` maps plus ``version``.

Older snapshots are migrated once, at load time, by :func:`migrate_snapshot`.
"""

from __future__ import annotations

import base64
import json
import logging
import os
import secrets
import tempfile
from datetime import date, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, ValidationError

from mealplan.domain.days import day_key
from mealplan.domain.errors import DecodeError, StorageError
from mealplan.domain.schedule import Document, empty_document, reconcile

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2

# 128 bits of randomness per token.
_TOKEN_BYTES = 16


def new_version_token() -> str:
    """A fresh, unpredictable version token."""
    return base64.b64encode(secrets.token_bytes(_TOKEN_BYTES)).decode("ascii")


class DocumentSnapshot(BaseModel):
    """Persisted form of a :class:`Document` (duties and days are config)."""

    schema_version: int = SCHEMA_VERSION
    version: str
    assignments: dict[str, dict[str, str]] = Field(default_factory=dict)
    attendance: dict[str, dict[str, bool]] = Field(default_factory=dict)


def migrate_snapshot(raw: dict[str, Any], start: date) -> dict[str, Any]:
    """Upgrade a decoded snapshot dict to :data:`SCHEMA_VERSION`.

    v1 stored slots as lists indexed from the period start; index ``i``
    becomes the ISO key of ``start + i days``.
    """
    version = raw.get("schema_version", 1 if "Assignments" in raw else SCHEMA_VERSION)
    if version == SCHEMA_VERSION:
        return raw
    if version != 1:
        msg = f"Unsupported snapshot schema version: {version!r}"
        raise DecodeError(msg, schema_version=version)

    def keyed(values: Sequence[Any]) -> dict[str, Any]:
        return {day_key(start + timedelta(days=i)): v for i, v in enumerate(values)}

    logger.info("Migrating snapshot from schema v1 to v%d", SCHEMA_VERSION)
    return {
        "schema_version": SCHEMA_VERSION,
        "version": raw.get("VersionID") or new_version_token(),
        "assignments": {
            duty: keyed(holders) for duty, holders in (raw.get("Assignments") or {}).items()
        },
        "attendance": {
            person: keyed(flags) for person, flags in (raw.get("PlannedAttendance") or {}).items()
        },
    }


class DocumentStore:
    """Loads and persists the board snapshot for one configured board.

    Not thread-safe on its own; :class:`TransactionCoordinator` serializes
    every call.
    """

    def __init__(self, path: Path, duties: Sequence[str], days: Sequence[date]) -> None:
        self._path = path
        self._duties = tuple(duties)
        self._days = tuple(days)

    @property
    def path(self) -> Path:
        return self._path

    def blank(self) -> Document:
        """An all-unclaimed document with the configured dimensions.

        A board that was never saved has the empty version token, so an
        export taken before the first write can still be saved back.
        """
        return empty_document(self._duties, self._days, version="")

    def load(self) -> Document:
        """Read the current snapshot, or an empty document if none exists.

        The empty document carries the version token ``""`` rather than a
        fresh random one, so an export of a never-saved board still passes
        the compare-and-swap on save. A missing file does not count as a
        write; the first save draws a real token.

        Raises:
            DecodeError: the snapshot exists but cannot be decoded.
            StorageError: the snapshot cannot be read.
        """
        try:
            raw_text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No snapshot at %s; starting empty", self._path)
            return self.blank()
        except OSError as exc:
            msg = f"Cannot read snapshot {self._path}: {exc}"
            raise StorageError(msg, path=str(self._path)) from exc

        try:
            raw = json.loads(raw_text)
            if not isinstance(raw, dict):
                msg = "snapshot root is not an object"
                raise TypeError(msg)
            snapshot = DocumentSnapshot.model_validate(migrate_snapshot(raw, self._start))
        except (ValueError, TypeError, ValidationError) as exc:
            msg = f"Cannot decode snapshot {self._path}: {exc}"
            raise DecodeError(msg, path=str(self._path)) from exc

        doc = Document(
            duties=self._duties,
            days=self._days,
            assignments=snapshot.assignments,
            attendance=snapshot.attendance,
            version=snapshot.version,
        )
        return reconcile(doc)

    def save(self, doc: Document) -> None:
        """Assign a fresh version token and atomically replace the snapshot.

        Raises:
            StorageError: the snapshot could not be written; the previous
                snapshot is left in place.
        """
        previous = doc.version
        doc.version = new_version_token()
        while doc.version == previous:
            doc.version = new_version_token()
        snapshot = DocumentSnapshot(
            version=doc.version,
            assignments=doc.assignments,
            attendance=doc.attendance,
        )
        payload = snapshot.model_dump_json(indent=2)

        tmp_path: Path | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp_file:
                tmp_path = Path(tmp_file.name)
                tmp_file.write(payload)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            os.replace(tmp_path, self._path)
        except OSError as exc:
            doc.version = previous
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            msg = f"Cannot write snapshot {self._path}: {exc}"
            raise StorageError(msg, path=str(self._path)) from exc
        logger.debug("Saved snapshot %s (version %s)", self._path, doc.version)

    @property
    def _start(self) -> date:
        return self._days[0] if self._days else date.today()
