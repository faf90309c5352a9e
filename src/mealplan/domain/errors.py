"""Typed failures shared by every layer.

Domain and infrastructure code raise these; the service layer converts
them into :class:`~mealplan.services.result.ServiceError` payloads using
the stable ``code`` attribute, and the request surfaces map codes to exit
statuses or HTTP responses.
"""

from __future__ import annotations

from typing import Any


class MealplanError(Exception):
    """Base class for all expected mealplan failures."""

    code = "ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail


class NotFoundError(MealplanError):
    """Referenced duty or day is outside the document's current dimensions."""

    code = "NOT_FOUND"


class ConflictError(MealplanError):
    """Slot already held, caller not the holder, or a stale version token.

    Always recoverable by re-reading the current state.
    """

    code = "CONFLICT"


class StorageError(MealplanError):
    """The snapshot could not be read or written."""

    code = "STORAGE_ERROR"


class DecodeError(StorageError):
    """The snapshot exists but does not deserialize."""

    code = "DECODE_ERROR"


class AuthError(MealplanError):
    """No identity could be resolved, or it lacks the required membership."""

    code = "UNAUTHORIZED"

    def __init__(self, message: str, *, identity: str | None = None, group: str | None = None):
        super().__init__(message, identity=identity, group=group)
        self.identity = identity
        self.group = group


class DirectoryError(MealplanError):
    """Directory query failed, timed out, or returned the wrong record count."""

    code = "DIRECTORY_ERROR"


class ConfigError(MealplanError):
    """Configuration failed validation at startup."""

    code = "CONFIG_ERROR"


class MailError(MealplanError):
    """The mail relay rejected a message or could not be reached."""

    code = "MAIL_ERROR"
