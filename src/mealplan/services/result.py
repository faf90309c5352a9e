"""ServiceResult and ServiceError — the universal service contract.

INVARIANT: All service-layer methods return ServiceResult.
The CLI and the web app consume this type; expected failures never escape
a service as exceptions.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from mealplan.domain.errors import MealplanError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: MealplanError) -> ServiceError:
        detail = {k: v for k, v in exc.detail.items() if v is not None}
        return cls(code=exc.code, message=exc.message, detail=detail)


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"claim"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def failure(cls, op: str, exc: MealplanError) -> ServiceResult:
        """Wrap a typed failure raised below the service layer."""
        return cls(ok=False, op=op, error=ServiceError.from_exception(exc))
