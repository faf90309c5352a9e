"""FastAPI application factory for the signup board.

Authentication is delegated to the fronting proxy, which verifies the
client and passes its address in ``[auth] identity_header``.  Every
mutating route then checks directory membership (outside the coordinator
lock) before touching the board.

Routes:

- ``GET  /health``        liveness, no auth
- ``GET  /board``         board view; read-only for non-members
- ``POST /claim``         form submission carrying one ``<action>/<duty>/<day>`` field
- ``POST /attendance``    planned attendance for one day
- ``GET  /admin``         full export with version token
- ``POST /admin/save``    guarded whole-board overwrite (409 when stale)
- ``GET  /admin/stats``   signups per person
- ``POST /admin/clear``   unclaim everything held by one person
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Annotated, Any

from fastapi import Depends, FastAPI, Form, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from mealplan import __version__
from mealplan.domain.errors import AuthError, MealplanError
from mealplan.infrastructure.kitchen import Kitchen
from mealplan.services.admin import AdminService
from mealplan.services.contracts import BulkSaveRequest
from mealplan.services.result import ServiceError, ServiceResult
from mealplan.services.signup import SignupService

if TYPE_CHECKING:
    from mealplan.config.settings import MealplanSettings

logger = logging.getLogger(__name__)

STATUS_BY_CODE: dict[str, int] = {
    "NOT_FOUND": 404,
    "CONFLICT": 409,
    "STORAGE_ERROR": 500,
    "DECODE_ERROR": 500,
    "UNAUTHORIZED": 403,
    "DIRECTORY_ERROR": 503,
    "CONFIG_ERROR": 500,
    "MAIL_ERROR": 502,
}


class HealthResponse(BaseModel):
    status: str
    version: str


class ClearRequest(BaseModel):
    identity: str


def status_for(error: ServiceError) -> int:
    """HTTP status for a failed ServiceResult."""
    if error.code == AuthError.code and not error.detail.get("identity"):
        return 401
    return STATUS_BY_CODE.get(error.code, 500)


def http_error(result: ServiceResult) -> HTTPException:
    assert result.error is not None
    return HTTPException(
        status_code=status_for(result.error),
        detail={"op": result.op, **result.error.model_dump(mode="json")},
    )


def respond(result: ServiceResult) -> dict[str, Any]:
    """Return the result payload, or raise the mapped HTTPException."""
    if not result.ok:
        raise http_error(result)
    return result.model_dump(mode="json")


def get_kitchen(request: Request) -> Kitchen:
    return request.app.state.kitchen


KitchenDep = Annotated[Kitchen, Depends(get_kitchen)]


def _caller(request: Request, kitchen: Kitchen) -> str | None:
    return request.headers.get(kitchen.settings.auth.identity_header)


def _guard(op: str, check: Callable[[], str]) -> str:
    """Run an authorization check, mapping typed failures to HTTP errors."""
    try:
        return check()
    except MealplanError as exc:
        logger.info("Rejected %s: %s", op, exc.message)
        raise http_error(ServiceResult.failure(op, exc)) from exc


def require_member(request: Request, kitchen: KitchenDep) -> str:
    """Identity of a caller on ``[auth] member_group``."""
    address = _caller(request, kitchen)
    group = kitchen.settings.auth.member_group
    return _guard("authorize", lambda: kitchen.gateway.authorize(address, group))


def require_admin(request: Request, kitchen: KitchenDep) -> str:
    """Identity of a caller on any of ``[auth] admin_groups``."""
    address = _caller(request, kitchen)
    groups = kitchen.settings.auth.admin_groups
    return _guard("authorize", lambda: kitchen.gateway.authorize_any(address, groups))


def optional_member(request: Request, kitchen: KitchenDep) -> str | None:
    """Identity of a member, or None so the board is served read-only.

    Directory failures still raise; only a refused caller falls back.
    """
    address = _caller(request, kitchen)
    group = kitchen.settings.auth.member_group
    try:
        return kitchen.gateway.authorize(address, group)
    except AuthError as exc:
        logger.info("Read-only board: %s", exc.message)
        return None
    except MealplanError as exc:
        raise http_error(ServiceResult.failure("authorize", exc)) from exc


MemberDep = Annotated[str, Depends(require_member)]
ViewerDep = Annotated[str | None, Depends(optional_member)]
AdminDep = Annotated[str, Depends(require_admin)]


def _signup(kitchen: Kitchen) -> SignupService:
    return SignupService(kitchen.coordinator, kitchen.settings, plugins=kitchen.plugins)


def _admin(kitchen: Kitchen) -> AdminService:
    return AdminService(kitchen.coordinator, kitchen.settings, plugins=kitchen.plugins)


def create_app(settings: MealplanSettings, *, kitchen: Kitchen | None = None) -> FastAPI:
    """Build the board app around one Kitchen (and so one coordinator)."""
    app = FastAPI(
        title="mealplan",
        version=__version__,
        description="Shared duty signup board",
        docs_url="/docs" if settings.verbose else None,
        redoc_url=None,
    )
    app.state.kitchen = kitchen or Kitchen(settings)

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    @app.get("/board")
    def board(kitchen: KitchenDep, identity: ViewerDep) -> dict[str, Any]:
        return respond(_signup(kitchen).board(identity))

    @app.post("/claim")
    async def claim(request: Request, kitchen: KitchenDep, identity: MemberDep) -> dict[str, Any]:
        form = await request.form()
        fields = list(form.keys())
        result = await run_in_threadpool(_signup(kitchen).submit, fields, identity)
        return respond(result)

    @app.post("/attendance")
    def attendance(
        kitchen: KitchenDep,
        identity: MemberDep,
        day: Annotated[str, Form()],
        attending: Annotated[bool, Form()] = True,
    ) -> dict[str, Any]:
        return respond(_signup(kitchen).set_attendance(identity, day, attending))

    @app.get("/admin")
    def admin_export(kitchen: KitchenDep, identity: AdminDep) -> dict[str, Any]:
        return respond(_admin(kitchen).export())

    @app.post("/admin/save")
    def admin_save(
        payload: BulkSaveRequest,
        kitchen: KitchenDep,
        identity: AdminDep,
    ) -> dict[str, Any]:
        result = _admin(kitchen).bulk_save(
            payload.version,
            payload.assignments,
            payload.attendance,
            identity=identity,
        )
        return respond(result)

    @app.get("/admin/stats")
    def admin_stats(
        kitchen: KitchenDep,
        identity: AdminDep,
        group: str | None = None,
    ) -> dict[str, Any]:
        group = group or kitchen.settings.auth.member_group
        try:
            members = kitchen.gateway.members_of(group)
        except MealplanError as exc:
            return respond(ServiceResult.failure("stats", exc))
        return respond(_admin(kitchen).stats(group, members))

    @app.post("/admin/clear")
    def admin_clear(
        payload: ClearRequest,
        kitchen: KitchenDep,
        identity: AdminDep,
    ) -> dict[str, Any]:
        return respond(_admin(kitchen).clear_identity(payload.identity, actor=identity))

    return app
