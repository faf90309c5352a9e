"""serve — run the web board under uvicorn."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mealplan.commands._base import MealplanCommand

if TYPE_CHECKING:
    from mealplan.commands._context import AppContext


@click.command(
    cls=MealplanCommand,
    examples="""\
  # Serve on [server] host/port (default 127.0.0.1:8000)
  mealplan serve

  # Behind the authenticating proxy on another port
  mealplan serve --host 0.0.0.0 --port 9000""",
)
@click.option("--host", default=None, help="Bind address (default: [server] host).")
@click.option("--port", default=None, type=int, help="Listen port (default: [server] port).")
@click.pass_obj
def serve(app: AppContext, host: str | None, port: int | None) -> None:
    """Serve the signup board over HTTP.

    The caller's address is read from the [auth] identity_header, which
    the fronting proxy must set after verifying the client.
    """
    import uvicorn

    from mealplan.web.app import create_app

    web_app = create_app(app.settings, kitchen=app.kitchen)
    uvicorn.run(
        web_app,
        host=host or app.settings.server.host,
        port=port or app.settings.server.port,
        log_config=None,
    )
