"""structlog configuration for mealplan.

Everything goes to stderr, so stdout stays clean for command results:

- Human (default): console renderer, colored on a TTY
- JSON (--log-json): one JSON object per line, for the web server's logs

Under ``mealplan serve`` uvicorn's own loggers propagate into the same
handler, so server lines and board events share one format.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Third-party loggers and their level in normal / verbose mode.
_LIBRARY_LEVELS: dict[str, tuple[int, int]] = {
    "ldap3": (logging.WARNING, logging.WARNING),
    "uvicorn": (logging.INFO, logging.INFO),
    "uvicorn.access": (logging.WARNING, logging.INFO),
}


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Configure structlog processors and output routing.

    Args:
        verbose: Enable DEBUG-level output. When False, mealplan logs at INFO
            so claims, abandons, and admin saves are always recorded.
        log_json: Use JSON renderer instead of console renderer.
    """
    shared = _shared_processors()
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("mealplan").setLevel(logging.DEBUG if verbose else logging.INFO)
    for name, (normal, detailed) in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(detailed if verbose else normal)
