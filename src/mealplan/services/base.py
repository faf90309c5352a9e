"""BaseService — foundation for the board services.

Every service receives the process's single :class:`TransactionCoordinator`
at construction time and owns its transaction boundaries through
``self._coordinator.apply()`` / ``read()`` / ``compare_and_swap()``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mealplan.config.settings import MealplanSettings
    from mealplan.infrastructure.coordinator import TransactionCoordinator
    from mealplan.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class SignupService(BaseService):
            def claim(self, duty: str, day: str, identity: str) -> ServiceResult:
                key = self._coordinator.apply(lambda doc: claim(doc, duty, day, identity))
                ...
    """

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        settings: MealplanSettings,
        *,
        plugins: PluginManager | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._settings = settings
        self._plugins = plugins

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Dispatch a post-commit event. No-op without a plugin manager.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        if self._plugins is None:
            return
        try:
            getattr(self._plugins.hook, hook_name)(**payload)
        except Exception:
            logger.warning("Event dispatch failed for %s", hook_name, exc_info=True)
            warnings.append(f"Event dispatch failed for {hook_name}")
