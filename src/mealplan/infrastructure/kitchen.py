"""Kitchen — the process-wide bundle of board resources.

One Kitchen is built per process (by the CLI's AppContext or by the web
app factory) from a :class:`MealplanSettings`.  It owns the single
:class:`TransactionCoordinator` over the snapshot file, the directory
client, the mailer, and the plugin manager, and hands them to services.

INVARIANT: Never construct two Kitchens over the same data file in one
process; each would carry its own coordinator lock.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mealplan.domain.identity import IdentityNormalizer
from mealplan.infrastructure.coordinator import TransactionCoordinator
from mealplan.infrastructure.directory import DirectoryClient
from mealplan.infrastructure.mail import Mailer
from mealplan.infrastructure.store import DocumentStore

if TYPE_CHECKING:
    from mealplan.config.settings import MealplanSettings
    from mealplan.plugins.manager import PluginManager
    from mealplan.services.auth import AuthorizationGateway

logger = logging.getLogger(__name__)


class Kitchen:
    """Owns the board's coordinator and its outbound clients."""

    def __init__(
        self,
        settings: MealplanSettings,
        *,
        directory: DirectoryClient | None = None,
        mailer: Mailer | None = None,
    ) -> None:
        self._settings = settings
        store = DocumentStore(settings.data_path, settings.board.duties, settings.board.days)
        self._coordinator = TransactionCoordinator(store)
        self._normalizer = IdentityNormalizer(settings.identity.domain)
        self._directory = directory or DirectoryClient(settings.directory)
        self._mailer = mailer or Mailer(settings.mail)
        self._plugins: PluginManager | None = None
        self._gateway: AuthorizationGateway | None = None

    @property
    def settings(self) -> MealplanSettings:
        return self._settings

    @property
    def coordinator(self) -> TransactionCoordinator:
        return self._coordinator

    @property
    def normalizer(self) -> IdentityNormalizer:
        return self._normalizer

    @property
    def mailer(self) -> Mailer:
        return self._mailer

    @property
    def gateway(self) -> AuthorizationGateway:
        """The authorization gateway (created lazily on first access)."""
        if self._gateway is None:
            from mealplan.services.auth import AuthorizationGateway

            self._gateway = AuthorizationGateway(self._directory, self._normalizer)
        return self._gateway

    @property
    def plugins(self) -> PluginManager:
        """The plugin manager (discovered lazily on first access)."""
        if self._plugins is None:
            self._plugins = self.init_plugins()
        return self._plugins

    def init_plugins(self) -> PluginManager:
        """Discover entry-point plugins and register the built-in notifier.

        The abandon notifier is only registered when mail is enabled and
        ``mail.notify_on_abandon`` is set.
        """
        from mealplan.plugins.builtins.notify import AbandonNotifier
        from mealplan.plugins.manager import PluginManager

        pm = PluginManager()
        pm.discover_and_load()
        mail = self._settings.mail
        if mail.enabled and mail.notify_on_abandon:
            notifier = AbandonNotifier(self._mailer, self._normalizer)
            pm.register_plugin(notifier, name="notify-builtin")
        logger.debug("Plugins loaded: %s", ", ".join(pm.list_plugin_names()) or "(none)")
        return pm
