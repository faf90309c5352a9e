"""Plugin registry for board lifecycle hooks.

Plugins come from two places: distributions advertising the
``mealplan.plugins`` entry point group, and built-ins the Kitchen
registers itself (the abandon notifier).  Only post-commit hooks exist,
so a plugin can observe the board but never veto a change.
"""

from __future__ import annotations

import inspect
import logging

import pluggy

from mealplan.plugins.hookspecs import PROJECT_NAME, MealplanHookSpec

ENTRY_POINT_GROUP = "mealplan.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Holds the board's pluggy manager and exposes its hook relay."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(MealplanHookSpec)

    def discover_and_load(self) -> list[str]:
        """Load entry-point plugins; return every registered plugin name."""
        count = self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        if count:
            logger.debug("Loaded %d entry-point plugin(s)", count)
        self._instantiate_classes()
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        name = name or type(plugin).__name__
        self._pm.register(plugin, name=name)
        logger.debug("Registered plugin: %s", name)

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or type(p).__name__ for p in self._pm.get_plugins()]

    def _instantiate_classes(self) -> None:
        # An entry point may name a class; hooks need a bound instance.
        for plugin in list(self._pm.get_plugins()):
            if not (inspect.isclass(plugin) and self._declares_hooks(plugin)):
                continue
            name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Skipping plugin %s: constructor failed", name, exc_info=True)
                continue
            self._pm.register(instance, name=name)

    @staticmethod
    def _declares_hooks(cls: type) -> bool:
        """True when *cls* has at least one public ``@hookimpl`` method."""
        marker = f"{PROJECT_NAME}_impl"
        return any(
            getattr(getattr(cls, attr, None), marker, None) is not None
            for attr in dir(cls)
            if not attr.startswith("_")
        )
