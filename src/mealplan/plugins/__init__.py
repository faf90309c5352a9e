"""Extension layer — plugin system via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints.
INVARIANT: Plugin failures are warnings, never errors.
"""

from mealplan.plugins.hookspecs import hookimpl
from mealplan.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
