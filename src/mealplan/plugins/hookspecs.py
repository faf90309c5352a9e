"""Pluggy hook specifications for board lifecycle events.

Events are dispatched synchronously by the service layer after the
transaction that caused them has committed.
"""

from __future__ import annotations

import pluggy

PROJECT_NAME = "mealplan"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class MealplanHookSpec:
    """Hook specifications for the mealplan plugin system."""

    @hookspec
    def post_claim(self, identity: str, duty: str, day: str, day_label: str) -> None:
        """Called after *identity* claimed a slot."""

    @hookspec
    def post_abandon(self, identity: str, duty: str, day: str, day_label: str) -> None:
        """Called after *identity* released a slot."""

    @hookspec
    def post_bulk_save(self, identity: str, version: str) -> None:
        """Called after an administrator overwrote the board."""
