"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy Kitchen initialization and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mealplan.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from mealplan.config.settings import MealplanSettings
    from mealplan.infrastructure.kitchen import Kitchen
    from mealplan.services.admin import AdminService
    from mealplan.services.auth import MembershipService
    from mealplan.services.reminders import ReminderService
    from mealplan.services.result import ServiceResult
    from mealplan.services.signup import SignupService


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.  The kitchen is lazily
    initialized on first use so ``--help`` and ``--version`` never touch
    the data file or load plugins.
    """

    def __init__(self, settings: MealplanSettings) -> None:
        self.settings = settings
        self._kitchen: Kitchen | None = None

        # Configure structured logging
        from mealplan.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def kitchen(self) -> Kitchen:
        """The kitchen instance (created lazily on first access)."""
        if self._kitchen is None:
            from mealplan.infrastructure.kitchen import Kitchen

            self._kitchen = Kitchen(self.settings)
        return self._kitchen

    def signup_service(self) -> SignupService:
        from mealplan.services.signup import SignupService

        k = self.kitchen
        return SignupService(k.coordinator, self.settings, plugins=k.plugins)

    def admin_service(self) -> AdminService:
        from mealplan.services.admin import AdminService

        k = self.kitchen
        return AdminService(k.coordinator, self.settings, plugins=k.plugins)

    def reminder_service(self) -> ReminderService:
        from mealplan.services.reminders import ReminderService

        k = self.kitchen
        return ReminderService(k.coordinator, self.settings, mailer=k.mailer)

    def membership_service(self) -> MembershipService:
        from mealplan.services.auth import MembershipService

        return MembershipService(self.kitchen.gateway)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
