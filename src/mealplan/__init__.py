"""mealplan — a shared duty-scheduling board for a communal kitchen."""

__version__ = "0.4.0"
