"""
Domain-specific exception hierarchy for the slot planner.
"""


class PlannerError(Exception):
    """Base class for all application-level errors."""


class ConfigError(PlannerError, ValueError):
    """Raised when schedule settings or the config file are invalid."""


class CalendarAPIError(PlannerError):
    """Raised when calendar data cannot be fetched, parsed or written."""


class SuggestionNotFoundError(PlannerError, KeyError):
    """Raised when a ledger operation references an unknown suggestion id."""


class DuplicateSuggestionError(PlannerError):
    """Raised when a planning pass contains the same suggestion id twice."""
