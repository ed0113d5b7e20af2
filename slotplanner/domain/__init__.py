"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability import AvailabilityFilter
from .busy_intervals import BusyIntervalExpander
from .exceptions import (
    CalendarAPIError,
    ConfigError,
    DuplicateSuggestionError,
    PlannerError,
    SuggestionNotFoundError,
)
from .ledger import SuggestionLedger
from .matcher import SuggestionMatcher
from .models import (
    Advisory,
    AdvisoryKind,
    BusyInterval,
    FlexibleActivity,
    PlanningResult,
    RecurringActivity,
    ScheduleSettings,
    Slot,
    Suggestion,
    TimeRange,
    TimeWindow,
    weekday_number,
)
from .planner import ActivityPlanner
from .time_windows import TimeWindowGenerator

__all__ = [
    "ActivityPlanner",
    "Advisory",
    "AdvisoryKind",
    "AvailabilityFilter",
    "BusyInterval",
    "BusyIntervalExpander",
    "CalendarAPIError",
    "ConfigError",
    "DuplicateSuggestionError",
    "FlexibleActivity",
    "PlannerError",
    "PlanningResult",
    "RecurringActivity",
    "ScheduleSettings",
    "Slot",
    "Suggestion",
    "SuggestionLedger",
    "SuggestionMatcher",
    "SuggestionNotFoundError",
    "TimeRange",
    "TimeWindow",
    "TimeWindowGenerator",
    "weekday_number",
]
