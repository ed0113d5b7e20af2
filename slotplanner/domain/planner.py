"""
One planning pass: slots -> busy intervals -> free slots -> suggestions.
"""

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence

from pendulum import DateTime

from .availability import AvailabilityFilter
from .busy_intervals import BusyIntervalExpander
from .matcher import SuggestionMatcher
from .exceptions import ConfigError
from .models import FlexibleActivity, PlanningResult, RecurringActivity, ScheduleSettings
from .time_windows import TimeWindowGenerator

logger = logging.getLogger(__name__)


class ActivityPlanner:
    """
    Runs the full availability and suggestion pipeline.

    Every call recomputes from scratch; nothing is cached between passes, so
    identical inputs always yield identical suggestions.

    Suggestion ids are built from the activity name, so flexible activity
    names must be unique (case-insensitive) within one pass.
    """

    def __init__(self, settings: ScheduleSettings):
        self.settings = settings
        self.window_generator = TimeWindowGenerator(settings)
        self.busy_expander = BusyIntervalExpander(settings)
        self.availability_filter = AvailabilityFilter(settings.timezone)
        self.matcher = SuggestionMatcher(settings)

    def plan(
        self,
        recurring_activities: Sequence[RecurringActivity],
        flexible_activities: Sequence[FlexibleActivity],
        calendar_events: Iterable[Mapping[str, Any]] = (),
        start_date: Optional[DateTime] = None
    ) -> PlanningResult:
        """
        Compute suggestions for one planning pass.

        Args:
            recurring_activities: Fixed activities that block time
            flexible_activities: Activities to find time for
            calendar_events: Raw provider events (``date`` or ``dateTime`` form)
            start_date: Any instant on the first horizon day; defaults to today

        Returns:
            PlanningResult with suggestions, advisories and the free slots

        Raises:
            ConfigError: If two flexible activities share a name
        """
        self._check_unique_names(flexible_activities)

        first_day = self.settings.resolve_start(start_date)

        slots = self.window_generator.generate_slots(first_day)
        busy = self.busy_expander.collect(recurring_activities, calendar_events, first_day)
        free_slots = self.availability_filter.filter_free(slots, busy)

        result = self.matcher.match(free_slots, flexible_activities, first_day)

        logger.debug(
            "Planning pass from %s: %d busy interval(s), %d free slot(s), %d suggestion(s)",
            first_day.to_date_string(),
            len(busy),
            len(free_slots),
            len(result.suggestions)
        )
        return result

    @staticmethod
    def _check_unique_names(activities: Sequence[FlexibleActivity]) -> None:
        seen = set()
        for activity in activities:
            key = activity.name.lower()
            if key in seen:
                raise ConfigError(f"Duplicate flexible activity name: {activity.name!r}")
            seen.add(key)
