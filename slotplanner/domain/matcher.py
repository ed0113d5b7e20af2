"""
First-fit matching of flexible activities against free slots.

This is the heart of the planner - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import logging
import math
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Sequence

from pendulum import DateTime

from .models import (
    Advisory,
    AdvisoryKind,
    FlexibleActivity,
    PlanningResult,
    ScheduleSettings,
    Slot,
    Suggestion,
)

logger = logging.getLogger(__name__)


class SuggestionMatcher:
    """
    Proposes times for flexible activities.

    Algorithm, per activity and per horizon day (ascending):
    1. slots_needed = ceil(duration / granularity)
    2. Take the day's free slots (calendar-date equality in the local zone)
    3. Slide a window of slots_needed slots across them
    4. The window qualifies only if each slot ends exactly where the next starts
    5. Emit a suggestion for the first qualifying window and stop for that day

    First-fit policy: at most one suggestion per activity per day, and the
    earliest run wins even if a later one fits more snugly. Free slots are
    not consumed between activities, so two activities may be offered the
    same time.
    """

    def __init__(self, settings: ScheduleSettings):
        self.settings = settings

    def match(
        self,
        free_slots: Sequence[Slot],
        activities: Sequence[FlexibleActivity],
        start_date: Optional[DateTime] = None
    ) -> PlanningResult:
        """
        Match every activity against the free slots.

        Args:
            free_slots: Time-ordered free slots for the horizon
            activities: Flexible activities, in the order suggestions should appear
            start_date: Any instant on the first horizon day; defaults to today

        Returns:
            PlanningResult with suggestions and advisories
        """
        result = PlanningResult(free_slots=list(free_slots))

        if not activities:
            result.advisories.append(
                Advisory(
                    kind=AdvisoryKind.NO_FLEXIBLE_ACTIVITIES,
                    message="No flexible activities to schedule."
                )
            )
            return result

        first_day = self.settings.resolve_start(start_date)
        days = [first_day.add(days=offset) for offset in range(self.settings.horizon_days)]
        slots_by_date = self._group_by_date(free_slots)

        for activity in activities:
            activity_suggestions = self._match_activity(activity, days, slots_by_date)

            if not activity_suggestions:
                logger.info("No free slots found for %r", activity.name)
                result.advisories.append(
                    Advisory(
                        kind=AdvisoryKind.NO_SLOTS_FOUND,
                        message=(
                            f"No free {activity.duration_minutes}-minute slot found "
                            f"for {activity.name!r} within the horizon."
                        ),
                        activity_name=activity.name
                    )
                )

            result.suggestions.extend(activity_suggestions)

        return result

    def slots_needed(self, activity: FlexibleActivity) -> int:
        return math.ceil(activity.duration_minutes / self.settings.granularity_minutes)

    def _match_activity(
        self,
        activity: FlexibleActivity,
        days: List[DateTime],
        slots_by_date: Dict[date, List[Slot]]
    ) -> List[Suggestion]:
        needed = self.slots_needed(activity)
        suggestions: List[Suggestion] = []

        for day in days:
            if not activity.runs_on(day):
                continue

            day_slots = slots_by_date.get(day.date(), [])
            suggestion = self._first_fit(activity, day.date(), day_slots, needed)
            if suggestion:
                suggestions.append(suggestion)

        return suggestions

    def _first_fit(
        self,
        activity: FlexibleActivity,
        day: date,
        day_slots: List[Slot],
        needed: int
    ) -> Suggestion | None:
        for index in range(len(day_slots) - needed + 1):
            window = day_slots[index:index + needed]

            if not self._is_contiguous(window):
                continue

            return Suggestion(
                id=Suggestion.make_id(activity.name, day, index),
                activity_name=activity.name,
                start=window[0].start,
                end=window[-1].end,
                duration_minutes=activity.duration_minutes
            )

        return None

    @staticmethod
    def _is_contiguous(window: List[Slot]) -> bool:
        return all(
            previous.end.timestamp() == current.start.timestamp()
            for previous, current in zip(window, window[1:])
        )

    def _group_by_date(self, free_slots: Sequence[Slot]) -> Dict[date, List[Slot]]:
        grouped: Dict[date, List[Slot]] = defaultdict(list)

        for slot in free_slots:
            grouped[slot.start.in_timezone(self.settings.timezone).date()].append(slot)

        return grouped
