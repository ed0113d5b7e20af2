"""
Generation of fixed-granularity candidate slots across the planning horizon.

Pure domain logic: no API calls, no I/O.
"""

import logging
from typing import List, Optional

from pendulum import DateTime

from .models import ScheduleSettings, Slot, TimeRange

logger = logging.getLogger(__name__)


class TimeWindowGenerator:
    """
    Produces the ordered slot grid for a planning pass.

    Day ``i`` of the horizon is local midnight of the start date plus ``i``
    days, so the grid always starts at the top of the first day rather than
    at the current instant. Window bounds are wall-clock times in the
    configured zone; slots step in absolute minutes from the window start, so
    a DST shift inside the window changes that day's slot count.
    """

    def __init__(self, settings: ScheduleSettings):
        self.settings = settings

    def horizon_days_iter(self, start_date: Optional[DateTime] = None) -> List[DateTime]:
        """Return local midnight for every day of the horizon."""
        first_day = self.settings.resolve_start(start_date)
        return [first_day.add(days=offset) for offset in range(self.settings.horizon_days)]

    def horizon_bounds(self, start_date: Optional[DateTime] = None) -> TimeRange:
        """Midnight of the first day to midnight after the last day."""
        first_day = self.settings.resolve_start(start_date)
        return TimeRange(start=first_day, end=first_day.add(days=self.settings.horizon_days))

    def generate_slots(self, start_date: Optional[DateTime] = None) -> List[Slot]:
        """
        Generate all slots for the horizon, ascending by start.

        Args:
            start_date: Any instant on the first day; defaults to today

        Returns:
            List of Slot objects, none of which crosses the window end
        """
        slots: List[Slot] = []

        for day in self.horizon_days_iter(start_date):
            slots.extend(self._slots_for_day(day))

        logger.debug(
            "Generated %d slots over %d day(s)", len(slots), self.settings.horizon_days
        )
        return slots

    def _slots_for_day(self, day: DateTime) -> List[Slot]:
        """
        Cut one day's window into granularity-sized slots.

        Example (60 min granularity):
        Window: 09:00 - 11:30
        Result: [09:00-10:00, 10:00-11:00]
        """
        window = self.settings.window.bounds_for_day(day)
        granularity = self.settings.granularity_minutes

        day_slots: List[Slot] = []
        current = window.start

        while True:
            slot_end = current.add(minutes=granularity)

            # No partial trailing slot
            if slot_end.timestamp() > window.end.timestamp():
                break

            day_slots.append(Slot(start=current, end=slot_end))
            current = slot_end

        return day_slots
