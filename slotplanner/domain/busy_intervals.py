"""
Projection of recurring activities and provider events into busy intervals.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence

import pendulum
from pendulum import DateTime

from .models import BusyInterval, RecurringActivity, ScheduleSettings

logger = logging.getLogger(__name__)


CALENDAR_SOURCE = "calendar"


class BusyIntervalExpander:
    """
    Builds the busy side of the availability calculation.

    Two sources feed it:
    1. Recurring activities, expanded into one interval per matching day
    2. Calendar provider events, either all-day (``date``) or timed (``dateTime``)
    """

    def __init__(self, settings: ScheduleSettings):
        self.settings = settings

    def collect(
        self,
        activities: Sequence[RecurringActivity],
        events: Iterable[Mapping[str, Any]],
        start_date: Optional[DateTime] = None
    ) -> List[BusyInterval]:
        """Return the union of expanded activities and normalized events."""
        busy = self.expand_recurring(activities, start_date)
        busy.extend(self.normalize_events(events))
        return busy

    def expand_recurring(
        self,
        activities: Sequence[RecurringActivity],
        start_date: Optional[DateTime] = None
    ) -> List[BusyInterval]:
        """
        Expand each recurring activity across the horizon.

        The interval starts at the activity's local start time on each
        matching day and lasts ``duration_minutes``. Activities that run past
        midnight are not split.
        """
        first_day = self.settings.resolve_start(start_date)
        days = [first_day.add(days=offset) for offset in range(self.settings.horizon_days)]

        intervals: List[BusyInterval] = []

        for activity in activities:
            for day in days:
                if not activity.runs_on(day):
                    continue

                start = day.set(
                    hour=activity.start_time.hour,
                    minute=activity.start_time.minute,
                    second=0,
                    microsecond=0
                )
                intervals.append(
                    BusyInterval(
                        start=start,
                        end=start.add(minutes=activity.duration_minutes),
                        source=activity.name
                    )
                )

        return intervals

    def normalize_events(self, events: Iterable[Mapping[str, Any]]) -> List[BusyInterval]:
        """
        Convert provider events to busy intervals.

        Malformed entries are logged and skipped so partial data never
        blocks a planning pass.
        """
        intervals: List[BusyInterval] = []

        for event in events:
            try:
                interval = self._normalize_event(event)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed calendar event %r: %s", _event_label(event), e)
                continue

            if interval is not None:
                intervals.append(interval)

        return intervals

    def _normalize_event(self, event: Mapping[str, Any]) -> BusyInterval | None:
        if not isinstance(event, Mapping):
            raise TypeError(f"expected a mapping, got {type(event).__name__}")

        if event.get("status") == "cancelled":
            return None

        start_field = event.get("start") or {}
        end_field = event.get("end") or {}

        if "dateTime" in start_field:
            start = self._parse_datetime(start_field["dateTime"])
            end = self._parse_datetime(end_field["dateTime"])
            return BusyInterval(start=start, end=end, source=CALENDAR_SOURCE)

        if "date" in start_field:
            first_day = self._parse_date(start_field["date"])
            last_day = first_day

            # Provider end dates are exclusive
            if "date" in end_field:
                last_day = max(first_day, self._parse_date(end_field["date"]).subtract(days=1))

            return BusyInterval(
                start=first_day,
                end=last_day.set(hour=23, minute=59, second=59, microsecond=999000),
                source=CALENDAR_SOURCE
            )

        raise ValueError("event has neither 'date' nor 'dateTime'")

    def _parse_date(self, value: str) -> DateTime:
        """Parse an ISO date to local midnight in the configured zone."""
        return pendulum.from_format(value, "YYYY-MM-DD", tz=self.settings.timezone)

    def _parse_datetime(self, value: str) -> DateTime:
        """
        Parse an ISO datetime and convert it to the configured zone.

        Naive values are read as local time in that zone.
        """
        dt = pendulum.parse(value, tz=self.settings.timezone)

        if not isinstance(dt, DateTime):
            raise ValueError(f"Could not parse datetime: {value}")

        return dt.in_timezone(self.settings.timezone)


def _event_label(event: Any) -> str:
    if isinstance(event, Mapping):
        return str(event.get("id") or event.get("summary") or "<unnamed>")
    return repr(event)
