"""
Domain models for time ranges, activities and scheduling proposals.
"""

from dataclasses import dataclass, field
from datetime import date, time, timedelta
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

import pendulum
from pendulum import DateTime

from .exceptions import ConfigError


DEFAULT_GRANULARITY_MINUTES = 30


def _instant(dt: DateTime) -> float:
    # Same-zone datetimes compare by wall clock; the repeated hour needs UTC
    return dt.timestamp()


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable, half-open time range ``[start, end)``.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if _instant(self.start) >= _instant(self.end):
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another. Touching endpoints do not count."""
        return (
            _instant(self.start) < _instant(other.end)
            and _instant(self.end) > _instant(other.start)
        )

    def intersect(self, other: "TimeRange") -> "TimeRange | None":
        """
        Calculate the intersection of two time ranges.
        Returns None if there is no overlap.
        """
        if not self.overlaps(other):
            return None

        start = max(self.start, other.start, key=_instant)
        end = min(self.end, other.end, key=_instant)

        return TimeRange(start=start, end=end)

    def local_dates(self, timezone: str) -> List[date]:
        """Return every calendar date in ``timezone`` that this range touches."""
        current = self.start.in_timezone(timezone).date()
        last = self.end.in_timezone(timezone).date()

        dates: List[date] = []
        while current <= last:
            dates.append(current)
            current += timedelta(days=1)
        return dates

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class Slot(TimeRange):
    """A fixed-granularity candidate slot inside the daily window."""

    @property
    def local_date(self) -> date:
        """Calendar date of the slot in its own timezone."""
        return self.start.date()


@dataclass(frozen=True)
class BusyInterval(TimeRange):
    """
    An instant range unavailable for scheduling.

    ``source`` is ``"calendar"`` for provider events or the name of the
    recurring activity the interval was expanded from.
    """
    source: str = "calendar"


@dataclass(frozen=True)
class TimeWindow:
    """Daily active bounds, e.g. 09:00 - 17:00."""
    start: time
    end: time

    def __post_init__(self):
        if self.start >= self.end:
            raise ConfigError(
                f"Window start {self.start:%H:%M} must be before window end {self.end:%H:%M}"
            )

    def bounds_for_day(self, day: DateTime) -> TimeRange:
        """Resolve the wall-clock window on a specific local day."""
        start = day.set(hour=self.start.hour, minute=self.start.minute, second=0, microsecond=0)
        end = day.set(hour=self.end.hour, minute=self.end.minute, second=0, microsecond=0)
        return TimeRange(start=start, end=end)


@dataclass(frozen=True)
class ScheduleSettings:
    """
    Settings for one planning pass.

    Immutable; a settings change means a fresh pass.
    """
    window: TimeWindow
    horizon_days: int
    timezone: str = "UTC"
    granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES

    def __post_init__(self):
        if self.horizon_days <= 0:
            raise ConfigError(f"horizon_days must be greater than zero, got {self.horizon_days}")
        if self.granularity_minutes <= 0:
            raise ConfigError(
                f"granularity_minutes must be greater than zero, got {self.granularity_minutes}"
            )
        try:
            pendulum.timezone(self.timezone)
        except (ValueError, KeyError) as exc:
            raise ConfigError(f"Unknown timezone: {self.timezone!r}") from exc

    def today(self) -> DateTime:
        """Midnight of the current local day."""
        return pendulum.now(self.timezone).start_of("day")

    def resolve_start(self, start_date: Optional[DateTime] = None) -> DateTime:
        """Floor ``start_date`` (or today) to local midnight in the configured zone."""
        if start_date is None:
            return self.today()
        return start_date.in_timezone(self.timezone).start_of("day")


def weekday_number(day: DateTime) -> int:
    """Weekday of ``day`` with 0=Sunday ... 6=Saturday."""
    # pendulum counts from Monday=0
    return (day.day_of_week + 1) % 7


def _runs_on(days_of_week: FrozenSet[int], day: DateTime) -> bool:
    # empty set means every day
    return not days_of_week or weekday_number(day) in days_of_week


@dataclass(frozen=True)
class RecurringActivity:
    """
    A fixed activity that recurs at the same local time, e.g. lunch.

    ``days_of_week`` uses 0=Sunday ... 6=Saturday.
    """
    id: str
    name: str
    start_time: time
    duration_minutes: int
    days_of_week: FrozenSet[int] = field(default_factory=frozenset)

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise ConfigError(f"Activity {self.name!r} needs a positive duration")

    def runs_on(self, day: DateTime) -> bool:
        return _runs_on(self.days_of_week, day)


@dataclass(frozen=True)
class FlexibleActivity:
    """An activity with a duration but no fixed time."""
    id: str
    name: str
    duration_minutes: int
    days_of_week: FrozenSet[int] = field(default_factory=frozenset)

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise ConfigError(f"Activity {self.name!r} needs a positive duration")

    def runs_on(self, day: DateTime) -> bool:
        return _runs_on(self.days_of_week, day)


@dataclass(frozen=True)
class Suggestion:
    """
    A concrete proposal for a flexible activity.

    Only ``accepted`` ever changes, and only through the ledger.
    """
    id: str
    activity_name: str
    start: DateTime
    end: DateTime
    duration_minutes: int
    accepted: bool = False

    @staticmethod
    def make_id(activity_name: str, day: date, slot_index: int) -> str:
        """Build the reproducible id for ``(activity_name, day, slot_index)``."""
        return f"{activity_name}-{day.isoformat()}-{slot_index}"

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)

    def to_calendar_event(self, timezone: str) -> Dict[str, Any]:
        """Build the provider payload used to materialize this suggestion."""
        return {
            "summary": self.activity_name,
            "start": {
                "dateTime": self.start.to_iso8601_string(),
                "timeZone": timezone,
            },
            "end": {
                "dateTime": self.end.to_iso8601_string(),
                "timeZone": timezone,
            },
        }

    def format_display(self) -> str:
        """
        Format the suggestion for display.
        Format: Weekday, YYYY-MM-DD | HH:mm - HH:mm (N min)
        """
        weekday = self.start.format("dddd")
        date_str = self.start.format("YYYY-MM-DD")
        time_str = f"{self.start.format('HH:mm')} - {self.end.format('HH:mm')}"

        return f"{weekday}, {date_str} | {time_str} ({self.duration_minutes} min)"


class AdvisoryKind(str, Enum):
    NO_FLEXIBLE_ACTIVITIES = "no_flexible_activities"
    NO_SLOTS_FOUND = "no_slots_found"


@dataclass(frozen=True)
class Advisory:
    """A non-fatal condition reported alongside a planning result."""
    kind: AdvisoryKind
    message: str
    activity_name: Optional[str] = None


@dataclass
class PlanningResult:
    """Outcome of one planning pass."""
    suggestions: List[Suggestion] = field(default_factory=list)
    advisories: List[Advisory] = field(default_factory=list)
    free_slots: List[Slot] = field(default_factory=list)

    def activities_without_slots(self) -> List[str]:
        """Names of activities that received no suggestion."""
        return [
            advisory.activity_name
            for advisory in self.advisories
            if advisory.kind is AdvisoryKind.NO_SLOTS_FOUND and advisory.activity_name
        ]
