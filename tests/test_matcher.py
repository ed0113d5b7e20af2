"""
Tests for the first-fit suggestion matcher.
"""

from datetime import time
from typing import List

import pendulum

from slotplanner.domain.availability import AvailabilityFilter
from slotplanner.domain.matcher import SuggestionMatcher
from slotplanner.domain.models import (
    AdvisoryKind,
    BusyInterval,
    FlexibleActivity,
    ScheduleSettings,
    Slot,
    TimeWindow,
)
from slotplanner.domain.time_windows import TimeWindowGenerator


TZ = "Europe/Berlin"
MONDAY = pendulum.parse("2024-11-25 00:00", tz=TZ)


def _settings(horizon_days: int = 1, end=time(17, 0)) -> ScheduleSettings:
    return ScheduleSettings(
        window=TimeWindow(start=time(9, 0), end=end),
        horizon_days=horizon_days,
        timezone=TZ
    )


def _free_slots(settings: ScheduleSettings, busy: List[BusyInterval] = ()) -> List[Slot]:
    slots = TimeWindowGenerator(settings).generate_slots(MONDAY)
    return AvailabilityFilter(TZ).filter_free(slots, busy)


def _busy(start: str, end: str) -> BusyInterval:
    return BusyInterval(start=pendulum.parse(start, tz=TZ), end=pendulum.parse(end, tz=TZ))


def _activity(name: str, duration: int, days=frozenset()) -> FlexibleActivity:
    return FlexibleActivity(id=name.lower(), name=name, duration_minutes=duration, days_of_week=days)


class TestSuggestionMatcher:
    """Tests for SuggestionMatcher."""

    def test_first_fit_takes_earliest_run(self):
        settings = _settings()
        free = _free_slots(settings, [_busy("2024-11-25 12:00", "2024-11-25 13:00")])

        result = SuggestionMatcher(settings).match(free, [_activity("Deep Work", 90)], MONDAY)

        assert len(result.suggestions) == 1
        suggestion = result.suggestions[0]
        assert suggestion.id == "Deep Work-2024-11-25-0"
        assert suggestion.start == pendulum.parse("2024-11-25 09:00", tz=TZ)
        assert suggestion.end == pendulum.parse("2024-11-25 10:30", tz=TZ)
        assert suggestion.duration_minutes == 90
        assert not suggestion.accepted
        assert result.advisories == []

    def test_gap_disqualifies_window(self):
        """A single busy slot breaks contiguity; the slot index reflects the shift."""
        settings = _settings(end=time(12, 0))
        free = _free_slots(settings, [_busy("2024-11-25 10:00", "2024-11-25 10:30")])

        result = SuggestionMatcher(settings).match(free, [_activity("Focus", 90)], MONDAY)

        suggestion = result.suggestions[0]
        assert suggestion.start == pendulum.parse("2024-11-25 10:30", tz=TZ)
        assert suggestion.end == pendulum.parse("2024-11-25 12:00", tz=TZ)
        assert suggestion.id == "Focus-2024-11-25-2"

    def test_duration_rounds_up_to_whole_slots(self):
        settings = _settings()
        activity = _activity("Call", 45)
        matcher = SuggestionMatcher(settings)

        result = matcher.match(_free_slots(settings), [activity], MONDAY)

        assert matcher.slots_needed(activity) == 2
        assert result.suggestions[0].end == pendulum.parse("2024-11-25 10:00", tz=TZ)
        assert result.suggestions[0].duration_minutes == 45

    def test_at_most_one_suggestion_per_day(self):
        settings = _settings(horizon_days=3)

        result = SuggestionMatcher(settings).match(
            _free_slots(settings), [_activity("Walk", 30)], MONDAY
        )

        assert [s.start.to_date_string() for s in result.suggestions] == [
            "2024-11-25", "2024-11-26", "2024-11-27"
        ]

    def test_no_slots_found_is_reported_per_activity(self):
        """An activity that never fits gets an advisory; the others still match."""
        settings = _settings(end=time(10, 0))

        result = SuggestionMatcher(settings).match(
            _free_slots(settings),
            [_activity("Marathon", 90), _activity("Stretch", 30)],
            MONDAY
        )

        assert [s.activity_name for s in result.suggestions] == ["Stretch"]
        assert len(result.advisories) == 1
        assert result.advisories[0].kind is AdvisoryKind.NO_SLOTS_FOUND
        assert result.activities_without_slots() == ["Marathon"]

    def test_no_flexible_activities_is_advisory(self):
        settings = _settings()

        result = SuggestionMatcher(settings).match(_free_slots(settings), [], MONDAY)

        assert result.suggestions == []
        assert [a.kind for a in result.advisories] == [AdvisoryKind.NO_FLEXIBLE_ACTIVITIES]

    def test_day_preference_limits_dates(self):
        settings = _settings(horizon_days=7)

        result = SuggestionMatcher(settings).match(
            _free_slots(settings), [_activity("Swim", 60, frozenset({3}))], MONDAY
        )

        assert [s.start.to_date_string() for s in result.suggestions] == ["2024-11-27"]

    def test_ordering_is_activity_then_date(self):
        settings = _settings(horizon_days=2)

        result = SuggestionMatcher(settings).match(
            _free_slots(settings), [_activity("B", 30), _activity("A", 60)], MONDAY
        )

        assert [s.id for s in result.suggestions] == [
            "B-2024-11-25-0",
            "B-2024-11-26-0",
            "A-2024-11-25-0",
            "A-2024-11-26-0",
        ]

    def test_free_slots_are_not_consumed_between_activities(self):
        """Two activities may be offered the same time."""
        settings = _settings()

        result = SuggestionMatcher(settings).match(
            _free_slots(settings), [_activity("Read", 30), _activity("Write", 30)], MONDAY
        )

        assert result.suggestions[0].start == result.suggestions[1].start
