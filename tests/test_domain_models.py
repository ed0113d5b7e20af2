"""
Tests for domain models.
"""

from datetime import time

import pendulum
import pytest

from slotplanner.domain.exceptions import ConfigError
from slotplanner.domain.models import (
    FlexibleActivity,
    RecurringActivity,
    ScheduleSettings,
    Suggestion,
    TimeRange,
    TimeWindow,
    weekday_number,
)


TZ = "Europe/Berlin"


class TestTimeRange:
    """Tests for TimeRange model."""

    def test_create_valid_time_range(self):
        """Test creating a valid time range."""
        start = pendulum.parse("2024-11-25 09:00", tz=TZ)
        end = pendulum.parse("2024-11-25 17:00", tz=TZ)

        tr = TimeRange(start=start, end=end)

        assert tr.start == start
        assert tr.end == end
        assert tr.duration_minutes() == 480  # 8 hours

    def test_invalid_time_range_raises_error(self):
        """Test that creating an invalid time range raises ValueError."""
        start = pendulum.parse("2024-11-25 17:00", tz=TZ)
        end = pendulum.parse("2024-11-25 09:00", tz=TZ)

        with pytest.raises(ValueError, match="Start time .* must be before end time"):
            TimeRange(start=start, end=end)

    def test_overlaps_is_half_open(self):
        """Ranges that only touch do not overlap."""
        tr1 = TimeRange(
            start=pendulum.parse("2024-11-25 09:00", tz=TZ),
            end=pendulum.parse("2024-11-25 12:00", tz=TZ)
        )
        tr2 = TimeRange(
            start=pendulum.parse("2024-11-25 11:00", tz=TZ),
            end=pendulum.parse("2024-11-25 14:00", tz=TZ)
        )
        tr3 = TimeRange(
            start=pendulum.parse("2024-11-25 12:00", tz=TZ),
            end=pendulum.parse("2024-11-25 17:00", tz=TZ)
        )

        assert tr1.overlaps(tr2)
        assert tr2.overlaps(tr1)
        assert not tr1.overlaps(tr3)
        assert not tr3.overlaps(tr1)

    def test_intersect(self):
        """Test intersection calculation."""
        tr1 = TimeRange(
            start=pendulum.parse("2024-11-25 09:00", tz=TZ),
            end=pendulum.parse("2024-11-25 12:00", tz=TZ)
        )
        tr2 = TimeRange(
            start=pendulum.parse("2024-11-25 11:00", tz=TZ),
            end=pendulum.parse("2024-11-25 14:00", tz=TZ)
        )

        intersection = tr1.intersect(tr2)

        assert intersection is not None
        assert intersection.start == pendulum.parse("2024-11-25 11:00", tz=TZ)
        assert intersection.end == pendulum.parse("2024-11-25 12:00", tz=TZ)

    def test_repeated_hour_compares_by_instant(self):
        """On fall-back night 02:30 CEST comes before 02:00 CET."""
        summer = pendulum.datetime(2024, 10, 27, 0, 30, tz="UTC").in_timezone(TZ)
        winter = pendulum.datetime(2024, 10, 27, 1, 0, tz="UTC").in_timezone(TZ)

        time_range = TimeRange(start=summer, end=winter)
        later = TimeRange(start=winter, end=winter.add(minutes=30))

        assert time_range.duration_minutes() == 30
        assert not time_range.overlaps(later)
        assert time_range.overlaps(TimeRange(start=summer.add(minutes=10), end=winter))

    def test_local_dates_spans_midnight(self):
        """Every touched local date is reported."""
        tr = TimeRange(
            start=pendulum.parse("2024-11-25 22:00", tz=TZ),
            end=pendulum.parse("2024-11-27 01:00", tz=TZ)
        )

        assert [d.isoformat() for d in tr.local_dates(TZ)] == [
            "2024-11-25", "2024-11-26", "2024-11-27"
        ]

    def test_local_dates_uses_requested_timezone(self):
        """A UTC evening can already be the next day in Berlin."""
        tr = TimeRange(
            start=pendulum.parse("2024-11-25T23:30:00Z"),
            end=pendulum.parse("2024-11-25T23:45:00Z")
        )

        assert [d.isoformat() for d in tr.local_dates(TZ)] == ["2024-11-26"]


class TestScheduleSettings:
    """Tests for TimeWindow and ScheduleSettings validation."""

    def test_inverted_window_raises_config_error(self):
        with pytest.raises(ConfigError):
            TimeWindow(start=time(17, 0), end=time(9, 0))

    def test_empty_window_raises_config_error(self):
        with pytest.raises(ConfigError):
            TimeWindow(start=time(9, 0), end=time(9, 0))

    @pytest.mark.parametrize("horizon", [0, -3])
    def test_non_positive_horizon_raises_config_error(self, horizon):
        with pytest.raises(ConfigError, match="horizon_days"):
            ScheduleSettings(window=TimeWindow(time(9, 0), time(17, 0)), horizon_days=horizon)

    def test_unknown_timezone_raises_config_error(self):
        with pytest.raises(ConfigError, match="Unknown timezone"):
            ScheduleSettings(
                window=TimeWindow(time(9, 0), time(17, 0)),
                horizon_days=1,
                timezone="Mars/Olympus_Mons"
            )

    def test_config_error_is_value_error(self):
        """Callers catching ValueError also see configuration problems."""
        with pytest.raises(ValueError):
            ScheduleSettings(window=TimeWindow(time(9, 0), time(17, 0)), horizon_days=0)

    def test_resolve_start_floors_to_midnight(self):
        settings = ScheduleSettings(
            window=TimeWindow(time(9, 0), time(17, 0)),
            horizon_days=1,
            timezone=TZ
        )

        resolved = settings.resolve_start(pendulum.parse("2024-11-25 14:37", tz=TZ))

        assert resolved == pendulum.datetime(2024, 11, 25, tz=TZ)


class TestActivities:
    """Tests for activity models."""

    def test_recurring_activity_runs_on_selected_weekdays(self):
        activity = RecurringActivity(
            id="r1",
            name="Standup",
            start_time=time(9, 0),
            duration_minutes=15,
            days_of_week=frozenset({1, 3})  # Monday, Wednesday
        )

        assert activity.runs_on(pendulum.parse("2024-11-25", tz=TZ))      # Monday
        assert not activity.runs_on(pendulum.parse("2024-11-26", tz=TZ))  # Tuesday
        assert activity.runs_on(pendulum.parse("2024-11-27", tz=TZ))      # Wednesday

    def test_weekday_numbering_starts_on_sunday(self):
        activity = FlexibleActivity(
            id="f1", name="Walk", duration_minutes=30, days_of_week=frozenset({0, 6})
        )

        assert weekday_number(pendulum.parse("2024-12-01", tz=TZ)) == 0  # Sunday
        assert weekday_number(pendulum.parse("2024-11-25", tz=TZ)) == 1  # Monday
        assert activity.runs_on(pendulum.parse("2024-11-30", tz=TZ))
        assert activity.runs_on(pendulum.parse("2024-12-01", tz=TZ))
        assert not activity.runs_on(pendulum.parse("2024-11-29", tz=TZ))

    def test_empty_days_means_every_day(self):
        activity = FlexibleActivity(id="f1", name="Walk", duration_minutes=30)

        for offset in range(7):
            assert activity.runs_on(pendulum.parse("2024-11-25", tz=TZ).add(days=offset))

    def test_non_positive_duration_is_rejected(self):
        with pytest.raises(ConfigError):
            FlexibleActivity(id="f1", name="Nothing", duration_minutes=0)


class TestSuggestion:
    """Tests for Suggestion model."""

    def _suggestion(self) -> Suggestion:
        return Suggestion(
            id=Suggestion.make_id("Deep Work", pendulum.date(2024, 11, 25), 0),
            activity_name="Deep Work",
            start=pendulum.parse("2024-11-25 09:00", tz=TZ),
            end=pendulum.parse("2024-11-25 10:30", tz=TZ),
            duration_minutes=90
        )

    def test_id_is_reproducible(self):
        assert self._suggestion().id == "Deep Work-2024-11-25-0"
        assert self._suggestion().id == self._suggestion().id

    def test_to_calendar_event(self):
        event = self._suggestion().to_calendar_event(TZ)

        assert event == {
            "summary": "Deep Work",
            "start": {"dateTime": "2024-11-25T09:00:00+01:00", "timeZone": TZ},
            "end": {"dateTime": "2024-11-25T10:30:00+01:00", "timeZone": TZ},
        }

    def test_suggestion_is_immutable(self):
        suggestion = self._suggestion()

        with pytest.raises(AttributeError):
            suggestion.accepted = True  # type: ignore[misc]

    def test_format_display(self):
        assert self._suggestion().format_display() == "Monday, 2024-11-25 | 09:00 - 10:30 (90 min)"
