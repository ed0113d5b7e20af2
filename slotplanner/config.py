"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import time
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .domain.exceptions import ConfigError
from .domain.models import (
    DEFAULT_GRANULARITY_MINUTES,
    FlexibleActivity,
    RecurringActivity,
    ScheduleSettings,
    TimeWindow,
)


def parse_hhmm(value: str) -> time:
    """Parse an ``HH:MM`` string into a time object."""
    try:
        hour_str, minute_str = value.strip().split(":")
        return time(hour=int(hour_str), minute=int(minute_str))
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"Expected a time in HH:MM format, got {value!r}") from exc


def _validate_weekdays(value: List[int]) -> List[int]:
    invalid_days = [day for day in value if day not in range(7)]
    if invalid_days:
        raise ValueError(f"days must be between 0 (Sunday) and 6 (Saturday), got {invalid_days}")
    # Preserve order while removing duplicates
    return list(dict.fromkeys(value))


class WindowConfig(BaseModel):
    """Daily active window."""
    start: str = "06:00"
    end: str = "22:00"

    @field_validator("start", "end")
    @classmethod
    def validate_format(cls, value: str) -> str:
        parse_hhmm(value)
        return value

    @model_validator(mode="after")
    def validate_order(self) -> "WindowConfig":
        """Ensure the configured window opens before it closes."""
        if parse_hhmm(self.end) <= parse_hhmm(self.start):
            raise ValueError("window end must be later than window start")
        return self

    def to_time_window(self) -> TimeWindow:
        return TimeWindow(start=parse_hhmm(self.start), end=parse_hhmm(self.end))


class CalendarConfig(BaseModel):
    """Calendar provider settings."""
    calendar_id: str = "primary"
    base_url: str = "https://www.googleapis.com/calendar/v3"
    reminder_minutes: Optional[int] = 10

    @field_validator("reminder_minutes")
    @classmethod
    def validate_reminder(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise ValueError("reminder_minutes cannot be negative")
        return value


class RecurringActivityConfig(BaseModel):
    """A fixed activity such as lunch or a standing meeting."""
    name: str
    start_time: str
    duration_minutes: int
    days: List[int] = Field(default_factory=list)  # empty = every day

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, value: str) -> str:
        parse_hhmm(value)
        return value

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("duration_minutes must be greater than zero")
        return value

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: List[int]) -> List[int]:
        return _validate_weekdays(value)


class FlexibleActivityConfig(BaseModel):
    """An activity to find time for."""
    name: str
    duration_minutes: int
    days: List[int] = Field(default_factory=list)  # empty = any day

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("duration_minutes must be greater than zero")
        return value

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: List[int]) -> List[int]:
        return _validate_weekdays(value)


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Berlin"
    window: WindowConfig = Field(default_factory=WindowConfig)
    horizon_days: int = 7
    granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    recurring_activities: List[RecurringActivityConfig] = Field(default_factory=list)
    flexible_activities: List[FlexibleActivityConfig] = Field(default_factory=list)

    @field_validator("horizon_days", "granularity_minutes")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value

    @field_validator("flexible_activities")
    @classmethod
    def validate_unique_names(
        cls, value: List[FlexibleActivityConfig]
    ) -> List[FlexibleActivityConfig]:
        """Suggestion ids are keyed by activity name, so names must be unique."""
        seen: set[str] = set()
        for activity in value:
            key = activity.name.lower()
            if key in seen:
                raise ValueError(f"Duplicate flexible activity name detected: {activity.name}")
            seen.add(key)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError("Config file must contain a mapping at the root level.")

        try:
            return cls(**data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration in {config_path}:\n{exc}") from exc

    def to_schedule_settings(self, horizon_days: Optional[int] = None) -> ScheduleSettings:
        """Build the immutable settings for one planning pass."""
        return ScheduleSettings(
            window=self.window.to_time_window(),
            horizon_days=horizon_days if horizon_days is not None else self.horizon_days,
            timezone=self.timezone,
            granularity_minutes=self.granularity_minutes,
        )

    def to_recurring_activities(self) -> List[RecurringActivity]:
        return [
            RecurringActivity(
                id=f"recurring-{index}",
                name=activity.name,
                start_time=parse_hhmm(activity.start_time),
                duration_minutes=activity.duration_minutes,
                days_of_week=frozenset(activity.days),
            )
            for index, activity in enumerate(self.recurring_activities, 1)
        ]

    def to_flexible_activities(self) -> List[FlexibleActivity]:
        return [
            FlexibleActivity(
                id=f"flexible-{index}",
                name=activity.name,
                duration_minutes=activity.duration_minutes,
                days_of_week=frozenset(activity.days),
            )
            for index, activity in enumerate(self.flexible_activities, 1)
        ]


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
