"""
Mock calendar client for running the planner without a provider account.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from pendulum import DateTime

from ..domain.exceptions import CalendarAPIError

logger = logging.getLogger(__name__)


DEFAULT_DATA_FILE = Path(__file__).parent / "mock_calendar_data.json"


class MockCalendarClient:
    """
    Mock client that simulates the calendar provider.

    Events are loaded from a JSON file in the provider's event format and
    returned unfiltered; events outside the horizon never overlap a slot, so
    the planner ignores them. Created events are kept in memory.
    """

    def __init__(self, data_file: Path | None = None, events: List[Dict[str, Any]] | None = None):
        """
        Initialize the mock client.

        Args:
            data_file: JSON file holding a list of events (defaults to bundled sample data)
            events: Events to serve directly; takes precedence over ``data_file``
        """
        self.created_events: List[Dict[str, Any]] = []

        if events is not None:
            self.calendar_events = list(events)
        else:
            self.calendar_events = self._load_calendar_data(data_file or DEFAULT_DATA_FILE)

    @staticmethod
    def _load_calendar_data(data_file: Path) -> List[Dict[str, Any]]:
        """Load mock calendar data from JSON file."""
        if not data_file.exists():
            logger.warning("Mock calendar data %s not found, serving no events", data_file)
            return []

        try:
            with open(data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise CalendarAPIError(f"Invalid mock calendar data in {data_file}: {exc}") from exc

        # Accept either a bare list or an events.list style {"items": [...]}
        if isinstance(data, dict):
            data = data.get("items", [])

        if not isinstance(data, list):
            raise CalendarAPIError(
                f"Mock calendar data in {data_file} must be a list of events, "
                f"got {type(data).__name__}"
            )

        return data

    async def fetch_events(
        self,
        time_min: DateTime,
        time_max: DateTime,
        timezone: str
    ) -> List[Dict[str, Any]]:
        return list(self.calendar_events)

    async def create_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
        created = dict(event)
        created["id"] = f"mock-{len(self.created_events) + 1}"
        created["status"] = "confirmed"
        self.created_events.append(created)
        return created
