"""
Google Calendar API client for fetching busy events and creating new ones.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from pendulum import DateTime

from ..domain.exceptions import CalendarAPIError

logger = logging.getLogger(__name__)


class GoogleCalendarClient:
    """
    Client for Google Calendar API event operations.

    Uses ``events.list`` to read existing commitments and ``events.insert``
    to materialize accepted suggestions. The access token is obtained
    elsewhere; this client never performs a sign-in flow.
    """

    API_ENDPOINT = "https://www.googleapis.com/calendar/v3"
    REQUEST_TIMEOUT = 30

    def __init__(
        self,
        access_token: str,
        calendar_id: str = "primary",
        base_url: str | None = None,
        reminder_minutes: Optional[int] = 10
    ):
        """
        Initialize the calendar client.

        Args:
            access_token: Valid OAuth bearer token with calendar scope
            calendar_id: Calendar to read from and write to
            base_url: Override for the API endpoint
            reminder_minutes: Popup reminder for created events; None keeps provider defaults
        """
        self.access_token = access_token
        self.calendar_id = calendar_id
        self.base_url = (base_url or self.API_ENDPOINT).rstrip("/")
        self.reminder_minutes = reminder_minutes
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json"
        }

    @property
    def events_url(self) -> str:
        return f"{self.base_url}/calendars/{quote(self.calendar_id, safe='')}/events"

    async def fetch_events(
        self,
        time_min: DateTime,
        time_max: DateTime,
        timezone: str
    ) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self.list_events, time_min, time_max, timezone)

    async def create_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
        return await asyncio.to_thread(self.insert_event, event)

    def list_events(
        self,
        time_min: DateTime,
        time_max: DateTime,
        timezone: str = "UTC"
    ) -> List[Dict[str, Any]]:
        """
        List events between two instants, following pagination.

        Args:
            time_min: Lower bound (exclusive) for an event's end time
            time_max: Upper bound (exclusive) for an event's start time
            timezone: IANA timezone used in the response

        Returns:
            Raw event resources as returned by the API

        Raises:
            CalendarAPIError: If the API call fails
        """
        params: Dict[str, Any] = {
            "timeMin": time_min.to_iso8601_string(),
            "timeMax": time_max.to_iso8601_string(),
            "timeZone": timezone,
            "singleEvents": "true",
            "orderBy": "startTime",
            "showDeleted": "false",
        }

        events: List[Dict[str, Any]] = []

        while True:
            data = self._request("GET", self.events_url, params=params)
            events.extend(data.get("items", []))

            page_token = data.get("nextPageToken")
            if not page_token:
                break
            params["pageToken"] = page_token

        logger.debug("Fetched %d event(s) from calendar %s", len(events), self.calendar_id)
        return events

    def insert_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create an event in the calendar.

        Reminder defaults are added here rather than in the domain payload.

        Raises:
            CalendarAPIError: If the API call fails
        """
        payload = dict(event)

        if self.reminder_minutes is not None and "reminders" not in payload:
            payload["reminders"] = {
                "useDefault": False,
                "overrides": [{"method": "popup", "minutes": self.reminder_minutes}]
            }

        return self._request("POST", self.events_url, json=payload)

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = requests.request(
                method,
                url,
                headers=self.headers,
                timeout=self.REQUEST_TIMEOUT,
                **kwargs
            )
            response.raise_for_status()
            return response.json()

        except requests.exceptions.RequestException as e:
            raise CalendarAPIError(f"Calendar API request failed ({method} {url}): {e}") from e

        except ValueError as e:
            raise CalendarAPIError(f"Calendar API returned invalid JSON: {e}") from e
