"""
Adapters layer - External integrations (calendar provider).
"""

from .google_calendar_client import GoogleCalendarClient
from .mock_calendar_client import MockCalendarClient

__all__ = ["GoogleCalendarClient", "MockCalendarClient"]
