"""
Application service for planning passes and writing accepted suggestions back.

The service coordinates fetching busy events via a calendar client adapter
and delegates the availability and matching work to the domain-level
``ActivityPlanner``. The calendar dependency sits behind a small protocol so
the Google client, the mock client or a test stub can be plugged in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple

from pendulum import DateTime

from ..domain.exceptions import CalendarAPIError
from ..domain.ledger import SuggestionLedger
from ..domain.models import FlexibleActivity, PlanningResult, RecurringActivity, Suggestion
from ..domain.planner import ActivityPlanner

logger = logging.getLogger(__name__)


class CalendarClientProtocol(Protocol):
    """Protocol describing the calendar client behaviour needed by the service."""

    async def fetch_events(
        self,
        time_min: DateTime,
        time_max: DateTime,
        timezone: str,
    ) -> List[Dict[str, Any]]:
        """Return raw provider events overlapping the given range."""

    async def create_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
        """Create an event and return the provider's resource."""


@dataclass
class MaterializationReport:
    """Outcome of writing accepted suggestions to the calendar."""
    created: List[Tuple[Suggestion, Dict[str, Any]]] = field(default_factory=list)
    failed: List[Tuple[Suggestion, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class PlanningService:
    """
    Orchestrates busy-event retrieval, planning and materialization.

    The service owns the ledger for one planning session; each new pass
    replaces its contents.
    """

    def __init__(
        self,
        calendar_client: CalendarClientProtocol,
        planner: ActivityPlanner,
        ledger: Optional[SuggestionLedger] = None,
    ) -> None:
        self._calendar_client = calendar_client
        self._planner = planner
        self.ledger = ledger if ledger is not None else SuggestionLedger()

    @property
    def timezone(self) -> str:
        return self._planner.settings.timezone

    async def plan(
        self,
        *,
        recurring_activities: Sequence[RecurringActivity],
        flexible_activities: Sequence[FlexibleActivity],
        start_date: Optional[DateTime] = None,
    ) -> PlanningResult:
        """
        Fetch busy events for the horizon, run a planning pass and load the ledger.
        """
        events = await self.fetch_busy_events(start_date=start_date)

        return self.run_planning_pass(
            recurring_activities=recurring_activities,
            flexible_activities=flexible_activities,
            calendar_events=events,
            start_date=start_date,
        )

    async def fetch_busy_events(
        self,
        *,
        start_date: Optional[DateTime] = None,
    ) -> List[Dict[str, Any]]:
        """Fetch provider events covering the whole horizon."""
        bounds = self._planner.window_generator.horizon_bounds(start_date)

        return await self._calendar_client.fetch_events(
            time_min=bounds.start,
            time_max=bounds.end,
            timezone=self.timezone,
        )

    def run_planning_pass(
        self,
        *,
        recurring_activities: Sequence[RecurringActivity],
        flexible_activities: Sequence[FlexibleActivity],
        calendar_events: Iterable[Mapping[str, Any]],
        start_date: Optional[DateTime] = None,
    ) -> PlanningResult:
        """Compute suggestions from already-fetched events and load the ledger."""
        result = self._planner.plan(
            recurring_activities,
            flexible_activities,
            calendar_events,
            start_date=start_date,
        )
        self.ledger.add(result.suggestions)
        return result

    async def materialize_accepted(self) -> MaterializationReport:
        """
        Create a calendar event for every accepted suggestion.

        A failure on one event is recorded and the rest are still attempted.
        Created suggestions are consumed from the ledger; failed ones stay
        accepted so the caller can try again.
        """
        report = MaterializationReport()

        for suggestion in self.ledger.accepted_suggestions():
            payload = suggestion.to_calendar_event(self.timezone)

            try:
                created = await self._calendar_client.create_event(payload)
            except CalendarAPIError as e:
                logger.warning("Could not create event for %s: %s", suggestion.id, e)
                report.failed.append((suggestion, str(e)))
                continue

            self.ledger.consume(suggestion.id)
            report.created.append((suggestion, created))

        return report
