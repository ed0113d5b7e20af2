"""
Subtraction of busy intervals from the slot grid.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Sequence

from .models import BusyInterval, Slot

logger = logging.getLogger(__name__)


class AvailabilityFilter:
    """
    Keeps only the slots that no busy interval touches.

    Overlap is half-open: ``slot.start < busy.end and slot.end > busy.start``,
    so a meeting ending at 10:00 leaves the 10:00 slot free. Busy intervals are
    indexed by every local date they touch, which avoids comparing each slot
    against the whole horizon's intervals.
    """

    def __init__(self, timezone: str):
        self.timezone = timezone

    def filter_free(
        self,
        slots: Sequence[Slot],
        busy_intervals: Iterable[BusyInterval]
    ) -> List[Slot]:
        """
        Return the subsequence of ``slots`` overlapping no busy interval.

        Slot order is preserved.
        """
        index = self._index_by_date(busy_intervals)

        free_slots = [
            slot for slot in slots
            if not any(slot.overlaps(busy) for busy in self._candidates(slot, index))
        ]

        logger.debug("%d of %d slots are free", len(free_slots), len(slots))
        return free_slots

    def _index_by_date(
        self,
        busy_intervals: Iterable[BusyInterval]
    ) -> Dict[date, List[BusyInterval]]:
        index: Dict[date, List[BusyInterval]] = defaultdict(list)

        for busy in busy_intervals:
            for day in busy.local_dates(self.timezone):
                index[day].append(busy)

        return index

    def _candidates(
        self,
        slot: Slot,
        index: Dict[date, List[BusyInterval]]
    ) -> List[BusyInterval]:
        candidates: List[BusyInterval] = []
        for day in slot.local_dates(self.timezone):
            candidates.extend(index.get(day, []))
        return candidates
