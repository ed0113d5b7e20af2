"""
In-memory ledger of proposals for the current planning session.
"""

import logging
import threading
from dataclasses import replace
from typing import Dict, Iterable, Iterator, List

from .exceptions import DuplicateSuggestionError, SuggestionNotFoundError
from .models import Suggestion

logger = logging.getLogger(__name__)


class SuggestionLedger:
    """
    Holds suggestions keyed by id, in the order they were proposed.

    Lifecycle of a suggestion:
        Proposed -> Accepted   (accept)
        Proposed -> removed    (reject)
        Accepted -> removed    (consume, after materialization, or clear)

    Suggestions are immutable; accepting swaps in a copy with
    ``accepted=True``. A single lock guards every operation.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Suggestion] = {}
        self._lock = threading.Lock()

    def add(self, suggestions: Iterable[Suggestion]) -> None:
        """Replace the full set with the suggestions of a new planning pass."""
        entries: Dict[str, Suggestion] = {}

        for suggestion in suggestions:
            if suggestion.id in entries:
                raise DuplicateSuggestionError(f"Duplicate suggestion id: {suggestion.id}")
            entries[suggestion.id] = suggestion

        with self._lock:
            self._entries = entries

        logger.debug("Ledger loaded with %d suggestion(s)", len(entries))

    def accept(self, suggestion_id: str) -> Suggestion:
        """Mark a suggestion accepted. Accepting twice is a no-op."""
        with self._lock:
            suggestion = self._get_locked(suggestion_id)
            if not suggestion.accepted:
                suggestion = replace(suggestion, accepted=True)
                self._entries[suggestion_id] = suggestion
            return suggestion

    def reject(self, suggestion_id: str) -> None:
        """Remove a suggestion from the ledger."""
        with self._lock:
            self._get_locked(suggestion_id)
            del self._entries[suggestion_id]

    def consume(self, suggestion_id: str) -> Suggestion:
        """Remove a suggestion once it has been written to the calendar."""
        with self._lock:
            return self._entries.pop(self._get_locked(suggestion_id).id)

    def clear(self) -> None:
        with self._lock:
            self._entries = {}

    def accepted_suggestions(self) -> List[Suggestion]:
        """All accepted suggestions, in ledger order."""
        with self._lock:
            return [s for s in self._entries.values() if s.accepted]

    def get(self, suggestion_id: str) -> Suggestion:
        with self._lock:
            return self._get_locked(suggestion_id)

    def _get_locked(self, suggestion_id: str) -> Suggestion:
        try:
            return self._entries[suggestion_id]
        except KeyError:
            raise SuggestionNotFoundError(suggestion_id) from None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, suggestion_id: object) -> bool:
        with self._lock:
            return suggestion_id in self._entries

    def __iter__(self) -> Iterator[Suggestion]:
        with self._lock:
            return iter(list(self._entries.values()))
