"""Per-candidate vote counters."""

import logging
import threading
from types import MappingProxyType
from typing import Dict, Mapping

from .models import FailureKind, OperationResult

logger = logging.getLogger(__name__)


class TallyStore:
    """
    Running vote count per candidate id.

    Every counter is mutated and copied under one short-lived lock, so
    increments are never lost and a snapshot never shows a half-applied
    update.
    """

    def __init__(self):
        self._counts: Dict[str, int] = {}
        self._lock = threading.Lock()

    def track(self, candidate_id: str) -> None:
        """Start counting for a candidate at 0. No-op if already tracked."""
        with self._lock:
            self._counts.setdefault(candidate_id, 0)

    def increment(self, candidate_id: str) -> OperationResult[int]:
        """
        Add one vote for a candidate.

        Args:
            candidate_id: Candidate identifier

        Returns:
            OperationResult carrying the new count, or UNKNOWN_CANDIDATE if
            the candidate was never tracked
        """
        with self._lock:
            if candidate_id not in self._counts:
                return OperationResult.reject(
                    FailureKind.UNKNOWN_CANDIDATE, candidate_id=candidate_id
                )
            self._counts[candidate_id] += 1
            count = self._counts[candidate_id]

        logger.debug(f"Tally for {candidate_id}: {count}")
        return OperationResult.success(count)

    def snapshot(self) -> Mapping[str, int]:
        """Return an immutable point-in-time copy of all counts."""
        with self._lock:
            return MappingProxyType(dict(self._counts))

    def total(self) -> int:
        with self._lock:
            return sum(self._counts.values())
