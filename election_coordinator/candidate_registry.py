"""Candidate registry for the election coordinator."""

import logging
import threading
from typing import Dict, Optional, Tuple

from .models import Candidate, FailureKind, OperationResult, is_blank

logger = logging.getLogger(__name__)


class CandidateRegistry:
    """Insertion-ordered set of eligible candidates."""

    def __init__(self):
        self._candidates: Dict[str, Candidate] = {}
        self._lock = threading.Lock()

    def add(self, candidate_id: str, name: str) -> OperationResult[Candidate]:
        """
        Register a new candidate.

        Args:
            candidate_id: Unique candidate identifier
            name: Candidate display name

        Returns:
            OperationResult carrying the created Candidate, or a
            DUPLICATE_CANDIDATE / INVALID_INPUT rejection
        """
        if is_blank(candidate_id):
            return OperationResult.reject(
                FailureKind.INVALID_INPUT, "Candidate ID is required", field="id"
            )
        if is_blank(name):
            return OperationResult.reject(
                FailureKind.INVALID_INPUT, "Candidate name is required", field="name"
            )

        with self._lock:
            if candidate_id in self._candidates:
                return OperationResult.reject(
                    FailureKind.DUPLICATE_CANDIDATE, candidate_id=candidate_id
                )
            candidate = Candidate(id=candidate_id, name=name)
            self._candidates[candidate_id] = candidate

        logger.debug(f"Candidate {candidate_id} added")
        return OperationResult.success(candidate)

    def list(self) -> Tuple[Candidate, ...]:
        """Return all candidates in insertion order."""
        with self._lock:
            return tuple(self._candidates.values())

    def exists(self, candidate_id: str) -> bool:
        with self._lock:
            return candidate_id in self._candidates

    def get(self, candidate_id: str) -> Optional[Candidate]:
        with self._lock:
            return self._candidates.get(candidate_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._candidates)
