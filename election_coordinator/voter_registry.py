"""Voter registry for the election coordinator."""

import logging
import threading
from dataclasses import replace
from typing import Dict, Optional

from .models import FailureKind, OperationResult, Voter, is_blank, utcnow

logger = logging.getLogger(__name__)


class VoterRegistry:
    """Registered voters and whether each has voted."""

    def __init__(self):
        self._voters: Dict[str, Voter] = {}
        self._voted = 0
        self._lock = threading.Lock()

    def register(self, voter_id: str) -> OperationResult[Voter]:
        """
        Register a voter with has_voted = False.

        Args:
            voter_id: Opaque voter token

        Returns:
            OperationResult carrying a copy of the Voter record, or a
            DUPLICATE_VOTER / INVALID_INPUT rejection
        """
        if is_blank(voter_id):
            return OperationResult.reject(
                FailureKind.INVALID_INPUT, "Voter ID is required", field="id"
            )

        with self._lock:
            if voter_id in self._voters:
                return OperationResult.reject(FailureKind.DUPLICATE_VOTER, voter_id=voter_id)
            voter = Voter(id=voter_id)
            self._voters[voter_id] = voter

        logger.debug(f"Voter {voter_id} registered")
        return OperationResult.success(replace(voter))

    def mark_voted(self, voter_id: str) -> OperationResult[Voter]:
        """
        Flip a voter's has_voted flag from False to True.

        The lookup, the check and the write happen inside one critical
        section, so concurrent calls for the same voter produce exactly one
        success.

        Args:
            voter_id: Opaque voter token

        Returns:
            OperationResult carrying a copy of the updated Voter, or an
            UNKNOWN_VOTER / ALREADY_VOTED rejection
        """
        with self._lock:
            voter = self._voters.get(voter_id)
            if voter is None:
                return OperationResult.reject(FailureKind.UNKNOWN_VOTER, voter_id=voter_id)
            if voter.has_voted:
                return OperationResult.reject(FailureKind.ALREADY_VOTED, voter_id=voter_id)
            voter.has_voted = True
            voter.voted_at = utcnow()
            self._voted += 1
            return OperationResult.success(replace(voter))

    def get(self, voter_id: str) -> Optional[Voter]:
        """Return a copy of the voter record, or None if not registered."""
        with self._lock:
            voter = self._voters.get(voter_id)
            return replace(voter) if voter else None

    def count(self) -> int:
        with self._lock:
            return len(self._voters)

    def voted_count(self) -> int:
        """Number of voters whose has_voted flag is set."""
        with self._lock:
            return self._voted
