"""
Election coordinator.

Owns the OPEN -> CLOSED state machine and is the only entry point for
mutating the candidate registry, the voter registry and the tally.

Every mutating operation checks the phase and performs its mutation
while holding the coordinator lock, so a concurrent ``end_election``
either happens entirely before a vote (the vote is rejected with
ELECTION_CLOSED) or entirely after it (the vote is counted).

Vote ordering inside ``cast_vote``:
1. Candidate must exist (a failed lookup never consumes the vote)
2. Voter is marked as voted (at most one success per voter)
3. Only then is the tally incremented
"""

import logging
import threading
from datetime import datetime
from typing import Mapping, Optional, Tuple

from prometheus_client import Counter

from .candidate_registry import CandidateRegistry
from .models import (
    Candidate,
    ElectionPhase,
    FailureKind,
    OperationResult,
    Turnout,
    Voter,
    utcnow,
)
from .tally_store import TallyStore
from .voter_registry import VoterRegistry

logger = logging.getLogger(__name__)

# Prometheus metrics
votes_cast_total = Counter(
    "election_votes_cast_total",
    "Total number of accepted votes",
    ["candidate_id"]
)

operation_rejections_total = Counter(
    "election_operation_rejections_total",
    "Total number of rejected coordinator operations",
    ["operation", "reason"]
)


class ElectionCoordinator:
    """Single election: registries, tally and phase behind one guard."""

    def __init__(self):
        self._candidates = CandidateRegistry()
        self._voters = VoterRegistry()
        self._tally = TallyStore()
        self._phase = ElectionPhase.OPEN
        self._closed_at: Optional[datetime] = None
        self._lock = threading.RLock()

        logger.info("Election coordinator initialized (phase=open)")

    @property
    def phase(self) -> ElectionPhase:
        return self._phase

    @property
    def closed_at(self) -> Optional[datetime]:
        return self._closed_at

    def _rejected(self, operation: str, result: OperationResult) -> OperationResult:
        operation_rejections_total.labels(operation=operation, reason=result.code).inc()
        logger.warning(f"{operation} rejected: {result.code} ({result.message})")
        return result

    def _closed(self, operation: str) -> OperationResult:
        return self._rejected(operation, OperationResult.reject(FailureKind.ELECTION_CLOSED))

    def add_candidate(self, candidate_id: str, name: str) -> OperationResult[Candidate]:
        """
        Add a candidate while the election is open.

        Failure kinds: INVALID_INPUT, DUPLICATE_CANDIDATE, ELECTION_CLOSED.
        """
        with self._lock:
            if self._phase is not ElectionPhase.OPEN:
                return self._closed("add_candidate")

            result = self._candidates.add(candidate_id, name)
            if not result.ok:
                return self._rejected("add_candidate", result)

            self._tally.track(candidate_id)

        logger.info(f"Candidate added: id={candidate_id}, name={name}")
        return result

    def register_voter(self, voter_id: str) -> OperationResult[Voter]:
        """
        Register a voter while the election is open.

        Failure kinds: INVALID_INPUT, DUPLICATE_VOTER, ELECTION_CLOSED.
        """
        with self._lock:
            if self._phase is not ElectionPhase.OPEN:
                return self._closed("register_voter")

            result = self._voters.register(voter_id)

        if not result.ok:
            return self._rejected("register_voter", result)

        logger.info(f"Voter registered: id={voter_id}")
        return result

    def cast_vote(self, voter_id: str, candidate_id: str) -> OperationResult[None]:
        """
        Cast one vote for a candidate.

        Failure kinds: UNKNOWN_CANDIDATE, UNKNOWN_VOTER, ALREADY_VOTED,
        ELECTION_CLOSED.
        """
        with self._lock:
            if self._phase is not ElectionPhase.OPEN:
                return self._closed("cast_vote")

            if not self._candidates.exists(candidate_id):
                return self._rejected(
                    "cast_vote",
                    OperationResult.reject(
                        FailureKind.UNKNOWN_CANDIDATE, candidate_id=candidate_id
                    ),
                )

            marked = self._voters.mark_voted(voter_id)
            if not marked.ok:
                return self._rejected("cast_vote", marked)

            counted = self._tally.increment(candidate_id)
            if not counted.ok:
                # Registry and tally disagree about a candidate: not recoverable.
                raise RuntimeError(
                    f"Tally has no counter for registered candidate {candidate_id}"
                )

        votes_cast_total.labels(candidate_id=candidate_id).inc()
        logger.info(f"Vote cast: voter={voter_id}, candidate={candidate_id}")
        return OperationResult.success(message="Vote cast successfully")

    def get_results(self) -> Mapping[str, int]:
        """Immutable mapping of candidate id to vote count, in any phase."""
        return self._tally.snapshot()

    def list_candidates(self) -> Tuple[Candidate, ...]:
        """All candidates in insertion order, in any phase."""
        return self._candidates.list()

    def get_turnout(self) -> Turnout:
        """Participation summary read under the coordinator lock."""
        with self._lock:
            return Turnout(
                registered_voters=self._voters.count(),
                voters_who_voted=self._voters.voted_count(),
                total_votes=self._tally.total(),
                phase=self._phase,
            )

    def get_voter(self, voter_id: str) -> Optional[Voter]:
        return self._voters.get(voter_id)

    def end_election(self) -> OperationResult[None]:
        """
        Close the election. CLOSED is terminal.

        A second call fails with ALREADY_CLOSED so callers can tell whether
        they performed the transition.
        """
        with self._lock:
            if self._phase is ElectionPhase.CLOSED:
                return self._rejected(
                    "end_election", OperationResult.reject(FailureKind.ALREADY_CLOSED)
                )
            self._phase = ElectionPhase.CLOSED
            self._closed_at = utcnow()

        logger.info(f"Election closed at {self._closed_at.isoformat()}")
        return OperationResult.success(message="Voting has ended")
