"""
Shared data models for the election coordinator.

This module contains:
- Candidate / Voter: registry records
- ElectionPhase: OPEN/CLOSED state of an election
- FailureKind: typed rejection reasons returned by every operation
- OperationResult: success-or-failure value returned to callers
"""

from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class ElectionPhase(str, Enum):
    """Phase of an election."""
    OPEN = "open"
    CLOSED = "closed"


class FailureKind(str, Enum):
    """Expected rejection reasons, one stable code per kind."""
    INVALID_INPUT = "invalid_input"
    DUPLICATE_CANDIDATE = "duplicate_candidate"
    DUPLICATE_VOTER = "duplicate_voter"
    UNKNOWN_CANDIDATE = "unknown_candidate"
    UNKNOWN_VOTER = "unknown_voter"
    ALREADY_VOTED = "already_voted"
    ALREADY_CLOSED = "already_closed"
    ELECTION_CLOSED = "election_closed"


FAILURE_MESSAGES = {
    FailureKind.INVALID_INPUT: "Invalid input",
    FailureKind.DUPLICATE_CANDIDATE: "Candidate already exists",
    FailureKind.DUPLICATE_VOTER: "Voter already registered",
    FailureKind.UNKNOWN_CANDIDATE: "Candidate does not exist",
    FailureKind.UNKNOWN_VOTER: "Voter not registered",
    FailureKind.ALREADY_VOTED: "Voter has already cast a vote",
    FailureKind.ALREADY_CLOSED: "Voting has already ended",
    FailureKind.ELECTION_CLOSED: "Voting is no longer active",
}


@dataclass(frozen=True)
class Candidate:
    """
    A candidate standing in the election.

    Attributes:
        id: Unique, immutable candidate identifier
        name: Display name
    """
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass
class Voter:
    """
    A registered voter.

    Attributes:
        id: Opaque, pre-validated voter token
        has_voted: Flips from False to True exactly once
        voted_at: UTC time the vote was accepted
    """
    id: str
    has_voted: bool = False
    voted_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "has_voted": self.has_voted,
            "voted_at": self.voted_at.isoformat() if self.voted_at else None,
        }


@dataclass(frozen=True)
class Turnout:
    """Read-only participation summary."""
    registered_voters: int
    voters_who_voted: int
    total_votes: int
    phase: ElectionPhase

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["phase"] = self.phase.value
        return data


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """
    Outcome of a coordinator operation.

    Exactly one of ``value`` (on success) or ``failure`` (on rejection) is
    meaningful. Expected rejections are returned here instead of raised.
    """
    ok: bool
    value: Optional[T] = None
    failure: Optional[FailureKind] = None
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, value: Optional[T] = None, message: str = "") -> "OperationResult[T]":
        return cls(ok=True, value=value, message=message)

    @classmethod
    def reject(
        cls,
        kind: FailureKind,
        message: Optional[str] = None,
        **details: Any
    ) -> "OperationResult[T]":
        return cls(
            ok=False,
            failure=kind,
            message=message or FAILURE_MESSAGES[kind],
            details=details,
        )

    @property
    def code(self) -> str:
        """Stable reason code (``"ok"`` on success)."""
        return self.failure.value if self.failure else "ok"


def is_blank(value: Optional[str]) -> bool:
    """True for None, empty and whitespace-only strings."""
    return value is None or not value.strip()


def utcnow() -> datetime:
    """Current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)
