"""
Election coordinator.

This package contains:
- Data models (Candidate, Voter, ElectionPhase, FailureKind, OperationResult)
- CandidateRegistry, VoterRegistry and TallyStore
- ElectionCoordinator: the OPEN -> CLOSED state machine in front of them
- An HTTP application (election_coordinator.api) exposing the operations
"""

from .candidate_registry import CandidateRegistry
from .coordinator import ElectionCoordinator
from .models import (
    FAILURE_MESSAGES,
    Candidate,
    ElectionPhase,
    FailureKind,
    OperationResult,
    Turnout,
    Voter,
)
from .tally_store import TallyStore
from .voter_registry import VoterRegistry

__all__ = [
    'Candidate',
    'CandidateRegistry',
    'ElectionCoordinator',
    'ElectionPhase',
    'FAILURE_MESSAGES',
    'FailureKind',
    'OperationResult',
    'TallyStore',
    'Turnout',
    'Voter',
    'VoterRegistry',
]

__version__ = '1.0.0'
