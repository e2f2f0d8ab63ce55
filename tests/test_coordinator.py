"""Tests for the ElectionCoordinator state machine.

Covers the voting scenarios end to end against the coordinator API,
the closed-election rejections and the tally/voter sum invariant.
"""

import pytest

from election_coordinator import ElectionCoordinator, ElectionPhase, FailureKind


def assert_sum_invariant(coordinator: ElectionCoordinator):
    """Total tally must equal the number of voters who voted."""
    turnout = coordinator.get_turnout()
    assert sum(coordinator.get_results().values()) == turnout.voters_who_voted
    assert turnout.total_votes == turnout.voters_who_voted


class TestVotingScenarios:
    """Scenario tests for add / register / vote / results."""

    def test_single_vote_counted(self, coordinator):
        """Test: two candidates, one voter, one vote.

        Flow:
        1. Add c1 (Alice) and c2 (Bob)
        2. Register v1 and vote for c1
        3. Results show c1=1, c2=0
        """
        coordinator.add_candidate("c1", "Alice")
        coordinator.add_candidate("c2", "Bob")
        coordinator.register_voter("v1")

        result = coordinator.cast_vote("v1", "c1")

        assert result.ok
        assert result.message == "Vote cast successfully"
        assert dict(coordinator.get_results()) == {"c1": 1, "c2": 0}
        assert_sum_invariant(coordinator)

    def test_unknown_candidate_does_not_consume_vote(self, coordinator):
        """Test: voting for a never-added candidate leaves the voter free to vote."""
        coordinator.register_voter("v1")

        result = coordinator.cast_vote("v1", "c9")

        assert result.failure is FailureKind.UNKNOWN_CANDIDATE
        assert dict(coordinator.get_results()) == {}
        assert coordinator.get_voter("v1").has_voted is False

        coordinator.add_candidate("c9", "Late Entry")
        assert coordinator.cast_vote("v1", "c9").ok

    def test_second_vote_rejected(self, coordinator):
        """Test: the same voter voting twice is counted once."""
        coordinator.add_candidate("c1", "Alice")
        coordinator.register_voter("v1")

        first = coordinator.cast_vote("v1", "c1")
        second = coordinator.cast_vote("v1", "c1")

        assert first.ok
        assert second.failure is FailureKind.ALREADY_VOTED
        assert coordinator.get_results()["c1"] == 1
        assert_sum_invariant(coordinator)

    def test_second_vote_for_other_candidate_rejected(self, seeded_coordinator):
        seeded_coordinator.cast_vote("v1", "c1")

        result = seeded_coordinator.cast_vote("v1", "c2")

        assert result.failure is FailureKind.ALREADY_VOTED
        assert dict(seeded_coordinator.get_results()) == {"c1": 1, "c2": 0}

    def test_unregistered_voter_rejected(self, seeded_coordinator):
        result = seeded_coordinator.cast_vote("stranger", "c1")

        assert result.failure is FailureKind.UNKNOWN_VOTER
        assert result.details == {"voter_id": "stranger"}
        assert seeded_coordinator.get_results()["c1"] == 0

    def test_candidate_checked_before_voter(self, coordinator):
        """Unknown candidate wins over unknown voter."""
        result = coordinator.cast_vote("stranger", "c9")

        assert result.failure is FailureKind.UNKNOWN_CANDIDATE

    def test_candidate_added_after_votes_starts_at_zero(self, seeded_coordinator):
        seeded_coordinator.cast_vote("v1", "c1")
        seeded_coordinator.add_candidate("c3", "Carol")

        assert dict(seeded_coordinator.get_results()) == {"c1": 1, "c2": 0, "c3": 0}

    def test_registration_failures_propagate(self, seeded_coordinator):
        assert seeded_coordinator.add_candidate("c1", "Again").failure is FailureKind.DUPLICATE_CANDIDATE
        assert seeded_coordinator.add_candidate("", "Nobody").failure is FailureKind.INVALID_INPUT
        assert seeded_coordinator.register_voter("v1").failure is FailureKind.DUPLICATE_VOTER
        assert seeded_coordinator.register_voter("").failure is FailureKind.INVALID_INPUT

    def test_list_candidates(self, seeded_coordinator):
        candidates = seeded_coordinator.list_candidates()

        assert [(c.id, c.name) for c in candidates] == [("c1", "Alice"), ("c2", "Bob")]

    def test_turnout(self, seeded_coordinator):
        seeded_coordinator.cast_vote("v1", "c1")
        seeded_coordinator.cast_vote("v2", "c2")

        turnout = seeded_coordinator.get_turnout()

        assert turnout.registered_voters == 3
        assert turnout.voters_who_voted == 2
        assert turnout.total_votes == 2
        assert turnout.phase is ElectionPhase.OPEN


class TestEndElection:
    """Tests for the OPEN -> CLOSED transition."""

    def test_initial_phase_is_open(self, coordinator):
        assert coordinator.phase is ElectionPhase.OPEN
        assert coordinator.closed_at is None

    def test_end_twice(self, coordinator):
        """Test: end succeeds once, then ALREADY_CLOSED; phase stays CLOSED."""
        first = coordinator.end_election()
        assert first.ok
        assert coordinator.phase is ElectionPhase.CLOSED
        closed_at = coordinator.closed_at

        second = coordinator.end_election()
        assert second.failure is FailureKind.ALREADY_CLOSED
        assert second.message == "Voting has already ended"
        assert coordinator.phase is ElectionPhase.CLOSED
        assert coordinator.closed_at == closed_at

    def test_vote_after_close_rejected(self, seeded_coordinator):
        seeded_coordinator.end_election()

        result = seeded_coordinator.cast_vote("v1", "c1")

        assert result.failure is FailureKind.ELECTION_CLOSED
        assert result.message == "Voting is no longer active"
        assert seeded_coordinator.get_voter("v1").has_voted is False

    @pytest.mark.parametrize("operation,args", [
        ("cast_vote", ("v1", "c1")),
        ("add_candidate", ("c3", "Carol")),
        ("register_voter", ("v9",)),
    ])
    def test_mutations_rejected_after_close(self, seeded_coordinator, operation, args):
        seeded_coordinator.end_election()
        results_before = dict(seeded_coordinator.get_results())

        result = getattr(seeded_coordinator, operation)(*args)

        assert result.failure is FailureKind.ELECTION_CLOSED
        assert dict(seeded_coordinator.get_results()) == results_before
        assert seeded_coordinator.get_turnout().registered_voters == 3

    def test_closed_check_precedes_input_validation(self, coordinator):
        coordinator.end_election()

        assert coordinator.add_candidate("", "").failure is FailureKind.ELECTION_CLOSED
        assert coordinator.cast_vote("ghost", "c9").failure is FailureKind.ELECTION_CLOSED

    def test_reads_still_work_after_close(self, seeded_coordinator):
        seeded_coordinator.cast_vote("v1", "c2")
        seeded_coordinator.end_election()

        assert dict(seeded_coordinator.get_results()) == {"c1": 0, "c2": 1}
        assert len(seeded_coordinator.list_candidates()) == 2
        assert seeded_coordinator.get_turnout().phase is ElectionPhase.CLOSED
        assert_sum_invariant(seeded_coordinator)


class TestFailureCodes:
    """Every failure kind carries a distinct, stable code and message."""

    def test_codes_are_distinct(self):
        assert len({kind.value for kind in FailureKind}) == len(FailureKind)

    def test_success_code(self, coordinator):
        assert coordinator.end_election().code == "ok"

    def test_failure_code_matches_kind(self, coordinator):
        result = coordinator.cast_vote("v1", "c1")

        assert result.code == "unknown_candidate"
        assert result.message == "Candidate does not exist"
