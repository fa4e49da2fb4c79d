"""Unit tests for the per-fetch state machine."""

import pytest

from netfetch.fetch.state_machine import (
    FetchState,
    FetchStateMachine,
    FetchStateTransitionError,
)


class TestFetchState:
    """Tests for FetchState enum."""

    def test_all_states_defined(self) -> None:
        """All expected states are defined."""
        expected_states = ["START", "CONNECTING", "REDIRECTING", "SUCCESS", "FAILURE"]
        actual_states = [s.name for s in FetchState]
        assert sorted(actual_states) == sorted(expected_states)


class TestFetchStateMachine:
    """Tests for FetchStateMachine."""

    def test_initial_state_is_start(self) -> None:
        """State machine starts in START state."""
        sm = FetchStateMachine("req-1")
        assert sm.state == FetchState.START
        assert not sm.is_terminal()

    def test_single_hop_success(self) -> None:
        """START -> CONNECTING -> SUCCESS."""
        sm = FetchStateMachine("req-1")

        sm.transition(FetchState.CONNECTING)
        sm.transition(FetchState.SUCCESS)

        assert sm.state == FetchState.SUCCESS
        assert sm.is_terminal()

    def test_redirect_cycle(self) -> None:
        """REDIRECTING always leads back to CONNECTING."""
        sm = FetchStateMachine("req-1")

        sm.transition(FetchState.CONNECTING)
        sm.transition(FetchState.REDIRECTING, target="https://localhost/")
        sm.transition(FetchState.CONNECTING)
        sm.transition(FetchState.FAILURE, error_class="REDIRECT_LOOP")

        assert sm.state == FetchState.FAILURE
        assert sm.is_terminal()

    @pytest.mark.parametrize(
        ("path", "invalid"),
        [
            ([], FetchState.SUCCESS),
            ([], FetchState.REDIRECTING),
            ([FetchState.CONNECTING], FetchState.CONNECTING),
            ([FetchState.CONNECTING, FetchState.REDIRECTING], FetchState.SUCCESS),
            ([FetchState.CONNECTING, FetchState.REDIRECTING], FetchState.FAILURE),
        ],
    )
    def test_invalid_transitions(
        self, path: list[FetchState], invalid: FetchState
    ) -> None:
        """Transitions outside the graph raise."""
        sm = FetchStateMachine("req-1")
        for state in path:
            sm.transition(state)

        assert sm.can_transition(invalid) is False
        with pytest.raises(FetchStateTransitionError):
            sm.transition(invalid)

    @pytest.mark.parametrize("terminal", [FetchState.SUCCESS, FetchState.FAILURE])
    def test_terminal_states_reject_everything(self, terminal: FetchState) -> None:
        """No second outcome can follow a terminal state."""
        sm = FetchStateMachine("req-1")
        sm.transition(FetchState.CONNECTING)
        sm.transition(terminal)

        for state in FetchState:
            assert sm.can_transition(state) is False

        with pytest.raises(FetchStateTransitionError) as exc_info:
            sm.transition(FetchState.FAILURE)

        assert exc_info.value.from_state == terminal
        assert exc_info.value.to_state == FetchState.FAILURE
        assert terminal.value in str(exc_info.value)
