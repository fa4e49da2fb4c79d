"""Per-fetch state machine enforcing exactly one terminal outcome."""

from enum import Enum

import structlog


logger = structlog.get_logger()


class FetchState(Enum):
    """States of a single fetch invocation.

    State transitions:
    START -> CONNECTING -> (SUCCESS | REDIRECTING | FAILURE)
    REDIRECTING -> CONNECTING
    SUCCESS and FAILURE are terminal.
    """

    START = "start"
    CONNECTING = "connecting"
    REDIRECTING = "redirecting"
    SUCCESS = "success"
    FAILURE = "failure"


# Valid state transitions (from_state -> [to_states])
_VALID_TRANSITIONS: dict[FetchState, list[FetchState]] = {
    FetchState.START: [FetchState.CONNECTING],
    FetchState.CONNECTING: [
        FetchState.SUCCESS,
        FetchState.REDIRECTING,
        FetchState.FAILURE,
    ],
    FetchState.REDIRECTING: [FetchState.CONNECTING],
    FetchState.SUCCESS: [],
    FetchState.FAILURE: [],
}


class FetchStateTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: FetchState, to_state: FetchState) -> None:
        """Initialize the error.

        Args:
            from_state: Current state.
            to_state: Attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid fetch state transition: {from_state.value} -> {to_state.value}"
        )


class FetchStateMachine:
    """State machine for one fetch invocation.

    The fetcher moves through it before every callback delivery, so a
    second terminal delivery fails loudly instead of reaching the consumer.
    """

    def __init__(self, request_id: str) -> None:
        """Initialize the state machine.

        Args:
            request_id: Request identifier for logging.
        """
        self._state = FetchState.START
        self._log = logger.bind(component="fetch", request_id=request_id)

    @property
    def state(self) -> FetchState:
        """Get the current state."""
        return self._state

    def is_terminal(self) -> bool:
        """Check if in a terminal state (SUCCESS or FAILURE)."""
        return self._state in (FetchState.SUCCESS, FetchState.FAILURE)

    def can_transition(self, to_state: FetchState) -> bool:
        """Check if a transition to the given state is valid.

        Args:
            to_state: Target state.

        Returns:
            True if transition is valid.
        """
        return to_state in _VALID_TRANSITIONS.get(self._state, [])

    def transition(self, to_state: FetchState, **context: object) -> None:
        """Transition to a new state.

        Args:
            to_state: Target state.
            **context: Extra fields for the transition log event.

        Raises:
            FetchStateTransitionError: If transition is invalid.
        """
        if not self.can_transition(to_state):
            raise FetchStateTransitionError(self._state, to_state)

        old_state = self._state
        self._state = to_state

        self._log.debug(
            "fetch_state_transition",
            from_state=old_state.value,
            to_state=to_state.value,
            **context,
        )
