"""LifecycleStateMachine class with trigger, history, and valid_events."""

from __future__ import annotations

from enum import StrEnum

from partners.domain.errors import InvalidTransitionError
from partners.state_machine.transitions import Lifecycle


class LifecycleStateMachine:
    """Finite state machine governing one entity's status lifecycle.

    Tracks the current status, validates transitions against the entity's
    transition table, and records the history of applied events.  Services
    build one from the persisted status, trigger the requested event, and
    write the resulting status back.

    Usage::

        sm = LifecycleStateMachine(SUBMISSION_LIFECYCLE, SubmissionStatus.PENDING)
        sm.trigger("approve")   # -> APPROVED (terminal)
        sm.trigger("reject")    # raises InvalidTransitionError
    """

    def __init__(self, lifecycle: Lifecycle, initial_state: StrEnum) -> None:
        self._lifecycle = lifecycle
        self._state: StrEnum = initial_state
        self._history: list[tuple[StrEnum, str, StrEnum]] = []

    @classmethod
    def from_snapshot(
        cls,
        lifecycle: Lifecycle,
        state: StrEnum,
        history: list[tuple[StrEnum, str, StrEnum]],
    ) -> LifecycleStateMachine:
        """Reconstruct a state machine at *state* with a recorded *history*.

        Args:
            lifecycle: The entity's transition table.
            state: The status to restore.
            history: Prior ``(from, event, to)`` tuples in chronological order.

        Returns:
            A machine positioned at *state* without replaying events.
        """
        instance = cls(lifecycle, initial_state=state)
        instance._history = list(history)
        return instance

    @property
    def entity(self) -> str:
        """Return the entity name of the governed lifecycle."""
        return self._lifecycle.entity

    @property
    def state(self) -> StrEnum:
        """Return the current status."""
        return self._state

    @property
    def is_terminal(self) -> bool:
        """Return True if the current status admits no further events."""
        return self._state in self._lifecycle.terminal_states

    @property
    def history(self) -> list[tuple[StrEnum, str, StrEnum]]:
        """Return a copy of the ``(from_state, event, to_state)`` history."""
        return list(self._history)

    def can_trigger(self, event: str) -> bool:
        """Return True if *event* is valid from the current status."""
        if self.is_terminal:
            return False
        return (self._state, event) in self._lifecycle.transitions

    def trigger(self, event: str) -> StrEnum:
        """Apply an event to the current status and transition.

        Args:
            event: The event string (e.g. ``"approve"``).

        Returns:
            The new status after the transition.

        Raises:
            InvalidTransitionError: If the transition is not allowed from
                the current status, or if the status is terminal.
        """
        if not self.can_trigger(event):
            raise InvalidTransitionError(self._lifecycle.entity, str(self._state), event)

        old_state = self._state
        new_state = self._lifecycle.transitions[(self._state, event)]
        self._history.append((old_state, event, new_state))
        self._state = new_state
        return new_state

    def get_valid_events(self) -> list[str]:
        """Return a sorted list of events valid from the current status.

        Returns an empty list if the status is terminal.
        """
        if self.is_terminal:
            return []
        return sorted(
            str(event) for state, event in self._lifecycle.transitions if state == self._state
        )
