"""
Transition table for the service-order lifecycle.

A service order starts as a pending quote, becomes a confirmed booking on
approval, and then moves through field execution to completion. Every
allowed move is listed explicitly; anything else is rejected with the set
of triggers that are valid from the current state.

Usage:
    sm = OrderStateMachine(OrderState.CONFIRMED)
    sm.transition(LifecycleTrigger.START)
    assert sm.current_state == OrderState.IN_PROGRESS
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from fieldops.schemas.booking_schema import BookingStatus
from fieldops.schemas.quote_schema import QuoteStatus

logger = logging.getLogger(__name__)


class OrderState(str, Enum):
    """All states a service order can be in, across quote and booking."""
    QUOTE_PENDING = "quote_pending"
    QUOTE_APPROVED = "quote_approved"
    QUOTE_REJECTED = "quote_rejected"
    QUOTE_COMPLETED = "quote_completed"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class LifecycleTrigger(str, Enum):
    """Operations that move an order between states."""
    APPROVE = "approve"
    REJECT = "reject"
    ASSIGN = "assign"
    UNASSIGN = "unassign"
    START = "start"
    COMPLETE = "complete"
    CANCEL = "cancel"


@dataclass
class Transition:
    """A single valid state transition."""
    from_state: OrderState
    to_state: OrderState
    trigger: LifecycleTrigger


@dataclass
class StateEntry:
    """Recorded history entry for a state visit."""
    state: OrderState
    entered_at: datetime
    trigger: Optional[LifecycleTrigger] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current state."""


_QUOTE_STATES = {
    QuoteStatus.PENDING: OrderState.QUOTE_PENDING,
    QuoteStatus.APPROVED: OrderState.QUOTE_APPROVED,
    QuoteStatus.REJECTED: OrderState.QUOTE_REJECTED,
    QuoteStatus.COMPLETED: OrderState.QUOTE_COMPLETED,
}

_BOOKING_STATES = {
    BookingStatus.CONFIRMED: OrderState.CONFIRMED,
    BookingStatus.IN_PROGRESS: OrderState.IN_PROGRESS,
    BookingStatus.COMPLETED: OrderState.COMPLETED,
    BookingStatus.CANCELLED: OrderState.CANCELLED,
}


def state_of_quote(status: QuoteStatus) -> OrderState:
    return _QUOTE_STATES[status]


def state_of_booking(status: BookingStatus) -> OrderState:
    return _BOOKING_STATES[status]


def booking_status_for(state: OrderState) -> BookingStatus:
    """Map a booking-side order state back to the stored booking status."""
    for status, mapped in _BOOKING_STATES.items():
        if mapped == state:
            return status
    raise ValueError(f"'{state.value}' is not a booking state")


def quote_status_for(state: OrderState) -> QuoteStatus:
    """Map a quote-side order state back to the stored quote status."""
    for status, mapped in _QUOTE_STATES.items():
        if mapped == state:
            return status
    raise ValueError(f"'{state.value}' is not a quote state")


class OrderStateMachine:
    """
    Deterministic state machine for one service order.

    Handlers build a machine from the freshly read record, ask it for the
    target state, and only then write. An invalid trigger raises before
    anything is persisted.
    """

    TRANSITIONS: list[Transition] = [
        # --- Quote review ---
        Transition(OrderState.QUOTE_PENDING, OrderState.QUOTE_APPROVED,
                   LifecycleTrigger.APPROVE),
        Transition(OrderState.QUOTE_PENDING, OrderState.QUOTE_REJECTED,
                   LifecycleTrigger.REJECT),

        # --- Dispatch ---
        Transition(OrderState.CONFIRMED, OrderState.CONFIRMED,
                   LifecycleTrigger.ASSIGN),
        Transition(OrderState.CONFIRMED, OrderState.CONFIRMED,
                   LifecycleTrigger.UNASSIGN),
        Transition(OrderState.IN_PROGRESS, OrderState.IN_PROGRESS,
                   LifecycleTrigger.UNASSIGN),

        # --- Field execution ---
        Transition(OrderState.CONFIRMED, OrderState.IN_PROGRESS,
                   LifecycleTrigger.START),
        Transition(OrderState.IN_PROGRESS, OrderState.COMPLETED,
                   LifecycleTrigger.COMPLETE),

        # --- Cancellation ---
        Transition(OrderState.CONFIRMED, OrderState.CANCELLED,
                   LifecycleTrigger.CANCEL),
        Transition(OrderState.IN_PROGRESS, OrderState.CANCELLED,
                   LifecycleTrigger.CANCEL),
    ]

    def __init__(self, initial_state: OrderState = OrderState.QUOTE_PENDING) -> None:
        self._current_state = initial_state
        self._history: list[StateEntry] = [
            StateEntry(state=initial_state, entered_at=datetime.now(timezone.utc))
        ]

    @classmethod
    def for_quote(cls, status: QuoteStatus) -> "OrderStateMachine":
        return cls(state_of_quote(status))

    @classmethod
    def for_booking(cls, status: BookingStatus) -> "OrderStateMachine":
        return cls(state_of_booking(status))

    @property
    def current_state(self) -> OrderState:
        return self._current_state

    def can_transition(self, trigger: LifecycleTrigger) -> bool:
        return trigger in self.get_valid_triggers()

    def transition(self, trigger: LifecycleTrigger) -> OrderState:
        """
        Execute a state transition.

        Args:
            trigger: The operation being applied.

        Returns:
            The new order state.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                old_state = self._current_state
                self._current_state = t.to_state
                self._history.append(StateEntry(
                    state=self._current_state,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))
                logger.debug(
                    "State transition: %s -> %s (trigger: %s)",
                    old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_state.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[LifecycleTrigger]:
        """Return all triggers valid from the current state."""
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self._current_state]

    def get_history(self) -> list[StateEntry]:
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        """Return ordered list of state names visited."""
        return [entry.state.value for entry in self._history]

    def is_terminal(self) -> bool:
        """A state with no outgoing transitions is terminal."""
        return not self.get_valid_triggers()
