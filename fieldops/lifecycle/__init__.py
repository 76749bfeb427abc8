from fieldops.lifecycle.checklist import ChecklistTracker
from fieldops.lifecycle.engine import OrderLifecycle, TransitionResult
from fieldops.lifecycle.guards import GuardResult
from fieldops.lifecycle.notifications import DeliveryReport, NotificationDispatcher
from fieldops.lifecycle.state_machine import (
    InvalidTransitionError,
    LifecycleTrigger,
    OrderState,
    OrderStateMachine,
)

__all__ = [
    "OrderLifecycle",
    "TransitionResult",
    "OrderStateMachine",
    "OrderState",
    "LifecycleTrigger",
    "InvalidTransitionError",
    "ChecklistTracker",
    "GuardResult",
    "NotificationDispatcher",
    "DeliveryReport",
]
