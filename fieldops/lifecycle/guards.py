"""
Guard checks for lifecycle transitions.

Each guard answers one question and returns a GuardResult carrying the
typed error to report when it fails:
1. AuthorizationGuard: is the actor allowed to perform this operation
2. StateGuard: does the transition table allow the trigger
3. SchedulingGuard: can this employee take this booking's slot
4. CompletionGuard: is the checklist (and evidence, if required) done

The engine runs guards on a fresh read inside the store transaction and
stops at the first failure.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from fieldops.config import CompletionConfig
from fieldops.errors import ErrorCode
from fieldops.lifecycle.checklist import ChecklistTracker
from fieldops.lifecycle.state_machine import (
    InvalidTransitionError,
    LifecycleTrigger,
    OrderStateMachine,
)
from fieldops.schemas.actor_schema import Actor, Role
from fieldops.schemas.booking_schema import Booking, BookingPhoto, Employee
from fieldops.tools.availability import find_conflicts
from fieldops.tools.evidence import evidence_summary

logger = logging.getLogger(__name__)


@dataclass
class GuardResult:
    """Outcome of a single guard check."""
    passed: bool
    error: Optional[ErrorCode] = None
    message: Optional[str] = None


PASSED = GuardResult(passed=True)


class GuardRejection(Exception):
    """Raised inside a transaction to abort it with a failed guard."""

    def __init__(self, result: GuardResult) -> None:
        super().__init__(result.message)
        self.result = result


def require(result: GuardResult) -> None:
    """Abort the current operation when ``result`` did not pass."""
    if not result.passed:
        raise GuardRejection(result)


def reject(error: ErrorCode, message: str) -> GuardResult:
    return GuardResult(passed=False, error=error, message=message)


class AuthorizationGuard:
    """Role and ownership checks for the acting user."""

    def require_admin(self, actor: Actor) -> GuardResult:
        if actor.role != Role.ADMIN:
            return reject(ErrorCode.NOT_AUTHORIZED, "Only administrators can perform this action.")
        return PASSED

    def require_assigned_employee(
        self, actor: Actor, booking: Booking, employee: Optional[Employee]
    ) -> GuardResult:
        """``employee`` is the employee record linked to the actor's user, if any."""
        if actor.role != Role.EMPLOYEE or employee is None:
            return reject(ErrorCode.NOT_AUTHORIZED, "Only the assigned employee can do this.")
        if booking.employee_id != employee.id:
            return reject(
                ErrorCode.NOT_AUTHORIZED,
                f"Booking {booking.id} is not assigned to {employee.name}.",
            )
        return PASSED


class StateGuard:
    """Checks a trigger against the transition table."""

    def check(self, machine: OrderStateMachine, trigger: LifecycleTrigger) -> GuardResult:
        try:
            machine.transition(trigger)
        except InvalidTransitionError as exc:
            return reject(ErrorCode.INVALID_STATE, str(exc))
        return PASSED


class SchedulingGuard:
    """Employee eligibility for a booking slot."""

    def check_employee(self, employee: Employee, booking: Booking) -> GuardResult:
        if not employee.active:
            return reject(ErrorCode.EMPLOYEE_UNAVAILABLE, f"{employee.name} is not active.")
        if not employee.has_skill(booking.service_type):
            return reject(
                ErrorCode.EMPLOYEE_UNAVAILABLE,
                f"{employee.name} is not qualified for {booking.service_type}.",
            )
        return PASSED

    def check_availability(
        self, employee: Employee, booking: Booking, existing: Iterable[Booking]
    ) -> GuardResult:
        conflicts = find_conflicts(
            employee.id,
            booking.service_date,
            booking.service_time,
            booking.estimated_duration,
            existing,
            exclude_booking_id=booking.id,
        )
        if conflicts:
            slots = ", ".join(f"{b.id} at {b.service_time}" for b in conflicts)
            return reject(
                ErrorCode.EMPLOYEE_UNAVAILABLE,
                f"{employee.name} already has a booking on {booking.service_date} ({slots}).",
            )
        return PASSED


class CompletionGuard:
    """Preconditions for finishing a job."""

    def __init__(self, tracker: ChecklistTracker, policy: CompletionConfig) -> None:
        self.tracker = tracker
        self.policy = policy

    def check_checklist(self, booking_id: str) -> GuardResult:
        if self.policy.checklist_gate == "required":
            if self.tracker.is_required_complete(booking_id):
                return PASSED
            progress = self.tracker.required_progress(booking_id)
            label = "required checklist items"
        else:
            if self.tracker.is_complete(booking_id):
                return PASSED
            progress = self.tracker.progress(booking_id)
            label = "checklist items"
        return reject(
            ErrorCode.CHECKLIST_INCOMPLETE,
            f"{progress.completed} of {progress.total} {label} completed "
            f"({progress.percentage}%).",
        )

    def check_evidence(self, photos: Iterable[BookingPhoto]) -> GuardResult:
        """Fails only when photo evidence is mandatory and a before or after photo is missing."""
        missing = missing_evidence(photos)
        if missing and self.policy.require_photo_evidence:
            return reject(
                ErrorCode.EVIDENCE_MISSING,
                f"Missing {' and '.join(missing)} photos.",
            )
        return PASSED


def missing_evidence(photos: Iterable[BookingPhoto]) -> list[str]:
    """Photo types with no upload yet, e.g. ``["after"]``."""
    counts = evidence_summary(photos)
    return [photo_type for photo_type, count in counts.items() if count == 0]
