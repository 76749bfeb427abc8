"""
Employee availability and conflict detection.

Two bookings for the same employee on the same date conflict when their
half-open intervals ``[start, start + duration)`` overlap. Only open
bookings (confirmed or in progress) block a slot.

These functions are pure over the bookings they are given. Callers that
assign work must pass a fresh read taken inside the store transaction.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from fieldops.config import settings
from fieldops.schemas.booking_schema import Booking, BookingStatus, Employee
from fieldops.utils import time_to_minutes

logger = logging.getLogger(__name__)

BLOCKING_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS})


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open interval overlap: adjacent intervals do not conflict."""
    return start_a < end_b and start_b < end_a


def _duration_or_default(duration: Optional[int]) -> int:
    return duration or settings.scheduling.default_duration_minutes


def find_conflicts(
    employee_id: str,
    candidate_date: date,
    candidate_start_time: str,
    candidate_duration_minutes: Optional[int],
    existing_bookings: Iterable[Booking],
    exclude_booking_id: Optional[str] = None,
) -> list[Booking]:
    """Return the open bookings that overlap the candidate interval."""
    start = time_to_minutes(candidate_start_time)
    end = start + _duration_or_default(candidate_duration_minutes)

    conflicts = []
    for booking in existing_bookings:
        if booking.employee_id != employee_id or booking.service_date != candidate_date:
            continue
        if booking.status not in BLOCKING_STATUSES:
            continue
        if exclude_booking_id is not None and booking.id == exclude_booking_id:
            continue
        other_start = time_to_minutes(booking.service_time)
        other_end = other_start + _duration_or_default(booking.estimated_duration)
        if intervals_overlap(start, end, other_start, other_end):
            conflicts.append(booking)
    return conflicts


def is_available(
    employee_id: str,
    candidate_date: date,
    candidate_start_time: str,
    candidate_duration_minutes: Optional[int],
    existing_bookings: Iterable[Booking],
    exclude_booking_id: Optional[str] = None,
) -> bool:
    """True when the employee has no open booking overlapping the candidate slot."""
    conflicts = find_conflicts(
        employee_id,
        candidate_date,
        candidate_start_time,
        candidate_duration_minutes,
        existing_bookings,
        exclude_booking_id=exclude_booking_id,
    )
    if conflicts:
        logger.debug(
            "Employee %s busy on %s at %s: conflicts with %s",
            employee_id, candidate_date, candidate_start_time,
            [b.id for b in conflicts],
        )
    return not conflicts


def available_employees(
    employees: Iterable[Employee],
    booking: Booking,
    existing_bookings: Iterable[Booking],
) -> list[Employee]:
    """Active employees qualified for the booking's service and free at its slot."""
    existing = list(existing_bookings)
    return [
        emp
        for emp in employees
        if emp.active
        and emp.has_skill(booking.service_type)
        and is_available(
            emp.id,
            booking.service_date,
            booking.service_time,
            booking.estimated_duration,
            existing,
            exclude_booking_id=booking.id,
        )
    ]
