"""
Persistence collaborator contract and in-memory implementation.

In production, this would be backed by a relational store where
``transaction()`` opens a database transaction and takes a row lock on
the employee's schedule (or relies on an exclusion constraint over
employee, date and time range). The in-memory version serialises every
transaction through one re-entrant lock, which gives the same guarantee
inside a single process.

Records are copied on the way in and out, so callers can never mutate
stored state without going through ``save_*``.
"""

import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import date
from typing import ContextManager, Iterable, Iterator, Optional, Protocol, TypeVar

from pydantic import BaseModel

from fieldops.schemas.booking_schema import (
    Booking,
    BookingLocation,
    BookingPhoto,
    BookingStatus,
    Employee,
    StatusChange,
)
from fieldops.schemas.checklist_schema import (
    BookingChecklistCompletion,
    ChecklistFrequency,
    ChecklistItem,
    ChecklistTemplate,
)
from fieldops.schemas.quote_schema import Quote

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def new_id(prefix: str) -> str:
    """Generate a short prefixed identifier, e.g. ``BK-3F9A1C02``."""
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


class ServiceStore(Protocol):
    """Storage operations the lifecycle core depends on."""

    def transaction(self) -> ContextManager[None]: ...

    def add_quote(self, quote: Quote) -> Quote: ...
    def get_quote(self, quote_id: str) -> Optional[Quote]: ...
    def save_quote(self, quote: Quote) -> Quote: ...

    def add_booking(self, booking: Booking) -> Booking: ...
    def get_booking(self, booking_id: str) -> Optional[Booking]: ...
    def save_booking(self, booking: Booking) -> Booking: ...
    def list_bookings(
        self,
        employee_id: Optional[str] = None,
        service_date: Optional[date] = None,
        statuses: Optional[Iterable[BookingStatus]] = None,
    ) -> list[Booking]: ...

    def add_employee(self, employee: Employee) -> Employee: ...
    def get_employee(self, employee_id: str) -> Optional[Employee]: ...
    def find_employee_by_user(self, user_id: str) -> Optional[Employee]: ...
    def list_employees(self, active_only: bool = True) -> list[Employee]: ...

    def add_checklist_template(self, template: ChecklistTemplate) -> ChecklistTemplate: ...
    def add_checklist_item(self, item: ChecklistItem) -> ChecklistItem: ...
    def get_checklist_item(self, item_id: str) -> Optional[ChecklistItem]: ...
    def list_checklist_templates(
        self, service_type: str, frequency: Optional[ChecklistFrequency] = None
    ) -> list[ChecklistTemplate]: ...
    def list_checklist_items(self, template_id: str) -> list[ChecklistItem]: ...

    def add_completion(self, row: BookingChecklistCompletion) -> BookingChecklistCompletion: ...
    def get_completion(self, completion_id: str) -> Optional[BookingChecklistCompletion]: ...
    def save_completion(self, row: BookingChecklistCompletion) -> BookingChecklistCompletion: ...
    def list_completions(self, booking_id: str) -> list[BookingChecklistCompletion]: ...

    def add_location(self, location: BookingLocation) -> BookingLocation: ...
    def list_locations(self, booking_id: str) -> list[BookingLocation]: ...
    def add_photo(self, photo: BookingPhoto) -> BookingPhoto: ...
    def list_photos(self, booking_id: str) -> list[BookingPhoto]: ...

    def add_status_change(self, change: StatusChange) -> StatusChange: ...
    def list_history(self, entity_id: str) -> list[StatusChange]: ...


class InMemoryServiceStore:
    """Thread-safe dictionary-backed implementation of ``ServiceStore``."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._quotes: dict[str, Quote] = {}
        self._bookings: dict[str, Booking] = {}
        self._employees: dict[str, Employee] = {}
        self._templates: dict[str, ChecklistTemplate] = {}
        self._items: dict[str, ChecklistItem] = {}
        self._completions: dict[str, BookingChecklistCompletion] = {}
        self._locations: list[BookingLocation] = []
        self._photos: list[BookingPhoto] = []
        self._history: list[StatusChange] = []

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Serialise a read-check-write sequence against all other transactions."""
        with self._lock:
            yield

    @staticmethod
    def _copy(record: M) -> M:
        return record.model_copy(deep=True)

    def _put(self, table: dict[str, M], record: M) -> M:
        with self._lock:
            table[record.id] = self._copy(record)  # type: ignore[attr-defined]
        return self._copy(record)

    def _get(self, table: dict[str, M], record_id: str) -> Optional[M]:
        with self._lock:
            record = table.get(record_id)
            return self._copy(record) if record is not None else None

    def _replace(self, table: dict[str, M], record: M, kind: str) -> M:
        with self._lock:
            if record.id not in table:  # type: ignore[attr-defined]
                raise KeyError(f"{kind} {record.id} does not exist")  # type: ignore[attr-defined]
            table[record.id] = self._copy(record)  # type: ignore[attr-defined]
        return self._copy(record)

    # ------------------------------------------------------------------ #
    # Quotes
    # ------------------------------------------------------------------ #

    def add_quote(self, quote: Quote) -> Quote:
        return self._put(self._quotes, quote)

    def get_quote(self, quote_id: str) -> Optional[Quote]:
        return self._get(self._quotes, quote_id)

    def save_quote(self, quote: Quote) -> Quote:
        return self._replace(self._quotes, quote, "Quote")

    # ------------------------------------------------------------------ #
    # Bookings
    # ------------------------------------------------------------------ #

    def add_booking(self, booking: Booking) -> Booking:
        return self._put(self._bookings, booking)

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        return self._get(self._bookings, booking_id)

    def save_booking(self, booking: Booking) -> Booking:
        return self._replace(self._bookings, booking, "Booking")

    def list_bookings(
        self,
        employee_id: Optional[str] = None,
        service_date: Optional[date] = None,
        statuses: Optional[Iterable[BookingStatus]] = None,
    ) -> list[Booking]:
        wanted = set(statuses) if statuses is not None else None
        with self._lock:
            rows = [
                self._copy(b)
                for b in self._bookings.values()
                if (employee_id is None or b.employee_id == employee_id)
                and (service_date is None or b.service_date == service_date)
                and (wanted is None or b.status in wanted)
            ]
        return sorted(rows, key=lambda b: (b.service_date, b.service_time))

    # ------------------------------------------------------------------ #
    # Employees
    # ------------------------------------------------------------------ #

    def add_employee(self, employee: Employee) -> Employee:
        return self._put(self._employees, employee)

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        return self._get(self._employees, employee_id)

    def find_employee_by_user(self, user_id: str) -> Optional[Employee]:
        with self._lock:
            for emp in self._employees.values():
                if emp.user_id == user_id:
                    return self._copy(emp)
        return None

    def list_employees(self, active_only: bool = True) -> list[Employee]:
        with self._lock:
            rows = [
                self._copy(e) for e in self._employees.values() if e.active or not active_only
            ]
        return sorted(rows, key=lambda e: e.name)

    # ------------------------------------------------------------------ #
    # Checklist reference data
    # ------------------------------------------------------------------ #

    def add_checklist_template(self, template: ChecklistTemplate) -> ChecklistTemplate:
        return self._put(self._templates, template)

    def add_checklist_item(self, item: ChecklistItem) -> ChecklistItem:
        if item.template_id not in self._templates:
            raise KeyError(f"Checklist template {item.template_id} does not exist")
        return self._put(self._items, item)

    def get_checklist_item(self, item_id: str) -> Optional[ChecklistItem]:
        return self._get(self._items, item_id)

    def list_checklist_templates(
        self, service_type: str, frequency: Optional[ChecklistFrequency] = None
    ) -> list[ChecklistTemplate]:
        """Active templates for a service; a template marked ``all`` matches any frequency."""
        normalized = service_type.lower().strip()
        with self._lock:
            return [
                self._copy(t)
                for t in self._templates.values()
                if t.active
                and t.service_type.lower() == normalized
                and (
                    frequency is None
                    or frequency == ChecklistFrequency.ALL
                    or t.frequency in (frequency, ChecklistFrequency.ALL)
                )
            ]

    def list_checklist_items(self, template_id: str) -> list[ChecklistItem]:
        with self._lock:
            rows = [self._copy(i) for i in self._items.values() if i.template_id == template_id]
        return sorted(rows, key=lambda i: i.order_index)

    # ------------------------------------------------------------------ #
    # Checklist completion rows
    # ------------------------------------------------------------------ #

    def add_completion(self, row: BookingChecklistCompletion) -> BookingChecklistCompletion:
        with self._lock:
            for existing in self._completions.values():
                if (
                    existing.booking_id == row.booking_id
                    and existing.checklist_item_id == row.checklist_item_id
                ):
                    raise KeyError(
                        f"Checklist item {row.checklist_item_id} already on booking {row.booking_id}"
                    )
            return self._put(self._completions, row)

    def get_completion(self, completion_id: str) -> Optional[BookingChecklistCompletion]:
        return self._get(self._completions, completion_id)

    def save_completion(self, row: BookingChecklistCompletion) -> BookingChecklistCompletion:
        return self._replace(self._completions, row, "Checklist completion")

    def list_completions(self, booking_id: str) -> list[BookingChecklistCompletion]:
        with self._lock:
            rows = [
                self._copy(c) for c in self._completions.values() if c.booking_id == booking_id
            ]
        return sorted(rows, key=lambda c: c.order_index)

    # ------------------------------------------------------------------ #
    # Field evidence and history
    # ------------------------------------------------------------------ #

    def add_location(self, location: BookingLocation) -> BookingLocation:
        with self._lock:
            self._locations.append(self._copy(location))
        return self._copy(location)

    def list_locations(self, booking_id: str) -> list[BookingLocation]:
        with self._lock:
            return [self._copy(loc) for loc in self._locations if loc.booking_id == booking_id]

    def add_photo(self, photo: BookingPhoto) -> BookingPhoto:
        with self._lock:
            self._photos.append(self._copy(photo))
        return self._copy(photo)

    def list_photos(self, booking_id: str) -> list[BookingPhoto]:
        with self._lock:
            return [self._copy(p) for p in self._photos if p.booking_id == booking_id]

    def add_status_change(self, change: StatusChange) -> StatusChange:
        with self._lock:
            self._history.append(self._copy(change))
        return self._copy(change)

    def list_history(self, entity_id: str) -> list[StatusChange]:
        with self._lock:
            return [self._copy(h) for h in self._history if h.entity_id == entity_id]
