"""Shared test fixtures and helpers."""

from datetime import date
from typing import Optional

import pytest

from fieldops.config import CompletionConfig
from fieldops.lifecycle.checklist import ChecklistTracker
from fieldops.lifecycle.engine import OrderLifecycle
from fieldops.lifecycle.notifications import NotificationDispatcher
from fieldops.lifecycle.state_machine import OrderStateMachine
from fieldops.schemas.actor_schema import Role
from fieldops.schemas.booking_schema import Booking, BookingStatus, Employee
from fieldops.schemas.checklist_schema import ChecklistItem, ChecklistTemplate
from fieldops.schemas.quote_schema import Frequency, PropertyType, QuoteRequest
from fieldops.tools.evidence import InMemoryEvidenceStorage
from fieldops.tools.identity import InMemoryDirectory
from fieldops.tools.invoicing import InMemoryInvoicer
from fieldops.tools.location import StaticLocationProvider
from fieldops.tools.messaging import InMemoryMailer
from fieldops.tools.store import InMemoryServiceStore

SERVICE = "Residential Cleaning"
SERVICE_DAY = date(2024, 1, 10)
REQUIRED_ITEMS = ["ITEM-1", "ITEM-2", "ITEM-3"]
OPTIONAL_ITEM = "ITEM-4"
JPEG = b"\xff\xd8\xff\xe0test-photo"


@pytest.fixture
def store():
    s = InMemoryServiceStore()
    s.add_checklist_template(ChecklistTemplate(
        id="TPL-KITCHEN", service_type=SERVICE, room_type="kitchen",
        name_en="Kitchen", name_es="Cocina",
    ))
    for index, (en, es) in enumerate([
        ("Clean countertops", "Limpiar encimeras"),
        ("Clean sink", "Limpiar fregadero"),
        ("Mop floor", "Trapear piso"),
    ]):
        s.add_checklist_item(ChecklistItem(
            id=f"ITEM-{index + 1}", template_id="TPL-KITCHEN",
            name_en=en, name_es=es, order_index=index, is_required=True,
        ))
    s.add_checklist_item(ChecklistItem(
        id=OPTIONAL_ITEM, template_id="TPL-KITCHEN",
        name_en="Wipe cabinet fronts", name_es="Limpiar gabinetes",
        order_index=3, is_required=False,
    ))
    s.add_employee(Employee(id="EMP-MARIA", name="Maria Lopez", user_id="u-maria", skills={SERVICE}))
    s.add_employee(Employee(id="EMP-JOHN", name="John Reyes", user_id="u-john", skills={SERVICE}))
    s.add_employee(Employee(id="EMP-WIN", name="Wendy Glass", user_id="u-wendy",
                            skills={"Window Cleaning"}))
    return s


@pytest.fixture
def directory():
    d = InMemoryDirectory()
    d.register("u-admin", "Alex Admin", "admin@example.com", Role.ADMIN)
    d.register("u-client", "Carmen Client", "carmen@example.com", Role.CLIENT, language="es")
    d.register("u-maria", "Maria Lopez", "maria@example.com", Role.EMPLOYEE)
    d.register("u-john", "John Reyes", "john@example.com", Role.EMPLOYEE)
    d.register("u-wendy", "Wendy Glass", "wendy@example.com", Role.EMPLOYEE)
    return d


@pytest.fixture
def mailer():
    return InMemoryMailer()


@pytest.fixture
def dispatcher(mailer, directory):
    return NotificationDispatcher(mailer, directory)


@pytest.fixture
def invoicer():
    return InMemoryInvoicer(prefix="TST")


@pytest.fixture
def engine(store, dispatcher, invoicer):
    return OrderLifecycle(
        store,
        dispatcher,
        StaticLocationProvider(25.7617, -80.1918),
        evidence_storage=InMemoryEvidenceStorage(),
        invoicer=invoicer,
        completion_policy=CompletionConfig(checklist_gate="all", require_photo_evidence=False),
        location_timeout=2.0,
        upload_timeout=2.0,
    )


@pytest.fixture
def tracker(store):
    return ChecklistTracker(store)


@pytest.fixture
def admin(directory):
    return directory.actor_for("u-admin")


@pytest.fixture
def client(directory):
    return directory.actor_for("u-client")


@pytest.fixture
def maria(directory):
    return directory.actor_for("u-maria")


@pytest.fixture
def john(directory):
    return directory.actor_for("u-john")


@pytest.fixture
def booking_machine():
    return OrderStateMachine.for_booking(BookingStatus.CONFIRMED)


def make_request(
    service_type: str = SERVICE,
    area: int = 1000,
    frequency: Frequency = Frequency.ONCE,
    items: Optional[list[str]] = None,
    preferred_date: Optional[date] = SERVICE_DAY,
    preferred_time: Optional[str] = "09:00",
    **kwargs,
) -> QuoteRequest:
    """Helper to create a QuoteRequest with sensible defaults."""
    return QuoteRequest(
        service_type=service_type,
        property_type=kwargs.pop("property_type", PropertyType.RESIDENTIAL),
        area=area,
        frequency=frequency,
        preferred_date=preferred_date,
        preferred_time=preferred_time,
        selected_item_ids=list(REQUIRED_ITEMS) if items is None else items,
        **kwargs,
    )


def make_booking(
    booking_id: str = "BK-1",
    employee_id: Optional[str] = "EMP-MARIA",
    service_date: date = SERVICE_DAY,
    service_time: str = "09:00",
    duration: Optional[int] = 120,
    status: BookingStatus = BookingStatus.CONFIRMED,
    service_type: str = SERVICE,
) -> Booking:
    """Helper to create a Booking record directly, bypassing the engine."""
    return Booking(
        id=booking_id,
        quote_id=f"QT-{booking_id}",
        requester_id="u-client",
        service_type=service_type,
        service_date=service_date,
        service_time=service_time,
        employee_id=employee_id,
        status=status,
        final_price=150.0,
        estimated_duration=duration,
    )


def approved_booking(engine, client, admin, **approve_kwargs) -> Booking:
    """Submit and approve a quote; returns the confirmed booking."""
    quote = engine.submit_quote(client, make_request()).quote
    result = engine.approve_quote(admin, quote.id, **approve_kwargs)
    assert result.success, result.message
    return result.booking


def started_booking(engine, client, admin, employee_actor, employee_id: str = "EMP-MARIA") -> Booking:
    """A booking assigned to ``employee_id`` and already in progress."""
    booking = approved_booking(engine, client, admin)
    assert engine.assign_employee(admin, booking.id, employee_id).success
    result = engine.start_work(employee_actor, booking.id)
    assert result.success, result.message
    return result.booking


def complete_checklist(engine, actor, booking_id: str, leave_open: int = 0) -> None:
    """Tick every checklist row except the last ``leave_open`` rows."""
    rows = engine.checklist.items_for(booking_id)
    for row in rows[: len(rows) - leave_open]:
        assert engine.update_checklist_item(actor, row.id, completed=True).success
