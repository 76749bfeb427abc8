"""
Invoicing collaborator.

Completed bookings are handed to the invoicer, which produces a billable
draft with line items, tax and payment terms. In production the draft is
persisted and rendered to a document; here it is kept in memory.
"""

import logging
import threading
from datetime import date, timedelta
from typing import Optional, Protocol

from pydantic import BaseModel, Field

from fieldops.config import settings
from fieldops.schemas.booking_schema import Booking
from fieldops.schemas.quote_schema import Quote

logger = logging.getLogger(__name__)


class InvoiceLineItem(BaseModel):
    service_name: str
    description: str = ""
    quantity: int = Field(default=1, gt=0)
    unit_price: float = Field(ge=0)
    subtotal: float = Field(ge=0)


class InvoiceDraft(BaseModel):
    """Billable document derived from a completed booking."""
    invoice_number: str
    booking_id: str
    client_id: str
    issue_date: date
    due_date: date
    service_address: str = ""
    items: list[InvoiceLineItem]
    subtotal: float
    tax_rate: float
    tax_amount: float
    total_amount: float
    notes: Optional[str] = None


class Invoicer(Protocol):
    def create_invoice(self, booking: Booking, quote: Optional[Quote]) -> InvoiceDraft: ...


def build_line_items(booking: Booking, quote: Optional[Quote]) -> list[InvoiceLineItem]:
    """One line for the service at the booking's final price."""
    description = ""
    if quote is not None:
        description = f"{quote.frequency.value} service, {quote.area} sq ft {quote.property_type.value}"
    return [
        InvoiceLineItem(
            service_name=booking.service_type,
            description=description,
            quantity=1,
            unit_price=booking.final_price,
            subtotal=booking.final_price,
        )
    ]


def build_invoice_draft(
    booking: Booking,
    quote: Optional[Quote],
    invoice_number: str,
    issue_date: date,
    tax_rate: Optional[float] = None,
    due_days: Optional[int] = None,
) -> InvoiceDraft:
    """Assemble an invoice draft; ``tax_rate`` is a percentage."""
    rate = settings.invoicing.tax_rate if tax_rate is None else tax_rate
    days = settings.invoicing.due_days if due_days is None else due_days
    items = build_line_items(booking, quote)
    subtotal = round(sum(item.subtotal for item in items), 2)
    tax_amount = round(subtotal * rate / 100, 2)
    return InvoiceDraft(
        invoice_number=invoice_number,
        booking_id=booking.id,
        client_id=booking.requester_id,
        issue_date=issue_date,
        due_date=issue_date + timedelta(days=days),
        service_address=booking.service_address,
        items=items,
        subtotal=subtotal,
        tax_rate=rate,
        tax_amount=tax_amount,
        total_amount=round(subtotal + tax_amount, 2),
        notes=booking.employee_notes or None,
    )


class InMemoryInvoicer:
    """Issues sequential invoice numbers; one invoice per booking."""

    def __init__(self, prefix: Optional[str] = None) -> None:
        self._prefix = prefix or settings.invoicing.prefix
        self._lock = threading.Lock()
        self._sequence = 0
        self.invoices: dict[str, InvoiceDraft] = {}

    def create_invoice(self, booking: Booking, quote: Optional[Quote]) -> InvoiceDraft:
        with self._lock:
            existing = self.invoices.get(booking.id)
            if existing is not None:
                return existing
            self._sequence += 1
            today = date.today()
            number = f"{self._prefix}-{today:%Y%m}-{self._sequence:04d}"
            draft = build_invoice_draft(booking, quote, number, today)
            self.invoices[booking.id] = draft
        logger.info("Invoice %s drafted for booking %s", number, booking.id)
        return draft
