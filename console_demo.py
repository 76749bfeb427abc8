"""
Offline console demo that runs a service order through its full lifecycle.

Uses the real lifecycle engine, guards, checklist tracker and notification
dispatcher over the in-memory store and collaborators. No database, no
SMTP, no GPS hardware. Designed for walkthroughs.

Usage:
    python console_demo.py
    python console_demo.py --scenario conflict
    python console_demo.py --scenario incomplete
    python console_demo.py --scenario no-gps
"""

import argparse
import sys
from datetime import date, timedelta

from fieldops.config import settings
from fieldops.lifecycle.engine import OrderLifecycle, TransitionResult
from fieldops.lifecycle.notifications import NotificationDispatcher
from fieldops.schemas.actor_schema import Actor, Role
from fieldops.schemas.booking_schema import Employee, PhotoType
from fieldops.schemas.checklist_schema import ChecklistItem, ChecklistTemplate
from fieldops.schemas.quote_schema import Frequency, PropertyType, QuoteRequest
from fieldops.tools.evidence import InMemoryEvidenceStorage
from fieldops.tools.identity import InMemoryDirectory
from fieldops.tools.invoicing import InMemoryInvoicer
from fieldops.tools.location import StaticLocationProvider, UnavailableLocationProvider
from fieldops.tools.messaging import InMemoryMailer
from fieldops.tools.pricing import format_currency
from fieldops.tools.store import InMemoryServiceStore

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

SERVICE = "Residential Cleaning"
JPEG = b"\xff\xd8\xff\xe0demo-photo"


class ConsoleSession:
    """Seeds an in-memory company and plays one scenario against it."""

    SCENARIOS = ("happy", "conflict", "incomplete", "no-gps")

    def __init__(self, scenario: str) -> None:
        self.scenario = scenario
        self.store = InMemoryServiceStore()
        self.directory = InMemoryDirectory()
        self.mailer = InMemoryMailer()
        self.invoicer = InMemoryInvoicer()
        provider = (
            UnavailableLocationProvider()
            if scenario == "no-gps"
            else StaticLocationProvider(25.7617, -80.1918)
        )
        self.engine = OrderLifecycle(
            self.store,
            NotificationDispatcher(self.mailer, self.directory),
            provider,
            evidence_storage=InMemoryEvidenceStorage(),
            invoicer=self.invoicer,
        )
        self._seed()

    def _seed(self) -> None:
        self.directory.register("u-admin", "Alex Admin", "admin@sparkle.example", Role.ADMIN)
        self.directory.register("u-client", "Carmen Cliente", "carmen@example.com", language="es")
        self.directory.register("u-maria", "Maria Lopez", "maria@sparkle.example", Role.EMPLOYEE)
        self.directory.register("u-john", "John Reyes", "john@sparkle.example", Role.EMPLOYEE)

        self.admin = self.directory.actor_for("u-admin")
        self.client = self.directory.actor_for("u-client")
        self.maria = self.directory.actor_for("u-maria")

        self.store.add_employee(Employee(
            id="EMP-MARIA", name="Maria Lopez", user_id="u-maria",
            hourly_rate=22.0, skills={SERVICE},
        ))
        self.store.add_employee(Employee(
            id="EMP-JOHN", name="John Reyes", user_id="u-john",
            hourly_rate=20.0, skills={"Window Cleaning"},
        ))

        self.store.add_checklist_template(ChecklistTemplate(
            id="TPL-KITCHEN", service_type=SERVICE, room_type="kitchen",
            name_en="Kitchen", name_es="Cocina",
        ))
        for index, (en, es, required) in enumerate([
            ("Clean countertops", "Limpiar encimeras", True),
            ("Clean sink", "Limpiar fregadero", True),
            ("Mop floor", "Trapear piso", True),
            ("Wipe cabinet fronts", "Limpiar frentes de gabinetes", False),
        ]):
            self.store.add_checklist_item(ChecklistItem(
                id=f"ITEM-{index + 1}", template_id="TPL-KITCHEN",
                name_en=en, name_es=es, order_index=index, is_required=required,
            ))

    def step(self, label: str, result: TransitionResult) -> TransitionResult:
        if result.success:
            print(f"{GREEN}{BOLD}[ok]{RESET} {GREEN}{label}{RESET}")
        else:
            print(f"{RED}{BOLD}[{result.error.value}]{RESET} {RED}{label}: {result.message}{RESET}")
        for warning in result.warnings:
            print(f"{YELLOW}  ! {warning}{RESET}")
        for report in result.deliveries:
            status = "sent" if report.success else f"FAILED ({report.message})"
            print(f"{DIM}  >> {report.template_type} -> {report.recipient_id}: {status}{RESET}")
        return result

    def run(self) -> int:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  FIELD OPERATIONS DEMO - Scenario: {self.scenario}{RESET}")
        print(f"{BOLD}  Company: {settings.company.name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

        service_day = date.today() + timedelta(days=3)
        quote = self.step("Client submits quote", self.engine.submit_quote(self.client, QuoteRequest(
            service_type=SERVICE,
            property_type=PropertyType.RESIDENTIAL,
            area=1200,
            frequency=Frequency.WEEKLY,
            bedrooms=3,
            bathrooms=2,
            preferred_date=service_day,
            preferred_time="09:00",
            selected_item_ids=["ITEM-1", "ITEM-2", "ITEM-3"],
        ))).quote
        if quote is None:
            return 1
        print(f"{DIM}  >> estimate {format_currency(quote.price.total)} "
              f"(market {quote.price.market_average}){RESET}")

        booking = self.step("Admin approves quote", self.engine.approve_quote(
            self.admin, quote.id, service_address="100 Biscayne Blvd, Miami"
        )).booking
        if booking is None:
            return 1
        print(f"{DIM}  >> eligible: {[e.name for e in self.engine.eligible_employees(booking.id)]}{RESET}")

        self.step("Assign Maria", self.engine.assign_employee(self.admin, booking.id, "EMP-MARIA"))
        if self.scenario == "conflict":
            return self._conflict(quote.id)

        started = self.step("Maria starts work", self.engine.start_work(self.maria, booking.id))
        if not started.success:
            return 0

        self.step("Before photo", self.engine.attach_photo(
            self.maria, booking.id, PhotoType.BEFORE, JPEG, "image/jpeg", room_area="kitchen"
        ))
        rows = self.engine.checklist.items_for(booking.id)
        done = rows[:-1] if self.scenario == "incomplete" else rows
        for row in done:
            self.step(f"Check '{row.name_en}'", self.engine.update_checklist_item(
                self.maria, row.id, completed=True, rating=5
            ))
        print(f"{DIM}  >> progress: {self.engine.checklist_progress(booking.id)}{RESET}")

        finished = self.step("Maria completes work", self.engine.complete_work(
            self.maria, booking.id, notes="Kitchen done, client was home."
        ))
        if finished.invoice is not None:
            print(f"{DIM}  >> invoice {finished.invoice.invoice_number} "
                  f"{format_currency(finished.invoice.total_amount)}{RESET}")

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        trace = [change.to_state for change in self.engine.history(booking.id)]
        print(f"{DIM}  State trace: {' -> '.join(trace)}{RESET}")
        print(f"{DIM}  Outbox: {len(self.mailer.outbox)} messages{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        return 0

    def _conflict(self, first_quote_id: str) -> int:
        """Approve a second overlapping job and try to give it to the same employee."""
        second = self.step("Client submits second quote", self.engine.submit_quote(
            self.client, QuoteRequest(
                service_type=SERVICE, area=800,
                selected_item_ids=["ITEM-1"],
            ),
        )).quote
        first = self.store.get_quote(first_quote_id)
        if second is None or first is None:
            return 1
        overlap = self.step("Admin approves it 30 minutes later", self.engine.approve_quote(
            self.admin, second.id,
            service_date=first.preferred_date, service_time="09:30",
        )).booking
        if overlap is None:
            return 1
        self.step("Assign Maria again", self.engine.assign_employee(self.admin, overlap.id, "EMP-MARIA"))
        self.step("Assign John (wrong skills)", self.engine.assign_employee(self.admin, overlap.id, "EMP-JOHN"))
        return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Field operations lifecycle demo")
    parser.add_argument(
        "--scenario",
        choices=ConsoleSession.SCENARIOS,
        default="happy",
        help="Scenario to play",
    )
    args = parser.parse_args()
    sys.exit(ConsoleSession(args.scenario).run())


if __name__ == "__main__":
    main()
