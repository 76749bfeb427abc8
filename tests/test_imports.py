"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_quote_schema(self):
        from fieldops.schemas.quote_schema import Frequency, QuoteStatus, QuoteRequest
        assert Frequency.BIWEEKLY == "biweekly"
        assert QuoteStatus.PENDING == "pending"
        assert QuoteRequest(service_type="x", area=1).selected_item_ids == []

    def test_import_booking_schema(self):
        from fieldops.schemas.booking_schema import Booking, BookingStatus, Employee
        assert BookingStatus.IN_PROGRESS == "in_progress"
        assert Employee(id="E", name="E").active

    def test_import_checklist_schema(self):
        from fieldops.schemas.checklist_schema import ChecklistProgress
        assert ChecklistProgress().percentage == 0


class TestLifecycleImports:
    def test_package_reexports(self):
        from fieldops.lifecycle import (
            ChecklistTracker, InvalidTransitionError, LifecycleTrigger,
            NotificationDispatcher, OrderLifecycle, OrderState, OrderStateMachine,
            TransitionResult,
        )
        assert OrderStateMachine().current_state == OrderState.QUOTE_PENDING

    def test_import_guards(self):
        from fieldops.lifecycle.guards import (
            AuthorizationGuard, CompletionGuard, SchedulingGuard, StateGuard,
        )
        assert AuthorizationGuard() is not None


class TestToolImports:
    def test_import_services(self):
        from fieldops.tools.services import SERVICE_CATALOG, resolve_service
        assert resolve_service(next(iter(SERVICE_CATALOG))) is not None

    def test_import_collaborators(self):
        from fieldops.tools.availability import is_available
        from fieldops.tools.evidence import upload_photo
        from fieldops.tools.invoicing import build_invoice_draft
        from fieldops.tools.location import capture_location
        from fieldops.tools.messaging import InMemoryMailer
        from fieldops.tools.pricing import estimate
        assert callable(is_available) and callable(estimate)
        assert InMemoryMailer().outbox == []


class TestTemplateImports:
    def test_import_notification_templates(self):
        from fieldops.templates.notification_templates import TEMPLATES
        assert "work_completed" in TEMPLATES
