"""Tests for the notification dispatcher and bilingual templates."""

import pytest

from fieldops.errors import ErrorCode
from fieldops.lifecycle.notifications import NotificationDispatcher
from fieldops.schemas.booking_schema import BookingStatus
from fieldops.schemas.quote_schema import QuoteStatus
from fieldops.templates.notification_templates import TEMPLATES, render_notification
from tests.conftest import approved_booking, make_request


class ExplodingMailer:
    def send(self, recipient_email, recipient_name, template_type, data, language):
        raise ConnectionError("SMTP relay unreachable")


class RefusingMailer:
    def send(self, recipient_email, recipient_name, template_type, data, language):
        return False


class DirectoryOutage:
    def get_user(self, user_id):
        raise ConnectionError("identity service down")

    def list_admins(self):
        raise ConnectionError("identity service down")


class TestDispatcher:
    def test_successful_delivery_logged(self, dispatcher, mailer):
        report = dispatcher.notify_user("u-client", "quote_rejected", {"service": "Deep Cleaning"})
        assert report.success
        assert report.error is None
        assert dispatcher.delivery_log == [report]
        assert len(mailer.outbox) == 1

    def test_mailer_exception_is_recorded(self, directory):
        dispatcher = NotificationDispatcher(ExplodingMailer(), directory)
        report = dispatcher.notify_user("u-client", "quote_rejected", {"service": "x"})
        assert not report.success
        assert report.error == ErrorCode.DELIVERY_FAILED
        assert "SMTP relay unreachable" in report.message
        assert dispatcher.failures() == [report]

    def test_mailer_refusal_is_a_failure(self, directory):
        dispatcher = NotificationDispatcher(RefusingMailer(), directory)
        assert dispatcher.notify_user("u-client", "quote_rejected", {}).error == ErrorCode.DELIVERY_FAILED

    def test_unknown_recipient(self, dispatcher):
        report = dispatcher.notify_user("u-ghost", "quote_rejected", {})
        assert report.error == ErrorCode.DELIVERY_FAILED
        assert "not found" in report.message

    def test_unknown_template(self, dispatcher, mailer):
        report = dispatcher.notify_user("u-client", "birthday_card", {})
        assert not report.success
        assert mailer.outbox == []

    def test_notify_admins(self, dispatcher):
        reports = dispatcher.notify_admins("quote_received", {"service": "x"})
        assert [r.recipient_id for r in reports] == ["u-admin"]

    def test_recipient_lookup_error_is_recorded(self, mailer):
        dispatcher = NotificationDispatcher(mailer, DirectoryOutage())
        report = dispatcher.notify_user("u-client", "quote_rejected", {})
        assert not report.success
        assert report.error == ErrorCode.DELIVERY_FAILED
        assert report.message == "Recipient lookup failed"
        assert dispatcher.failures() == [report]
        assert mailer.outbox == []

    def test_admin_lookup_error_is_recorded(self, mailer):
        dispatcher = NotificationDispatcher(mailer, DirectoryOutage())
        reports = dispatcher.notify_admins("quote_received", {})
        assert len(reports) == 1
        assert reports[0].error == ErrorCode.DELIVERY_FAILED

    def test_lookup_error_after_commit_keeps_assignment(self, engine, client, admin, store):
        booking = approved_booking(engine, client, admin)
        engine.dispatcher.directory = DirectoryOutage()
        result = engine.assign_employee(admin, booking.id, "EMP-MARIA")
        assert result.success
        assert [d.error for d in result.deliveries] == [ErrorCode.DELIVERY_FAILED]
        assert store.get_booking(booking.id).employee_id == "EMP-MARIA"

    def test_failure_does_not_roll_back_transition(self, engine, client, admin, directory, store):
        engine.dispatcher = NotificationDispatcher(ExplodingMailer(), directory)
        quote = engine.submit_quote(client, make_request()).quote
        result = engine.approve_quote(admin, quote.id)
        assert result.success
        assert [d.error for d in result.deliveries] == [ErrorCode.DELIVERY_FAILED]
        assert store.get_quote(quote.id).status == QuoteStatus.APPROVED
        assert store.get_booking(result.booking.id).status == BookingStatus.CONFIRMED

    def test_one_message_per_transition(self, engine, client, admin, mailer):
        booking = approved_booking(engine, client, admin)
        engine.assign_employee(admin, booking.id, "EMP-MARIA")
        types = [m.template_type for m in mailer.sent_to("carmen@example.com")]
        assert types == ["quote_approved", "employee_assigned"]

    def test_unassign_and_cancel_are_silent(self, engine, client, admin, mailer):
        booking = approved_booking(engine, client, admin)
        engine.assign_employee(admin, booking.id, "EMP-MARIA")
        count = len(mailer.outbox)
        engine.unassign_employee(admin, booking.id)
        engine.cancel_booking(admin, booking.id)
        assert len(mailer.outbox) == count


class TestTemplates:
    @pytest.mark.parametrize("template_type", sorted(TEMPLATES))
    def test_every_template_has_both_languages(self, template_type):
        assert set(TEMPLATES[template_type]) == {"en", "es"}

    def test_render_english(self):
        message = render_notification("employee_assigned", {
            "employee_name": "Maria", "service": "Deep Cleaning", "date": "2024-01-10", "time": "09:00",
        }, "en")
        assert message.body == "Maria has been assigned to your Deep Cleaning on 2024-01-10 at 09:00."

    def test_unsupported_language_falls_back(self):
        message = render_notification("quote_rejected", {"service": "x"}, "fr")
        assert message.subject == TEMPLATES["quote_rejected"]["en"]["subject"]

    def test_missing_placeholder_left_visible(self):
        message = render_notification("work_completed", {"service": "x"}, "en")
        assert "{date}" in message.body

    def test_none_rendered_as_dash(self):
        message = render_notification("quote_received", {"preferred_date": None}, "en")
        assert "Preferred date: -" in message.body

    def test_company_email_injected(self):
        from fieldops.config import settings

        message = render_notification("quote_rejected", {"service": "x"}, "en")
        assert settings.company.email in message.body

    def test_unknown_template(self):
        with pytest.raises(KeyError):
            render_notification("nope", {}, "en")
