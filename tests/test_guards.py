"""Tests for the lifecycle guards in isolation."""

import pytest

from fieldops.config import CompletionConfig
from fieldops.errors import ErrorCode
from fieldops.lifecycle.guards import (
    AuthorizationGuard,
    CompletionGuard,
    GuardRejection,
    SchedulingGuard,
    StateGuard,
    missing_evidence,
    require,
)
from fieldops.lifecycle.state_machine import LifecycleTrigger, OrderState, OrderStateMachine
from fieldops.schemas.actor_schema import Actor, Role
from fieldops.schemas.booking_schema import BookingPhoto, Employee, PhotoType
from tests.conftest import REQUIRED_ITEMS, SERVICE, make_booking


@pytest.fixture
def maria_employee():
    return Employee(id="EMP-MARIA", name="Maria", user_id="u-maria", skills={SERVICE})


class TestAuthorizationGuard:
    def test_admin_passes(self):
        assert AuthorizationGuard().require_admin(Actor("u-1", Role.ADMIN)).passed

    @pytest.mark.parametrize("role", [Role.CLIENT, Role.EMPLOYEE])
    def test_non_admin_fails(self, role):
        result = AuthorizationGuard().require_admin(Actor("u-1", role))
        assert result.error == ErrorCode.NOT_AUTHORIZED

    def test_assigned_employee(self, maria_employee):
        actor = Actor("u-maria", Role.EMPLOYEE)
        result = AuthorizationGuard().require_assigned_employee(actor, make_booking(), maria_employee)
        assert result.passed

    def test_employee_without_record(self):
        actor = Actor("u-maria", Role.EMPLOYEE)
        result = AuthorizationGuard().require_assigned_employee(actor, make_booking(), None)
        assert result.error == ErrorCode.NOT_AUTHORIZED

    def test_not_assigned(self, maria_employee):
        actor = Actor("u-maria", Role.EMPLOYEE)
        booking = make_booking(employee_id="EMP-JOHN")
        result = AuthorizationGuard().require_assigned_employee(actor, booking, maria_employee)
        assert not result.passed


class TestStateGuard:
    def test_valid_trigger(self):
        assert StateGuard().check(OrderStateMachine(OrderState.CONFIRMED), LifecycleTrigger.START).passed

    def test_invalid_trigger(self):
        result = StateGuard().check(OrderStateMachine(OrderState.COMPLETED), LifecycleTrigger.CANCEL)
        assert result.error == ErrorCode.INVALID_STATE


class TestSchedulingGuard:
    def test_inactive_employee(self, maria_employee):
        inactive = maria_employee.model_copy(update={"active": False})
        result = SchedulingGuard().check_employee(inactive, make_booking())
        assert result.error == ErrorCode.EMPLOYEE_UNAVAILABLE

    def test_conflict_message_names_booking(self, maria_employee):
        existing = make_booking("BK-OLD")
        candidate = make_booking("BK-NEW", employee_id=None, service_time="10:00")
        result = SchedulingGuard().check_availability(maria_employee, candidate, [existing])
        assert result.error == ErrorCode.EMPLOYEE_UNAVAILABLE
        assert "BK-OLD" in result.message


class TestCompletionGuard:
    def test_all_gate(self, tracker):
        rows = tracker.initialize("BK-1", REQUIRED_ITEMS)
        guard = CompletionGuard(tracker, CompletionConfig(checklist_gate="all"))
        assert guard.check_checklist("BK-1").error == ErrorCode.CHECKLIST_INCOMPLETE
        for row in rows:
            tracker.toggle(row.id, True)
        assert guard.check_checklist("BK-1").passed

    def test_evidence_optional_by_default(self, tracker):
        guard = CompletionGuard(tracker, CompletionConfig(require_photo_evidence=False))
        assert guard.check_evidence([]).passed

    def test_evidence_required(self, tracker):
        guard = CompletionGuard(tracker, CompletionConfig(require_photo_evidence=True))
        before = BookingPhoto(id="P", booking_id="BK-1", photo_type=PhotoType.BEFORE,
                              photo_url="u", uploaded_by="u-maria")
        result = guard.check_evidence([before])
        assert result.error == ErrorCode.EVIDENCE_MISSING
        assert "after" in result.message
        assert missing_evidence([before]) == ["after"]


class TestRequire:
    def test_raises_on_failure(self):
        failed = AuthorizationGuard().require_admin(Actor("u-1", Role.CLIENT))
        with pytest.raises(GuardRejection) as excinfo:
            require(failed)
        assert excinfo.value.result is failed
