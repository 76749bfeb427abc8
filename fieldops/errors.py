"""Error taxonomy shared by the pricing engine, collaborators and lifecycle engine."""

from enum import Enum


class ErrorCode(str, Enum):
    """Typed reasons a lifecycle operation or collaborator call can fail."""
    INVALID_INPUT = "invalid_input"
    NOT_AUTHORIZED = "not_authorized"
    INVALID_STATE = "invalid_state"
    CHECKLIST_INCOMPLETE = "checklist_incomplete"
    EMPLOYEE_UNAVAILABLE = "employee_unavailable"
    LOCATION_UNAVAILABLE = "location_unavailable"
    DELIVERY_FAILED = "delivery_failed"
    NOT_FOUND = "not_found"
    UPLOAD_FAILED = "upload_failed"
    EVIDENCE_MISSING = "evidence_missing"


class InvalidInputError(ValueError):
    """Raised by pure functions when their preconditions are violated."""
