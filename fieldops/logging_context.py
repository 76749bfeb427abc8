"""Per-operation logging context for lifecycle handlers.

Each handler call is tagged with a short request id and the acting user.
Loggers obtained through ``get_request_logger`` stamp both onto every
record, so a formatter can print ``%(request_id)s %(actor_id)s`` and one
assignment or completion can be followed through engine, store and
collaborator logs.

Usage:
    from fieldops.logging_context import begin_request, get_request_logger

    logger = get_request_logger(__name__)
    request_id = begin_request("u-admin")
    logger.info("Assigning employee")  # record.request_id, record.actor_id
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Optional

UNSET = "-"

_request_id: ContextVar[str] = ContextVar("request_id", default=UNSET)
_actor_id: ContextVar[str] = ContextVar("actor_id", default=UNSET)


def new_request_id() -> str:
    return f"REQ-{uuid.uuid4().hex[:8]}"


def begin_request(actor_id: Optional[str] = None) -> str:
    """Start a new unit of work: fresh request id, bound to ``actor_id``."""
    request_id = new_request_id()
    _request_id.set(request_id)
    _actor_id.set(actor_id or UNSET)
    return request_id


def set_request_id(request_id: str) -> None:
    _request_id.set(request_id)


def get_request_id() -> str:
    return _request_id.get()


def get_actor_id() -> str:
    return _actor_id.get()


class LifecycleContextFilter(logging.Filter):
    """Adds ``request_id`` and ``actor_id`` attributes to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        record.actor_id = _actor_id.get()  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not any(isinstance(f, LifecycleContextFilter) for f in logger.filters):
        logger.addFilter(LifecycleContextFilter())
    return logger
