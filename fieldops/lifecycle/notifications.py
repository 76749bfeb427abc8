"""
Notification dispatcher for lifecycle events.

Delivery happens after a transition has been committed. A failed delivery
is logged and reported as DELIVERY_FAILED, and the transition stays
applied. Retrying a send may produce a duplicate message, which is
acceptable; a failure is never reported as success.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from fieldops.errors import ErrorCode
from fieldops.schemas.actor_schema import UserProfile
from fieldops.templates.notification_templates import TEMPLATES
from fieldops.tools.identity import IdentityDirectory
from fieldops.tools.messaging import Mailer

logger = logging.getLogger(__name__)


@dataclass
class DeliveryReport:
    """Result of one notification attempt."""
    template_type: str
    recipient_id: str
    success: bool
    recipient_email: Optional[str] = None
    error: Optional[ErrorCode] = None
    message: Optional[str] = None
    attempted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationDispatcher:
    """Resolves recipients, sends through the mailer and keeps a delivery log."""

    def __init__(self, mailer: Mailer, directory: IdentityDirectory) -> None:
        self.mailer = mailer
        self.directory = directory
        self._lock = threading.Lock()
        self._log: list[DeliveryReport] = []

    @property
    def delivery_log(self) -> list[DeliveryReport]:
        with self._lock:
            return list(self._log)

    def failures(self) -> list[DeliveryReport]:
        return [r for r in self.delivery_log if not r.success]

    def _record(self, report: DeliveryReport) -> DeliveryReport:
        with self._lock:
            self._log.append(report)
        return report

    def _failed(self, template_type: str, recipient_id: str, reason: str,
                recipient_email: Optional[str] = None) -> DeliveryReport:
        logger.warning(
            "Delivery of '%s' to %s failed: %s", template_type, recipient_id, reason
        )
        return self._record(DeliveryReport(
            template_type=template_type,
            recipient_id=recipient_id,
            recipient_email=recipient_email,
            success=False,
            error=ErrorCode.DELIVERY_FAILED,
            message=reason,
        ))

    def send(self, recipient: UserProfile, template_type: str, data: dict[str, Any]) -> DeliveryReport:
        """Send one message in the recipient's language."""
        if template_type not in TEMPLATES:
            return self._failed(template_type, recipient.id, "Unknown template", recipient.email)
        try:
            accepted = self.mailer.send(
                recipient.email, recipient.name, template_type, data, recipient.language
            )
        except Exception as exc:
            logger.exception("Mailer raised while sending '%s' to %s", template_type, recipient.id)
            return self._failed(template_type, recipient.id, str(exc) or type(exc).__name__,
                                recipient.email)
        if not accepted:
            return self._failed(template_type, recipient.id, "Mailer rejected the message",
                                recipient.email)

        logger.info("Delivered '%s' to %s", template_type, recipient.id)
        return self._record(DeliveryReport(
            template_type=template_type,
            recipient_id=recipient.id,
            recipient_email=recipient.email,
            success=True,
        ))

    def notify_user(self, user_id: str, template_type: str, data: dict[str, Any]) -> DeliveryReport:
        try:
            recipient = self.directory.get_user(user_id)
        except Exception:
            logger.exception("Directory lookup for %s raised", user_id)
            return self._failed(template_type, user_id, "Recipient lookup failed")
        if recipient is None:
            return self._failed(template_type, user_id, "Recipient not found")
        return self.send(recipient, template_type, data)

    def notify_admins(self, template_type: str, data: dict[str, Any]) -> list[DeliveryReport]:
        try:
            admins = self.directory.list_admins()
        except Exception:
            logger.exception("Directory lookup for administrators raised")
            return [self._failed(template_type, "admins", "Recipient lookup failed")]
        if not admins:
            logger.warning("No administrators to notify for '%s'", template_type)
        return [self.send(admin, template_type, data) for admin in admins]
