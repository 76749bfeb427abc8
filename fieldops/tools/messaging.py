"""
Notification/email collaborator.

In production, this would enqueue a row in the email queue consumed by the
SMTP worker and create an in-app notification. ``send`` returns True when
the message was accepted and False (or raises) when it was not.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

from fieldops.templates.notification_templates import render_notification

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send(
        self,
        recipient_email: str,
        recipient_name: str,
        template_type: str,
        data: dict[str, Any],
        language: str,
    ) -> bool: ...


@dataclass
class OutboundMessage:
    """A rendered message accepted by the in-memory mailer."""
    recipient_email: str
    recipient_name: str
    template_type: str
    language: str
    subject: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)
    queued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class InMemoryMailer:
    """Renders and stores messages instead of sending them."""

    def __init__(self) -> None:
        self.outbox: list[OutboundMessage] = []

    def send(
        self,
        recipient_email: str,
        recipient_name: str,
        template_type: str,
        data: dict[str, Any],
        language: str,
    ) -> bool:
        rendered = render_notification(template_type, data, language)
        self.outbox.append(
            OutboundMessage(
                recipient_email=recipient_email,
                recipient_name=recipient_name,
                template_type=template_type,
                language=language,
                subject=rendered.subject,
                body=rendered.body,
                data=dict(data),
            )
        )
        logger.debug("Queued '%s' for %s", template_type, recipient_email)
        return True

    def sent_to(self, recipient_email: str) -> list[OutboundMessage]:
        return [m for m in self.outbox if m.recipient_email == recipient_email]
