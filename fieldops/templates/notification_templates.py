"""Bilingual message templates for lifecycle notifications."""

from dataclasses import dataclass
from typing import Any

from fieldops.config import SUPPORTED_LANGUAGES, settings


@dataclass(frozen=True)
class RenderedMessage:
    subject: str
    title: str
    body: str


TEMPLATES: dict[str, dict[str, dict[str, str]]] = {
    "quote_received": {
        "en": {
            "subject": "New Quote Request Received",
            "title": "New Quote Request",
            "body": (
                "A new quote request for {service} has been submitted.\n"
                "Property type: {property_type}\n"
                "Area: {area} sq ft\n"
                "Estimated price: {estimated_price}\n"
                "Preferred date: {preferred_date}\n"
                "Please review and respond to this quote in your admin dashboard."
            ),
        },
        "es": {
            "subject": "Nueva Solicitud de Cotización Recibida",
            "title": "Nueva Solicitud de Cotización",
            "body": (
                "Se ha enviado una nueva solicitud de cotización para {service}.\n"
                "Tipo de propiedad: {property_type}\n"
                "Área: {area} pies²\n"
                "Precio estimado: {estimated_price}\n"
                "Fecha preferida: {preferred_date}\n"
                "Por favor revise y responda a esta cotización en su panel de administración."
            ),
        },
    },
    "quote_approved": {
        "en": {
            "subject": "Your Quote Has Been Approved",
            "title": "Quote Approved",
            "body": (
                "Great news! Your quote for {service} has been approved.\n"
                "Final price: {final_price}\n"
                "Scheduled for {date} at {time}."
            ),
        },
        "es": {
            "subject": "Su Cotización Ha Sido Aprobada",
            "title": "Cotización Aprobada",
            "body": (
                "¡Buenas noticias! Su cotización para {service} ha sido aprobada.\n"
                "Precio final: {final_price}\n"
                "Programado para el {date} a las {time}."
            ),
        },
    },
    "quote_rejected": {
        "en": {
            "subject": "Update on Your Quote Request",
            "title": "Quote Update",
            "body": (
                "Thank you for your interest. Unfortunately, we are unable to proceed "
                "with your quote request for {service} at this time.\n"
                "Please contact {company_email} if you would like to discuss alternatives."
            ),
        },
        "es": {
            "subject": "Actualización de Su Solicitud de Cotización",
            "title": "Actualización de Cotización",
            "body": (
                "Gracias por su interés. Lamentablemente, no podemos proceder con su "
                "solicitud de cotización para {service} en este momento.\n"
                "Contacte a {company_email} si desea discutir otras opciones."
            ),
        },
    },
    "employee_assigned": {
        "en": {
            "subject": "A Cleaner Has Been Assigned",
            "title": "Employee Assigned",
            "body": "{employee_name} has been assigned to your {service} on {date} at {time}.",
        },
        "es": {
            "subject": "Se Ha Asignado un Empleado",
            "title": "Empleado Asignado",
            "body": "{employee_name} ha sido asignado a su {service} el {date} a las {time}.",
        },
    },
    "work_completed": {
        "en": {
            "subject": "Your Service Has Been Completed",
            "title": "Work Completed",
            "body": (
                "Your {service} on {date} has been completed. "
                "Check the photos and details in your client portal.\n"
                "Total: {final_price}"
            ),
        },
        "es": {
            "subject": "Su Servicio Ha Sido Completado",
            "title": "Trabajo Completado",
            "body": (
                "Su {service} del {date} ha sido completado. "
                "Revise las fotos y detalles en su portal de cliente.\n"
                "Total: {final_price}"
            ),
        },
    },
}


class _Defaults(dict):
    """Leave unknown placeholders visible instead of raising KeyError."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def render_notification(template_type: str, data: dict[str, Any], language: str) -> RenderedMessage:
    """Render a template in the requested language, falling back to the company default.

    Raises:
        KeyError: If the template type is unknown.
    """
    if template_type not in TEMPLATES:
        raise KeyError(f"Unknown notification template: {template_type}")
    if language not in SUPPORTED_LANGUAGES:
        language = settings.company.default_language
    template = TEMPLATES[template_type][language]
    values = _Defaults({"company_email": settings.company.email, "company_name": settings.company.name})
    values.update({k: ("-" if v is None else v) for k, v in data.items()})
    return RenderedMessage(
        subject=template["subject"],
        title=template["title"],
        body=template["body"].format_map(values),
    )
