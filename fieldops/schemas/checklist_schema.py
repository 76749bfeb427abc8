"""Checklist templates, items and per-booking completion rows."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChecklistFrequency(str, Enum):
    EVERYDAY = "everyday"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ALL = "all"


class ChecklistTemplate(BaseModel):
    """Admin-defined group of tasks for a service type and cadence."""

    id: str
    service_type: str
    frequency: ChecklistFrequency = ChecklistFrequency.ALL
    room_type: str = "general"
    name_en: str
    name_es: str = ""
    active: bool = True


class ChecklistItem(BaseModel):
    """A single task inside a template, with bilingual text."""

    id: str
    template_id: str
    name_en: str
    name_es: str = ""
    description_en: Optional[str] = None
    description_es: Optional[str] = None
    order_index: int = 0
    is_required: bool = False


class BookingChecklistCompletion(BaseModel):
    """Snapshot of one checklist item on a booking and its completion state.

    Item text and the required flag are copied at booking creation so later
    template edits do not change work that was already agreed.
    """

    id: str
    booking_id: str
    checklist_item_id: str
    name_en: str
    name_es: str = ""
    is_required: bool = False
    order_index: int = 0
    completed: bool = False
    completed_at: Optional[datetime] = None
    quality_rating: Optional[int] = None
    notes: str = ""
    created_at: datetime = Field(default_factory=_utcnow)


class ChecklistProgress(BaseModel):
    total: int = 0
    completed: int = 0
    percentage: int = 0
