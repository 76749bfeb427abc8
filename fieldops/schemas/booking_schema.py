"""Booking, employee, field evidence and audit history models."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from fieldops.utils import is_valid_time


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class LocationType(str, Enum):
    START = "start"
    END = "end"


class PhotoType(str, Enum):
    BEFORE = "before"
    AFTER = "after"


class Booking(BaseModel):
    """A scheduled, assignable unit of work derived from an approved quote."""

    id: str
    quote_id: str
    requester_id: str
    service_type: str
    service_date: date
    service_time: str
    employee_id: Optional[str] = None
    status: BookingStatus = BookingStatus.CONFIRMED
    final_price: float = Field(ge=0)
    payment_completed: bool = False
    estimated_duration: Optional[int] = Field(default=None, gt=0)
    employee_notes: str = ""
    service_address: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("service_time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        if not is_valid_time(value):
            raise ValueError(f"service_time must be HH:MM, got {value!r}")
        return value.strip()


class Employee(BaseModel):
    """Field employee record. Managed by admins, referenced by bookings."""

    id: str
    name: str
    user_id: Optional[str] = None
    email: str = ""
    phone: str = ""
    hourly_rate: float = Field(default=0.0, ge=0)
    skills: set[str] = Field(default_factory=set)
    active: bool = True

    def has_skill(self, service_type: str) -> bool:
        wanted = service_type.lower().strip()
        return any(skill.lower().strip() == wanted for skill in self.skills)


class LocationFix(BaseModel):
    """A single GPS reading returned by the location collaborator."""

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    accuracy: Optional[float] = None


class BookingLocation(BaseModel):
    """Start or end location recorded for a field-work transition."""

    id: str
    booking_id: str
    location_type: LocationType
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    recorded_at: datetime = Field(default_factory=_utcnow)


class BookingPhoto(BaseModel):
    """Before/after evidence photo stored for a booking."""

    id: str
    booking_id: str
    photo_type: PhotoType
    photo_url: str
    uploaded_by: str
    room_area: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


class StatusChange(BaseModel):
    """Audit entry for one applied quote or booking transition."""

    entity_id: str
    from_state: Optional[str] = None
    to_state: str
    trigger: str
    actor_id: Optional[str] = None
    at: datetime = Field(default_factory=_utcnow)
