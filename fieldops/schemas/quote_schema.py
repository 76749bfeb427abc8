"""Quote request, quote record and price breakdown models."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PropertyType(str, Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"


class Frequency(str, Enum):
    ONCE = "once"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class QuoteStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class ServiceCatalogEntry(BaseModel):
    """Immutable pricing reference data for one service type."""

    service_type: str
    name_en: str
    name_es: str = ""
    base_price: float = Field(ge=0)
    price_per_area_unit: float = Field(ge=0)
    active: bool = True


class PriceBreakdown(BaseModel):
    """Derived price estimate. Only ever stored as part of a Quote."""

    base_price: float
    area_charge: float
    frequency_discount: float
    subtotal: float
    total: float
    market_average: str
    is_competitive: bool


class QuoteRequest(BaseModel):
    """Client-submitted quote request, before pricing.

    Values are checked by the lifecycle engine rather than here so a bad
    request comes back as a typed rejection instead of a validation error.
    """

    service_type: str
    property_type: PropertyType = PropertyType.RESIDENTIAL
    area: int
    frequency: Frequency = Frequency.ONCE
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    preferred_date: Optional[date] = None
    preferred_time: Optional[str] = None
    client_notes: str = ""
    selected_item_ids: list[str] = Field(default_factory=list)


class Quote(BaseModel):
    """A priced, not-yet-scheduled service request."""

    id: str
    requester_id: str
    service_type: str
    property_type: PropertyType
    area: int = Field(gt=0)
    frequency: Frequency
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    preferred_date: Optional[date] = None
    preferred_time: Optional[str] = None
    price: PriceBreakdown
    status: QuoteStatus = QuoteStatus.PENDING
    client_notes: str = ""
    admin_notes: str = ""
    selected_item_ids: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
