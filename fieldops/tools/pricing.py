"""
Price estimation engine.

Pure functions only: service parameters in, a PriceBreakdown out. Catalog
lookups happen in ``quote_for_service`` so ``estimate`` itself can be
unit-tested with arbitrary prices.
"""

import logging
from typing import Union

from fieldops.errors import InvalidInputError
from fieldops.schemas.quote_schema import Frequency, PriceBreakdown, PropertyType
from fieldops.tools.services import get_catalog_entry
from fieldops.utils import parse_price_range

logger = logging.getLogger(__name__)

FREQUENCY_DISCOUNTS: dict[Frequency, float] = {
    Frequency.ONCE: 0.0,
    Frequency.WEEKLY: 0.15,
    Frequency.BIWEEKLY: 0.10,
    Frequency.MONTHLY: 0.05,
}

# Non-binding market ranges shown next to an estimate.
MARKET_RANGES: dict[str, str] = {
    "Residential Cleaning": "$100-$400",
    "Commercial Cleaning": "$150-$1000",
    "Deep Cleaning": "$200-$600",
    "Post-Construction Cleaning": "$300-$1500",
    "Window Cleaning": "$80-$300",
    "Carpet Cleaning": "$120-$400",
    "Office Cleaning": "$500-$4000",
}
DEFAULT_MARKET_RANGE = "$100-$500"


def _to_frequency(value: Union[Frequency, str]) -> Frequency:
    try:
        return Frequency(value)
    except ValueError:
        raise InvalidInputError(f"Unknown frequency: {value!r}") from None


def market_average(service_type: str) -> str:
    """Return the market range string for a service, or the default range."""
    return MARKET_RANGES.get(service_type, DEFAULT_MARKET_RANGE)


def estimate(
    service_type: str,
    property_type: Union[PropertyType, str],
    area: int,
    frequency: Union[Frequency, str],
    base_price: float,
    price_per_area_unit: float,
) -> PriceBreakdown:
    """
    Compute a price breakdown for a service request.

    Money is rounded to cents at each step and ``total`` is derived from
    the rounded subtotal and discount, so ``total == subtotal - discount``
    holds exactly on the returned values.

    Raises:
        InvalidInputError: If area is not positive, a price is negative,
            or the frequency or property type is unknown.
    """
    if area is None or area <= 0:
        raise InvalidInputError(f"Area must be greater than zero, got {area!r}")
    if base_price < 0:
        raise InvalidInputError(f"Base price must be >= 0, got {base_price!r}")
    if price_per_area_unit < 0:
        raise InvalidInputError(
            f"Price per area unit must be >= 0, got {price_per_area_unit!r}"
        )
    try:
        PropertyType(property_type)
    except ValueError:
        raise InvalidInputError(f"Unknown property type: {property_type!r}") from None
    rate = FREQUENCY_DISCOUNTS[_to_frequency(frequency)]

    area_charge = round(area * price_per_area_unit, 2)
    subtotal = round(base_price + area_charge, 2)
    discount = round(subtotal * rate, 2)
    total = round(subtotal - discount, 2)

    market = market_average(service_type)
    low, high = parse_price_range(market)

    return PriceBreakdown(
        base_price=round(base_price, 2),
        area_charge=area_charge,
        frequency_discount=discount,
        subtotal=subtotal,
        total=total,
        market_average=market,
        is_competitive=total <= (low + high) / 2,
    )


def quote_for_service(
    service_type: str,
    property_type: Union[PropertyType, str],
    area: int,
    frequency: Union[Frequency, str],
) -> PriceBreakdown:
    """Estimate using catalog prices for a known service.

    Raises:
        InvalidInputError: If the service is not in the catalog.
    """
    entry = get_catalog_entry(service_type)
    if entry is None or not entry.active:
        raise InvalidInputError(f"Unknown service type: {service_type!r}")
    breakdown = estimate(
        entry.service_type,
        property_type,
        area,
        frequency,
        entry.base_price,
        entry.price_per_area_unit,
    )
    logger.debug("Estimated %s: total=%.2f", entry.service_type, breakdown.total)
    return breakdown


def format_currency(amount: float) -> str:
    """Format an amount as US dollars, e.g. ``$1,234.50``."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"
