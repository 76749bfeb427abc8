"""Tests for the price estimation engine and service catalog."""

import pytest

from fieldops.errors import InvalidInputError
from fieldops.schemas.quote_schema import Frequency, PropertyType
from fieldops.tools.pricing import (
    DEFAULT_MARKET_RANGE,
    FREQUENCY_DISCOUNTS,
    estimate,
    format_currency,
    market_average,
    quote_for_service,
)
from fieldops.tools.services import SERVICE_CATALOG, get_catalog_entry, match_service, resolve_service


class TestEstimate:
    def test_weekly_discount_example(self):
        price = estimate("x", "residential", 1000, "weekly", 50, 0.10)
        assert price.area_charge == pytest.approx(100.0)
        assert price.subtotal == pytest.approx(150.0)
        assert price.frequency_discount == pytest.approx(22.5)
        assert price.total == pytest.approx(127.5)

    def test_once_has_no_discount(self):
        price = estimate("x", PropertyType.COMMERCIAL, 500, Frequency.ONCE, 80, 0.08)
        assert price.frequency_discount == 0
        assert price.total == price.subtotal == pytest.approx(120.0)

    @pytest.mark.parametrize("frequency,rate", [
        ("weekly", 0.15), ("biweekly", 0.10), ("monthly", 0.05), ("once", 0.0),
    ])
    def test_discount_rates(self, frequency, rate):
        assert FREQUENCY_DISCOUNTS[Frequency(frequency)] == rate
        price = estimate("x", "residential", 1000, frequency, 100, 0.1)
        assert price.frequency_discount == pytest.approx(200 * rate)

    def test_total_equals_subtotal_minus_discount(self):
        price = estimate("Deep Cleaning", "residential", 1337, "biweekly", 150, 0.12)
        assert price.total == round(price.subtotal - price.frequency_discount, 2)
        assert price.subtotal == round(price.base_price + price.area_charge, 2)

    def test_is_deterministic(self):
        first = estimate("Carpet Cleaning", "residential", 640, "monthly", 90, 0.15)
        second = estimate("Carpet Cleaning", "residential", 640, "monthly", 90, 0.15)
        assert first == second

    @pytest.mark.parametrize("area", [0, -5])
    def test_non_positive_area_rejected(self, area):
        with pytest.raises(InvalidInputError, match="Area"):
            estimate("x", "residential", area, "once", 50, 0.1)

    def test_negative_prices_rejected(self):
        with pytest.raises(InvalidInputError):
            estimate("x", "residential", 100, "once", -1, 0.1)
        with pytest.raises(InvalidInputError):
            estimate("x", "residential", 100, "once", 10, -0.1)

    def test_unknown_frequency_rejected(self):
        with pytest.raises(InvalidInputError, match="frequency"):
            estimate("x", "residential", 100, "daily", 10, 0.1)

    def test_unknown_property_type_rejected(self):
        with pytest.raises(InvalidInputError, match="property type"):
            estimate("x", "industrial", 100, "once", 10, 0.1)


class TestMarketAverage:
    def test_known_service_range(self):
        assert market_average("Residential Cleaning") == "$100-$400"

    def test_unknown_service_uses_default(self):
        assert market_average("Pool Cleaning") == DEFAULT_MARKET_RANGE == "$100-$500"

    def test_competitive_at_or_below_midpoint(self):
        # Residential midpoint is 250
        assert estimate("Residential Cleaning", "residential", 100, "once", 250, 0).is_competitive
        assert not estimate("Residential Cleaning", "residential", 100, "once", 251, 0).is_competitive


class TestCatalog:
    def test_catalog_has_all_services(self):
        assert len(SERVICE_CATALOG) == 7

    def test_get_catalog_entry_case_insensitive(self):
        entry = get_catalog_entry("  deep cleaning ")
        assert entry is not None
        assert entry.service_type == "Deep Cleaning"
        assert entry.name_es

    def test_get_catalog_entry_unknown(self):
        assert get_catalog_entry("Pool Cleaning") is None

    def test_match_service_by_alias(self):
        assert match_service("I need my carpets done") == "Carpet Cleaning"

    def test_match_service_empty(self):
        assert match_service("   ") is None

    def test_resolve_service_prefers_exact_name(self):
        assert resolve_service("Deep Cleaning").service_type == "Deep Cleaning"

    def test_resolve_service_falls_back_to_alias(self):
        entry = resolve_service("move-out clean")
        assert entry is not None
        assert entry.service_type == "Deep Cleaning"

    def test_resolve_service_unknown(self):
        assert resolve_service("Pool Cleaning") is None

    def test_quote_for_service_uses_catalog_prices(self):
        entry = get_catalog_entry("Window Cleaning")
        price = quote_for_service("Window Cleaning", "residential", 200, "once")
        assert price.base_price == entry.base_price
        assert price.area_charge == pytest.approx(200 * entry.price_per_area_unit)

    def test_quote_for_unknown_service(self):
        with pytest.raises(InvalidInputError, match="Unknown service"):
            quote_for_service("Pool Cleaning", "residential", 200, "once")


class TestFormatCurrency:
    def test_thousands_separator(self):
        assert format_currency(1234.5) == "$1,234.50"

    def test_negative(self):
        assert format_currency(-3) == "-$3.00"
